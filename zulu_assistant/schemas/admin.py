from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CatalogRefreshResponse(BaseModel):
    success: bool
    categories: int
    galleries: int
    error: Optional[str] = None


class SessionDebugResponse(BaseModel):
    id: str
    state: str
    history: list[dict]
    pending_clarification: Optional[str] = None
    last_detected_intent: Optional[str] = None
    last_detected_intent_at: Optional[datetime] = None
    updated_at: datetime
