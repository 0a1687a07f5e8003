from fastapi import APIRouter, Depends, HTTPException

from zulu_assistant.dependencies import get_session_store
from zulu_assistant.logging_config import get_logger
from zulu_assistant.schemas.admin import CatalogRefreshResponse, SessionDebugResponse
from zulu_assistant.services.catalog_service import refresh_catalog
from zulu_assistant.services.session_service import SessionStore
from zulu_assistant.services.state_machine import state_for

logger = get_logger("admin")

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/catalog/refresh", response_model=CatalogRefreshResponse)
def refresh_catalog_tables():
    """Reload categories and galleries from the CSV files."""
    result = refresh_catalog()
    if not result.ok:
        return CatalogRefreshResponse(success=False, categories=0, galleries=0, error=result.error)
    catalog = result.value
    logger.info(f"Catalog refreshed: {len(catalog.categories)} categories, {len(catalog.galleries)} galleries")
    return CatalogRefreshResponse(
        success=True,
        categories=len(catalog.categories),
        galleries=len(catalog.galleries),
    )


@router.get("/sessions/{session_id}", response_model=SessionDebugResponse)
def get_session_debug(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionDebugResponse(
        id=session.id,
        state=state_for(session.pending_clarification).value,
        history=session.history,
        pending_clarification=session.pending_clarification,
        last_detected_intent=session.last_detected_intent,
        last_detected_intent_at=session.last_detected_intent_at,
        updated_at=session.updated_at,
    )
