from sqlalchemy import JSON, Column, Text
from sqlalchemy.types import TIMESTAMP

from zulu_assistant.database import Base


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Text, primary_key=True)  # sender phone number
    history = Column(JSON, nullable=False, default=list)
    pending_clarification = Column(Text)
    last_detected_intent = Column(Text)
    last_detected_intent_at = Column(TIMESTAMP(timezone=True))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False)
