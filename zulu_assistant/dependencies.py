from functools import lru_cache

from zulu_assistant.config import settings
from zulu_assistant.database import SessionLocal
from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.conversation_service import ConversationService
from zulu_assistant.services.ledger_service import LedgerService
from zulu_assistant.services.sequence_service import DailySequenceGenerator
from zulu_assistant.services.session_service import InMemorySessionStore, SessionStore, SqlSessionStore
from zulu_assistant.services.store import InMemorySheetStore, SheetStore, SqlSheetStore

logger = get_logger("dependencies")


@lru_cache(maxsize=1)
def get_sheet_store() -> SheetStore:
    if settings.store_backend == "memory":
        return InMemorySheetStore()
    return SqlSheetStore(SessionLocal)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    if settings.session_backend == "sql":
        return SqlSessionStore(SessionLocal, ttl_seconds=settings.session_ttl_seconds)
    return InMemorySessionStore(
        ttl_seconds=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )


@lru_cache(maxsize=1)
def get_conversation_service() -> ConversationService:
    store = get_sheet_store()
    logger.info(
        "Conversation service created",
        extra={"context": {"store_backend": settings.store_backend, "session_backend": settings.session_backend}},
    )
    return ConversationService(
        sessions=get_session_store(),
        ledger=LedgerService(store, DailySequenceGenerator(store)),
    )
