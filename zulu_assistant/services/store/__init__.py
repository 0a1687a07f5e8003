from zulu_assistant.services.store.base import (
    BILLING_SHEET,
    CONVERSATION_SHEET,
    COUNTER_SHEET,
    SheetStore,
    StoreUnavailableError,
)
from zulu_assistant.services.store.memory_store import InMemorySheetStore
from zulu_assistant.services.store.sql_store import SqlSheetStore

__all__ = [
    "BILLING_SHEET",
    "CONVERSATION_SHEET",
    "COUNTER_SHEET",
    "InMemorySheetStore",
    "SheetStore",
    "SqlSheetStore",
    "StoreUnavailableError",
]
