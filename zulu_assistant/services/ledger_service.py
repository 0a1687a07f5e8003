from datetime import datetime, timezone
from typing import List, Optional

from zulu_assistant.logging_config import get_logger, mask_phone
from zulu_assistant.services.result import STORE_ERROR, Result
from zulu_assistant.services.sequence_service import DailySequenceGenerator, GeneratedId
from zulu_assistant.services.store.base import (
    BILLING_SHEET,
    CONVERSATION_SHEET,
    SheetStore,
    StoreUnavailableError,
)

logger = get_logger("ledger_service")

TICKET_CATEGORY = "agent_ticket"
TICKET_HISTORY_ENTRIES = 10


class LedgerService:
    """Writes billing entries, call tickets and conversation turns to sheets."""

    def __init__(self, store: SheetStore, sequence: DailySequenceGenerator):
        self.store = store
        self.sequence = sequence

    @staticmethod
    def _timestamp() -> str:
        return datetime.now(timezone.utc).isoformat()

    def record_billing(
        self,
        session_id: str,
        message: str,
        category: str,
        reason: str = "",
    ) -> Result[GeneratedId]:
        try:
            generated = self.sequence.next(category)
            self.store.append(
                BILLING_SHEET,
                {
                    "id": generated.value,
                    "date": generated.date,
                    "category": category,
                    "session_id": session_id,
                    "message": message,
                    "reason": reason,
                    "created_at": self._timestamp(),
                },
            )
        except StoreUnavailableError as e:
            logger.error(
                "Billing entry not saved",
                extra={"context": {"session": mask_phone(session_id), "error": str(e)}},
            )
            return Result.from_exception(e, STORE_ERROR)
        return Result.success(generated)

    def create_ticket(self, session_id: str, history: Optional[List[dict]] = None) -> Result[GeneratedId]:
        transcript = [
            f"{entry.get('role')}: {entry.get('content')}" for entry in (history or [])[-TICKET_HISTORY_ENTRIES:]
        ]
        try:
            generated = self.sequence.next(TICKET_CATEGORY)
            self.store.append(
                BILLING_SHEET,
                {
                    "id": generated.value,
                    "date": generated.date,
                    "category": TICKET_CATEGORY,
                    "session_id": session_id,
                    "message": "\n".join(transcript),
                    "reason": "call request",
                    "created_at": self._timestamp(),
                },
            )
        except StoreUnavailableError as e:
            logger.error(
                "Ticket not saved",
                extra={"context": {"session": mask_phone(session_id), "error": str(e)}},
            )
            return Result.from_exception(e, STORE_ERROR)
        return Result.success(generated)

    def log_conversation(
        self,
        session_id: str,
        sender_name: str,
        message: str,
        reply: str,
        intent: Optional[str] = None,
    ) -> Result[bool]:
        try:
            self.store.append(
                CONVERSATION_SHEET,
                {
                    "session_id": session_id,
                    "sender_name": sender_name,
                    "message": message,
                    "reply": reply,
                    "intent": intent,
                    "created_at": self._timestamp(),
                },
            )
        except StoreUnavailableError as e:
            logger.error(
                "Conversation turn not logged",
                extra={"context": {"session": mask_phone(session_id), "error": str(e)}},
            )
            return Result.from_exception(e, STORE_ERROR)
        return Result.success(True)
