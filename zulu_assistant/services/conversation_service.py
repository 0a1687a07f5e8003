import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger, session_logger
from zulu_assistant.services import gender_service
from zulu_assistant.services.ai_service import (
    EmployeeIntent,
    classify_employee_message,
    generate_reply,
)
from zulu_assistant.services.catalog_service import Catalog, get_catalog
from zulu_assistant.services.intent_service import (
    classify,
    is_greeting_message,
    matches_product_keyword,
    normalize_for_matching,
)
from zulu_assistant.services.ledger_service import LedgerService
from zulu_assistant.services.llm import LLMProvider
from zulu_assistant.services.resolver_service import ResolverWeights, render_resolution, resolve
from zulu_assistant.services.session_service import Session, SessionStore

logger = get_logger("conversation_service")

MSG_GREETING = "Hey there 👋! How can I help you shop today?"
MSG_IMAGE_WITHOUT_TEXT = "Thanks for the picture! 📸 Tell me in a few words what you're looking for and I'll find it."
MSG_ERROR = "Sorry, something went wrong on our side. Please try again in a moment 🙏"

MSG_EMPLOYEE_GREETING = "Hi Boss 👋 How can I help you?"
MSG_EMPLOYEE_FALLBACK = "Hi Boss 👋"
MSG_BILLING_NOTED = "📄 Billing noted boss! Which Order / Invoice should I check?"
MSG_TICKET_CREATED = "📌 Call request noted boss! Ticket: {ticket_id}"
MSG_TICKET_NOT_SAVED = "📌 Call request noted boss! Ticket number will follow shortly."

QUICK_REPLIES = {
    "ok": "Done boss 👍",
    "done": "Done boss 👍",
    "yes": "Done boss 👍",
    "y": "Done boss 👍",
    "thanks": "Always boss 🙌",
    "thank you": "Always boss 🙌",
}

CALL_PATTERN = re.compile(r"\bcall\b")


@dataclass(frozen=True)
class MediaAttachment:
    kind: str
    url: str
    caption: str = ""


@dataclass(frozen=True)
class InboundMessage:
    text: str
    sender_id: str
    sender_name: str = "Customer"
    media: Optional[MediaAttachment] = None


def detect_quick_reply(text: str) -> Optional[str]:
    return QUICK_REPLIES.get(normalize_for_matching(text))


class ConversationService:
    """Turns one inbound message into one reply, updating the sender's session."""

    def __init__(
        self,
        sessions: SessionStore,
        ledger: LedgerService,
        catalog_provider: Callable[[], Catalog] = get_catalog,
        llm_provider: Optional[LLMProvider] = None,
        employee_numbers: Optional[Iterable[str]] = None,
        weights: Optional[ResolverWeights] = None,
        history_limit: Optional[int] = None,
        gender_lookback: Optional[int] = None,
    ):
        self.sessions = sessions
        self.ledger = ledger
        self.catalog_provider = catalog_provider
        self.llm_provider = llm_provider
        self.employee_numbers = set(
            employee_numbers if employee_numbers is not None else settings.employee_numbers
        )
        self.weights = weights or ResolverWeights.from_settings()
        self.history_limit = history_limit if history_limit is not None else settings.history_limit
        self.gender_lookback = gender_lookback if gender_lookback is not None else settings.gender_lookback
        self._employee_locks: dict[str, threading.Lock] = {}
        self._employee_locks_guard = threading.Lock()

    def is_employee(self, sender_id: str) -> bool:
        return sender_id in self.employee_numbers

    def handle_message(self, inbound: InboundMessage) -> str:
        log = session_logger(logger, inbound.sender_id)
        try:
            session = self.sessions.get_or_create(inbound.sender_id)
            text = (inbound.text or "").strip()
            if not text and inbound.media is not None:
                text = (inbound.media.caption or "").strip()
            if not text:
                return MSG_IMAGE_WITHOUT_TEXT if inbound.media is not None else MSG_GREETING

            if self.is_employee(inbound.sender_id):
                log.info("Employee message")
                return self._handle_employee(session, inbound, text)
            return self._handle_customer(session, inbound, text, log)
        except Exception as e:
            log.exception(f"Message handling failed: {e}")
            return MSG_ERROR

    # Customer mode

    def _handle_customer(self, session: Session, inbound: InboundMessage, text: str, log) -> str:
        if session.pending_clarification is not None:
            session.add_message("user", text)
            decision = gender_service.resume(session, text)
            reply = decision.prompt if decision.needs_clarification else self._resolve(decision)
            log.info("Clarification reply", context={"resolved": not decision.needs_clarification})
            self._finish(session, reply)
            self.ledger.log_conversation(session.id, inbound.sender_name, text, reply, "product_search")
            return reply

        if is_greeting_message(text):
            session.add_message("user", text)
            self._finish(session, MSG_GREETING)
            return MSG_GREETING

        session.add_message("user", text)
        match = classify(text)
        session.last_detected_intent = match.category
        session.last_detected_intent_at = datetime.now(timezone.utc)

        if matches_product_keyword(text):
            decision = gender_service.begin(session, text, self.gender_lookback)
            reply = decision.prompt if decision.needs_clarification else self._resolve(decision)
            route = "product_search"
        else:
            reply = generate_reply(text, session.history, self.llm_provider)
            route = "llm"

        log.info("Reply chosen", context={"route": route, "intent": match.category})
        self._finish(session, reply)
        self.ledger.log_conversation(session.id, inbound.sender_name, text, reply, match.category)
        return reply

    def _resolve(self, decision: gender_service.Disambiguation) -> str:
        resolution = resolve(self.catalog_provider(), decision.query, decision.gender, self.weights)
        return render_resolution(resolution, decision.query, decision.gender)

    def _finish(self, session: Session, reply: str) -> None:
        session.add_message("assistant", reply)
        session.truncate_history(self.history_limit)
        self.sessions.save(session)

    # Employee mode

    def _employee_lock(self, session_id: str) -> threading.Lock:
        with self._employee_locks_guard:
            lock = self._employee_locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._employee_locks[session_id] = lock
            return lock

    def _handle_employee(self, session: Session, inbound: InboundMessage, text: str) -> str:
        with self._employee_lock(session.id):
            session.add_message("user", text)
            reply, intent = self._employee_reply(session, text)
            self._finish(session, reply)
        self.ledger.log_conversation(session.id, inbound.sender_name, f"EMPLOYEE: {text}", reply, intent)
        return reply

    def _employee_reply(self, session: Session, text: str) -> tuple[str, str]:
        """Return the reply and the label it is logged under."""
        quick = detect_quick_reply(text)
        if quick:
            return quick, "employee_quick_reply"

        if CALL_PATTERN.search(text.lower()):
            result = self.ledger.create_ticket(session.id, session.history)
            if not result.ok:
                return MSG_TICKET_NOT_SAVED, "employee_call"
            return MSG_TICKET_CREATED.format(ticket_id=result.value.value), "employee_call"

        classification = classify_employee_message(text, self.llm_provider)
        if classification.intent == EmployeeIntent.GREETING:
            return MSG_EMPLOYEE_GREETING, "employee_greeting"

        if classification.intent == EmployeeIntent.BILLING:
            match = classify(text)
            result = self.ledger.record_billing(session.id, text, match.category, classification.reason)
            if result.ok:
                return f"{MSG_BILLING_NOTED}\nRef: {result.value.value}", "employee_billing"
            return MSG_BILLING_NOTED, "employee_billing"

        return MSG_EMPLOYEE_FALLBACK, "employee_unclassified"
