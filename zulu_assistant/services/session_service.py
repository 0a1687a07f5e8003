import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from zulu_assistant.logging_config import get_logger, mask_phone
from zulu_assistant.models import ChatSession

logger = get_logger("session_service")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    id: str
    history: List[dict] = field(default_factory=list)
    pending_clarification: Optional[str] = None
    last_detected_intent: Optional[str] = None
    last_detected_intent_at: Optional[datetime] = None
    updated_at: datetime = field(default_factory=_utcnow)

    def add_message(self, role: str, content: str) -> None:
        self.history.append({"role": role, "content": content})

    def truncate_history(self, limit: int) -> None:
        if limit <= 0:
            self.history = []
        elif len(self.history) > limit:
            self.history = self.history[-limit:]


class SessionStore(ABC):
    """Mapping from sender id to Session, owned by the conversation service."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        pass

    @abstractmethod
    def get_or_create(self, session_id: str) -> Session:
        pass

    @abstractmethod
    def save(self, session: Session) -> None:
        pass


class InMemorySessionStore(SessionStore):
    """Sessions kept in process memory with idle expiry and a size cap.

    The least recently used session is evicted once ``max_sessions`` is
    exceeded; a session idle for longer than ``ttl_seconds`` starts over.
    """

    def __init__(
        self,
        ttl_seconds: int,
        max_sessions: int,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_sessions = max_sessions
        self._now = now
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session: Session) -> bool:
        return self.ttl.total_seconds() > 0 and self._now() - session.updated_at > self.ttl

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or self._is_expired(session):
                return None
            return session

    def get_or_create(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._is_expired(session):
                logger.info(f"Session expired: {mask_phone(session_id)}")
                session = None
            if session is None:
                session = Session(id=session_id, updated_at=self._now())
                self._sessions[session_id] = session
            self._sessions.move_to_end(session_id)
            self._evict()
            return session

    def save(self, session: Session) -> None:
        with self._lock:
            session.updated_at = self._now()
            self._sessions[session.id] = session
            self._sessions.move_to_end(session.id)
            self._evict()

    def _evict(self) -> None:
        while self.max_sessions > 0 and len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Session evicted: {mask_phone(evicted_id)}")


class SqlSessionStore(SessionStore):
    """Sessions persisted in the chat_sessions table."""

    def __init__(
        self,
        session_factory: sessionmaker,
        ttl_seconds: int,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.session_factory = session_factory
        self.ttl = timedelta(seconds=ttl_seconds)
        self._now = now

    @staticmethod
    def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def _to_session(self, row: ChatSession) -> Session:
        return Session(
            id=row.id,
            history=list(row.history or []),
            pending_clarification=row.pending_clarification,
            last_detected_intent=row.last_detected_intent,
            last_detected_intent_at=self._as_aware(row.last_detected_intent_at),
            updated_at=self._as_aware(row.updated_at) or self._now(),
        )

    def get(self, session_id: str) -> Optional[Session]:
        db = self.session_factory()
        try:
            row = db.query(ChatSession).filter(ChatSession.id == session_id).first()
            if row is None:
                return None
            session = self._to_session(row)
            if self.ttl.total_seconds() > 0 and self._now() - session.updated_at > self.ttl:
                return None
            return session
        finally:
            db.close()

    def get_or_create(self, session_id: str) -> Session:
        try:
            session = self.get(session_id)
        except SQLAlchemyError as e:
            logger.error(f"Session load failed, starting fresh: {mask_phone(session_id)}, error={e}")
            session = None
        return session or Session(id=session_id, updated_at=self._now())

    def save(self, session: Session) -> None:
        session.updated_at = self._now()
        db = self.session_factory()
        try:
            db.merge(
                ChatSession(
                    id=session.id,
                    history=list(session.history),
                    pending_clarification=session.pending_clarification,
                    last_detected_intent=session.last_detected_intent,
                    last_detected_intent_at=session.last_detected_intent_at,
                    updated_at=session.updated_at,
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Session save failed: {mask_phone(session.id)}, error={e}")
        finally:
            db.close()
