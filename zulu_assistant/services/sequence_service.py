"""Daily, category-prefixed sequential ids such as ``OPS191026000001``.

The counter sheet holds one row per day, newest first. Each row is
``{"date": "DDMMYY", "counts": {code: int}}``; when the date rolls over a
zeroed row is prepended and older rows are kept below it.

Within a process, ``next()`` calls for the same counter sheet run one at a
time. Across processes the read and the write of the counter row happen in
one store transaction (``SheetStore.modify``), which the SQL store runs with
SELECT ... FOR UPDATE.
"""

import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.intent_service import category_code
from zulu_assistant.services.store.base import COUNTER_SHEET, SheetStore

logger = get_logger("sequence_service")

SEQUENCE_WIDTH = 6

_key_locks: dict[str, threading.Lock] = {}
_key_locks_guard = threading.Lock()


def _lock_for(key: str) -> threading.Lock:
    with _key_locks_guard:
        lock = _key_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _key_locks[key] = lock
        return lock


def date_token(day: date) -> str:
    return day.strftime("%d%m%y")


@dataclass(frozen=True)
class GeneratedId:
    prefix: str
    date: str
    sequence: int

    @property
    def value(self) -> str:
        return f"{self.prefix}{self.date}{self.sequence:0{SEQUENCE_WIDTH}d}"

    def __str__(self) -> str:
        return self.value


@dataclass
class DailyCounterRow:
    date: str
    counts: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict) -> "DailyCounterRow":
        counts = row.get("counts") or {}
        return cls(
            date=str(row.get("date", "")),
            counts={str(code): int(value) for code, value in counts.items()},
        )

    def to_row(self) -> dict:
        return {"date": self.date, "counts": dict(self.counts)}


class DailySequenceGenerator:
    def __init__(
        self,
        store: SheetStore,
        key: str = COUNTER_SHEET,
        today: Optional[Callable[[], date]] = None,
    ):
        self.store = store
        self.key = key
        self._today = today or date.today

    def next(self, category: str) -> GeneratedId:
        """Increment today's counter for the category and return the new id.

        Raises StoreUnavailableError when the counter sheet cannot be read or
        written; nothing is incremented in that case.
        """
        code = category_code(category)
        token = date_token(self._today())

        def bump(rows: list) -> list:
            current = DailyCounterRow.from_row(rows[0]) if rows else None
            if current is None or current.date != token:
                if current is not None:
                    logger.info(f"Counter day rollover: {current.date} -> {token}")
                current = DailyCounterRow(date=token)
                rows = [current.to_row()] + list(rows)

            current.counts[code] = current.counts.get(code, 0) + 1
            rows[0] = current.to_row()
            return rows

        with _lock_for(self.key):
            written = self.store.modify(self.key, bump)

        sequence = DailyCounterRow.from_row(written[0]).counts[code]
        generated = GeneratedId(prefix=code, date=token, sequence=sequence)
        logger.info(
            "Generated id",
            extra={"context": {"id": generated.value, "category": category}},
        )
        return generated
