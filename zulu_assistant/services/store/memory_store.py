import copy
import threading
from typing import Callable, Dict, List

from zulu_assistant.services.store.base import Row, SheetStore


class InMemorySheetStore(SheetStore):
    """Process-local sheet store, used in tests and with STORE_BACKEND=memory."""

    def __init__(self):
        self._sheets: Dict[str, List[Row]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> List[Row]:
        with self._lock:
            return copy.deepcopy(self._sheets.get(key, []))

    def update(self, key: str, rows: List[Row]) -> None:
        with self._lock:
            self._sheets[key] = copy.deepcopy(list(rows))

    def append(self, key: str, row: Row) -> None:
        with self._lock:
            self._sheets.setdefault(key, []).append(copy.deepcopy(row))

    def modify(self, key: str, change: Callable[[List[Row]], List[Row]]) -> List[Row]:
        with self._lock:
            rows = list(change(copy.deepcopy(self._sheets.get(key, []))))
            self._sheets[key] = copy.deepcopy(rows)
            return rows
