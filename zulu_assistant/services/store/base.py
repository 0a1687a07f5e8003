from abc import ABC, abstractmethod
from typing import Callable, List

Row = dict

COUNTER_SHEET = "counters"
BILLING_SHEET = "billing_log"
CONVERSATION_SHEET = "conversation_log"


class StoreUnavailableError(Exception):
    """The backing sheet store could not be read or written."""

    def __init__(self, key: str, operation: str, reason: str):
        self.key = key
        self.operation = operation
        self.reason = reason
        super().__init__(f"Sheet store {operation} failed for '{key}': {reason}")


class SheetStore(ABC):
    """Key-ordered row store, one logical row set per sheet key."""

    @abstractmethod
    def get(self, key: str) -> List[Row]:
        """Return all rows of the sheet, top row first."""
        pass

    @abstractmethod
    def update(self, key: str, rows: List[Row]) -> None:
        """Replace the sheet's row set."""
        pass

    @abstractmethod
    def append(self, key: str, row: Row) -> None:
        """Add one row below the existing ones."""
        pass

    @abstractmethod
    def modify(self, key: str, change: Callable[[List[Row]], List[Row]]) -> List[Row]:
        """Read the rows, pass them through ``change`` and write the result back.

        No other ``modify`` or ``update`` of the same sheet may interleave.
        Returns the rows that were written.
        """
        pass
