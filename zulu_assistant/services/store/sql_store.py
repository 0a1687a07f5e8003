from datetime import datetime, timezone
from typing import Callable, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from zulu_assistant.logging_config import get_logger
from zulu_assistant.models import SheetRow
from zulu_assistant.services.store.base import Row, SheetStore, StoreUnavailableError

logger = get_logger("store.sql")


class SqlSheetStore(SheetStore):
    """Sheet store backed by the sheet_rows table.

    Rows are ordered by ``position`` and then by insertion ``id``, so
    appends racing for the same position keep both rows.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _query_rows(db: Session, key: str):
        return (
            db.query(SheetRow)
            .filter(SheetRow.sheet_key == key)
            .order_by(SheetRow.position.asc(), SheetRow.id.asc())
        )

    @staticmethod
    def _write_rows(db: Session, key: str, rows: List[Row]) -> None:
        now = datetime.now(timezone.utc)
        db.query(SheetRow).filter(SheetRow.sheet_key == key).delete(synchronize_session=False)
        for position, data in enumerate(rows):
            db.add(SheetRow(sheet_key=key, position=position, data=dict(data), updated_at=now))

    def get(self, key: str) -> List[Row]:
        db = self.session_factory()
        try:
            return [dict(row.data or {}) for row in self._query_rows(db, key).all()]
        except SQLAlchemyError as e:
            logger.error(f"Sheet read failed: key={key}, error={e}")
            raise StoreUnavailableError(key, "get", str(e)) from e
        finally:
            db.close()

    def update(self, key: str, rows: List[Row]) -> None:
        """Replace the whole row set in a single transaction."""
        db = self.session_factory()
        try:
            self._write_rows(db, key, rows)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Sheet update failed: key={key}, rows={len(rows)}, error={e}")
            raise StoreUnavailableError(key, "update", str(e)) from e
        finally:
            db.close()

    def append(self, key: str, row: Row) -> None:
        db = self.session_factory()
        try:
            last_position = (
                db.query(func.max(SheetRow.position)).filter(SheetRow.sheet_key == key).scalar()
            )
            position = 0 if last_position is None else last_position + 1
            db.add(
                SheetRow(
                    sheet_key=key,
                    position=position,
                    data=dict(row),
                    updated_at=datetime.now(timezone.utc),
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Sheet append failed: key={key}, error={e}")
            raise StoreUnavailableError(key, "append", str(e)) from e
        finally:
            db.close()

    def modify(self, key: str, change: Callable[[List[Row]], List[Row]]) -> List[Row]:
        """Read with SELECT ... FOR UPDATE and write back in the same transaction.

        On SQLite the FOR UPDATE clause is dropped and writers are serialized
        by the database file lock only.
        """
        db = self.session_factory()
        try:
            current = self._query_rows(db, key).with_for_update().all()
            rows = list(change([dict(row.data or {}) for row in current]))
            self._write_rows(db, key, rows)
            db.commit()
            return rows
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Sheet modify failed: key={key}, error={e}")
            raise StoreUnavailableError(key, "modify", str(e)) from e
        finally:
            db.close()
