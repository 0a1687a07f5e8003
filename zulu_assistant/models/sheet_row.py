from sqlalchemy import JSON, Column, Index, Integer, Text
from sqlalchemy.types import TIMESTAMP

from zulu_assistant.database import Base


class SheetRow(Base):
    __tablename__ = "sheet_rows"
    # Appends may share a position under concurrency; id breaks the tie.
    __table_args__ = (Index("ix_sheet_rows_key_position", "sheet_key", "position"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    sheet_key = Column(Text, nullable=False)  # counters, billing_log, conversation_log
    position = Column(Integer, nullable=False)  # 0 is the top row
    data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(TIMESTAMP(timezone=True))
