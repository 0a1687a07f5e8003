from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from zulu_assistant.database import Base
from zulu_assistant.services.catalog_service import Catalog, Category, Gallery
from zulu_assistant.services.ledger_service import LedgerService
from zulu_assistant.services.llm import LLMResponse
from zulu_assistant.services.sequence_service import DailySequenceGenerator
from zulu_assistant.services.session_service import InMemorySessionStore
from zulu_assistant.services.store import InMemorySheetStore


@pytest.fixture
def catalog():
    return Catalog(
        categories=(
            Category(id="1", name="Men T-Shirts"),
            Category(id="2", name="Women T-Shirts"),
            Category(id="3", name="Kids T-Shirts"),
            Category(id="4", name="Men Shoes"),
            Category(id="5", name="Women Shoes"),
            Category(id="6", name="Table Lamps"),
        ),
        galleries=(
            Gallery(category_id="1", display_key="Men Basics", related_category_ids=("4",)),
            Gallery(category_id="1", display_key="Graphic Tees", related_category_ids=()),
            Gallery(category_id="2", display_key="Women Basics", related_category_ids=()),
            Gallery(category_id="4", display_key="Sneaker  Street", related_category_ids=("1",)),
            Gallery(category_id="6", display_key="Home Lighting", related_category_ids=()),
        ),
    )


@pytest.fixture
def sheet_store():
    return InMemorySheetStore()


@pytest.fixture
def today():
    return {"value": date(2026, 10, 19)}


@pytest.fixture
def sequence(sheet_store, today):
    return DailySequenceGenerator(sheet_store, today=lambda: today["value"])


@pytest.fixture
def ledger(sheet_store, sequence):
    return LedgerService(sheet_store, sequence)


@pytest.fixture
def session_store():
    return InMemorySessionStore(ttl_seconds=3600, max_sessions=100)


@pytest.fixture
def llm_provider():
    """LLM provider stub; set .generate.return_value per test."""
    provider = Mock()
    provider.generate.return_value = LLMResponse(content="Happy to help!", model="test-model")
    return provider


@pytest.fixture
def sql_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import zulu_assistant.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()



@pytest.fixture
def sql_file_session_factory(tmp_path):
    """File-backed SQLite so that threads get their own connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'sheets.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    import zulu_assistant.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
