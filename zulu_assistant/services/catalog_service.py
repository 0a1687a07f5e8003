import json
import re
import threading
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.result import Result

logger = get_logger("catalog_service")


class MalformedReferenceRowError(Exception):
    def __init__(self, table: str, row_number: int, reason: str):
        self.table = table
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"Malformed {table} row {row_number}: {reason}")


@dataclass(frozen=True)
class Category:
    id: str
    name: str


@dataclass(frozen=True)
class Gallery:
    category_id: str
    display_key: str
    related_category_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Catalog:
    categories: tuple[Category, ...] = ()
    galleries: tuple[Gallery, ...] = ()


def _normalize_id(value) -> str:
    text = str(value).strip()
    if re.fullmatch(r"-?\d+(\.0+)?", text):
        return str(int(float(text)))
    return text


def parse_related_ids(raw: str) -> tuple[str, ...]:
    """Parse the cat1 column: "[1, 2]", "['1','2']" or a bare scalar."""
    try:
        parsed = json.loads(raw.replace("'", '"'))
    except (json.JSONDecodeError, AttributeError) as e:
        raise ValueError(f"invalid cat1 value {raw!r}") from e
    if isinstance(parsed, list):
        return tuple(_normalize_id(item) for item in parsed)
    if isinstance(parsed, (dict, type(None))):
        raise ValueError(f"invalid cat1 value {raw!r}")
    return (_normalize_id(parsed),)


def _read_table(path: str) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def load_categories(path: str) -> tuple[Category, ...]:
    df = _read_table(path)
    if "id" not in df.columns or "name" not in df.columns:
        raise ValueError(f"{path}: expected columns id, name")

    categories = []
    for row in df.itertuples(index=False):
        category_id = _normalize_id(row.id)
        name = str(row.name).strip()
        if not category_id or not name:
            continue
        categories.append(Category(id=category_id, name=name))
    return tuple(categories)


def parse_gallery_row(row: dict, row_number: int) -> Optional[Gallery]:
    """Return None for incomplete rows; raise for rows that cannot be parsed."""
    category_id = _normalize_id(row.get("cat_id", ""))
    display_key = str(row.get("type2", "")).strip()
    related_raw = str(row.get("cat1", "")).strip()
    if not category_id or not display_key or not related_raw:
        return None
    try:
        related_ids = parse_related_ids(related_raw)
    except ValueError as e:
        raise MalformedReferenceRowError("galleries", row_number, str(e)) from e
    return Gallery(category_id=category_id, display_key=display_key, related_category_ids=related_ids)


def load_galleries(path: str) -> tuple[Gallery, ...]:
    df = _read_table(path)
    galleries = []
    for row_number, row in enumerate(df.to_dict(orient="records"), start=2):
        try:
            gallery = parse_gallery_row(row, row_number)
        except MalformedReferenceRowError as e:
            logger.warning(
                "Skipped malformed gallery row",
                extra={"context": {"row": e.row_number, "reason": e.reason}},
            )
            continue
        if gallery is not None:
            galleries.append(gallery)
    return tuple(galleries)


def load_catalog(categories_path: str, galleries_path: str) -> Catalog:
    catalog = Catalog(
        categories=load_categories(categories_path),
        galleries=load_galleries(galleries_path),
    )
    logger.info(
        f"Loaded {len(catalog.categories)} categories & {len(catalog.galleries)} galleries",
        extra={"context": {"categories_path": categories_path, "galleries_path": galleries_path}},
    )
    return catalog


_catalog = Catalog()
_catalog_lock = threading.Lock()


def get_catalog() -> Catalog:
    return _catalog


def set_catalog(catalog: Catalog) -> None:
    global _catalog
    with _catalog_lock:
        _catalog = catalog


def refresh_catalog(
    categories_path: Optional[str] = None,
    galleries_path: Optional[str] = None,
) -> Result[Catalog]:
    """Reload both tables; the previous catalog stays active on failure."""
    categories_path = categories_path or settings.categories_csv
    galleries_path = galleries_path or settings.galleries_csv
    try:
        catalog = load_catalog(categories_path, galleries_path)
    except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Catalog load failed: {e}")
        return Result.from_exception(e, "catalog_error")
    set_catalog(catalog)
    return Result.success(catalog)
