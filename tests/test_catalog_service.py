import pytest

from zulu_assistant.services import catalog_service
from zulu_assistant.services.catalog_service import (
    Catalog,
    MalformedReferenceRowError,
    load_catalog,
    parse_gallery_row,
    parse_related_ids,
    refresh_catalog,
)


@pytest.fixture
def csv_files(tmp_path):
    categories = tmp_path / "categories.csv"
    categories.write_text("id,name\n1,Men T-Shirts\n2,Women T-Shirts\n3,\n,Orphan\n", encoding="utf-8")
    galleries = tmp_path / "galleries.csv"
    galleries.write_text(
        "cat_id,type2,cat1\n"
        '1,Men Basics,"[2, 3]"\n'
        "2,Women Basics,\"['1','2']\"\n"
        "2,Broken,\"[1, 2\"\n"
        "3,Single,5\n"
        "4,No Related,\n",
        encoding="utf-8",
    )
    return str(categories), str(galleries)


@pytest.fixture(autouse=True)
def _restore_catalog():
    previous = catalog_service.get_catalog()
    yield
    catalog_service.set_catalog(previous)


class TestParseRelatedIds:
    def test_json_list(self):
        assert parse_related_ids("[1, 2]") == ("1", "2")

    def test_single_quoted_list(self):
        assert parse_related_ids("['3', '4']") == ("3", "4")

    def test_scalar(self):
        assert parse_related_ids("7") == ("7",)

    def test_float_ids_normalized(self):
        assert parse_related_ids("[12.0]") == ("12",)

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_related_ids("[1,")


class TestParseGalleryRow:
    def test_incomplete_row_is_skipped(self):
        assert parse_gallery_row({"cat_id": "1", "type2": "", "cat1": "[1]"}, 2) is None

    def test_malformed_row_raises(self):
        with pytest.raises(MalformedReferenceRowError) as exc_info:
            parse_gallery_row({"cat_id": "1", "type2": "Basics", "cat1": "not json"}, 5)
        assert exc_info.value.row_number == 5


class TestLoadCatalog:
    def test_loads_valid_rows_and_skips_bad_ones(self, csv_files):
        catalog = load_catalog(*csv_files)

        assert [c.id for c in catalog.categories] == ["1", "2"]
        assert [g.display_key for g in catalog.galleries] == ["Men Basics", "Women Basics", "Single"]
        assert catalog.galleries[0].related_category_ids == ("2", "3")
        assert catalog.galleries[2].related_category_ids == ("5",)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(str(tmp_path / "missing.csv"), str(tmp_path / "missing2.csv"))


class TestRefreshCatalog:
    def test_success_replaces_catalog(self, csv_files):
        result = refresh_catalog(*csv_files)

        assert result.ok
        assert catalog_service.get_catalog() is result.value

    def test_failure_keeps_previous_catalog(self, tmp_path):
        previous = Catalog()
        catalog_service.set_catalog(previous)

        result = refresh_catalog(str(tmp_path / "nope.csv"), str(tmp_path / "nope2.csv"))

        assert not result.ok
        assert result.error_code == "catalog_error"
        assert catalog_service.get_catalog() is previous
