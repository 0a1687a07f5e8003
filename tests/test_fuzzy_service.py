import pytest

from zulu_assistant.services.fuzzy_service import levenshtein_distance, score


class TestScoreBounds:
    @pytest.mark.parametrize("text", ["shoes", "Invoice", "delivery delay", "कुर्ता"])
    def test_identical_text_scores_one(self, text):
        assert score(text, text) == 1.0

    def test_empty_text_scores_zero(self):
        assert score("", "invoice") == 0.0

    def test_empty_keyword_scores_zero(self):
        assert score("invoice", "") == 0.0

    def test_score_never_negative(self):
        assert score("zzzzzzzzzzzzzzzzzzzz", "ab") >= 0.0


class TestContainment:
    def test_keyword_inside_text_scores_one(self):
        assert score("operation delay issue", "delay") == 1.0

    def test_containment_is_case_insensitive(self):
        assert score("Pending INVOICE for order 12", "invoice") == 1.0


class TestCaseInsensitivity:
    def test_swapping_case_does_not_change_score(self):
        assert score("Invoic", "invoice") == score("INVOIC", "INVOICE")

    def test_near_miss_uses_edit_distance(self):
        # one deletion over a 7 character keyword
        assert score("invoic", "invoice") == pytest.approx(1 - 1 / 7)


class TestLevenshteinDistance:
    def test_known_distance(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_zero_for_equal_strings(self):
        assert levenshtein_distance("gst", "gst") == 0
