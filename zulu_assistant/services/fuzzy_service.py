"""Normalized similarity between free text and a keyword.

Strings are compared as Python ``str`` values, i.e. one unit per Unicode code
point, after ``str.lower()``.
"""

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def score(text: str, keyword: str) -> float:
    """Similarity in [0, 1]; 1.0 when the keyword occurs inside the text."""
    if not text or not keyword:
        return 0.0

    text_l = text.lower()
    keyword_l = keyword.lower()
    if keyword_l in text_l:
        return 1.0

    distance = levenshtein_distance(text_l, keyword_l)
    longest = max(len(keyword_l), len(text_l))
    return max(0.0, 1.0 - distance / longest)
