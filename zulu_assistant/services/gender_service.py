"""Men/women/kids clarification for product queries.

The only session fields touched here are ``pending_clarification`` (the
remembered query) and, through it, the clarification state.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.state_machine import ask_for_gender, gender_received, state_for

if TYPE_CHECKING:
    from zulu_assistant.services.session_service import Session

logger = get_logger("gender_service")

# Checked in this order; the first set with a whole-word hit wins.
GENDER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "men": ("men", "man", "male", "mens", "gents", "gentleman", "gentlemen", "husband", "boyfriend", "dad", "father", "brother"),
    "women": ("women", "woman", "female", "womens", "ladies", "lady", "wife", "girlfriend", "mom", "mother", "sister"),
    "kids": ("kids", "kid", "child", "children", "boy", "boys", "girl", "girls", "baby", "toddler", "son", "daughter"),
}

AMBIGUOUS_PRODUCTS = (
    "shoes",
    "shoe",
    "sneakers",
    "t-shirt",
    "tshirt",
    "shirt",
    "jeans",
    "trousers",
    "pants",
    "jacket",
    "hoodie",
    "sweater",
    "shorts",
    "tracksuit",
    "watch",
    "sunglasses",
    "perfume",
    "kurta",
    "clothes",
    "clothing",
    "footwear",
    "sandals",
    "slippers",
    "innerwear",
    "wallet",
)

GENDER_SPECIFIC_PRODUCTS = (
    "dress",
    "saree",
    "lehenga",
    "lingerie",
    "skirt",
    "heels",
    "kurti",
    "blouse",
    "dupatta",
    "beard",
    "boxers",
)

CLARIFY_PROMPT = "Would you like it for *men, women,* or *kids*? 👕👗👶"
CLARIFY_AGAIN_PROMPT = "Please tell me who it's for: *men*, *women* or *kids* 🙂"

_GENDER_PATTERNS = {
    gender: re.compile(r"\b(" + "|".join(re.escape(word) for word in words) + r")\b")
    for gender, words in GENDER_KEYWORDS.items()
}


@dataclass(frozen=True)
class Disambiguation:
    """Either a query ready for the resolver or a prompt to send back."""

    query: Optional[str] = None
    gender: Optional[str] = None
    prompt: Optional[str] = None

    @property
    def needs_clarification(self) -> bool:
        return self.prompt is not None


def detect_gender(text: str) -> Optional[str]:
    lowered = (text or "").lower()
    for gender, pattern in _GENDER_PATTERNS.items():
        if pattern.search(lowered):
            return gender
    return None


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def is_ambiguous_product(text: str) -> bool:
    ambiguous = _contains_any(text, AMBIGUOUS_PRODUCTS)
    gender_specific = _contains_any(text, GENDER_SPECIFIC_PRODUCTS)
    return ambiguous and not gender_specific


def gender_from_history(session: "Session", lookback: int) -> Optional[str]:
    """Most recent gender mentioned by the customer in the last entries.

    Assistant entries are skipped: the clarification prompt itself names
    every gender.
    """
    if lookback <= 0:
        return None
    for entry in reversed(session.history[-lookback:]):
        if entry.get("role") != "user":
            continue
        gender = detect_gender(entry.get("content") or "")
        if gender:
            return gender
    return None


def begin(session: "Session", text: str, lookback: int = 4) -> Disambiguation:
    """Handle a product query from an idle session."""
    state = state_for(session.pending_clarification)
    gender = detect_gender(text) or gender_from_history(session, lookback)

    if gender is None and is_ambiguous_product(text):
        ask_for_gender(state)
        session.pending_clarification = text
        logger.info("Asking for gender", extra={"context": {"query": text}})
        return Disambiguation(prompt=CLARIFY_PROMPT)

    return Disambiguation(query=text, gender=gender)


def resume(session: "Session", text: str) -> Disambiguation:
    """Handle the reply to a clarification prompt."""
    state = state_for(session.pending_clarification)
    gender = detect_gender(text)
    if gender is None:
        return Disambiguation(prompt=CLARIFY_AGAIN_PROMPT)

    gender_received(state)
    query = f"{session.pending_clarification} for {gender}"
    session.pending_clarification = None
    logger.info("Gender resolved", extra={"context": {"gender": gender, "query": query}})
    return Disambiguation(query=query, gender=gender)
