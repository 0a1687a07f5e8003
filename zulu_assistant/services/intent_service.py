import re
from dataclasses import dataclass
from typing import Optional

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.fuzzy_service import score
from zulu_assistant.services.gender_service import AMBIGUOUS_PRODUCTS, GENDER_SPECIFIC_PRODUCTS

logger = get_logger("intent_service")

UNKNOWN = "Unknown"
UNKNOWN_CODE = "UNK"

# Iteration order is the tie-break order: the first category to reach the best
# score keeps it.
SYNONYM_TAXONOMY: dict[str, tuple[str, ...]] = {
    "billing": ("billing", "bill", "invoice", "gst", "payment", "refund", "receipt", "tax"),
    "operations": ("operation", "operations", "delay", "delivery", "dispatch", "pickup", "shipment", "courier"),
    "inventory": ("inventory", "stock", "restock", "out of stock", "warehouse", "sku"),
    "customer_service": ("customer", "complaint", "return", "exchange", "feedback", "escalation"),
    "technical": ("website", "app not working", "bug", "crash", "login", "server down", "glitch"),
}

CATEGORY_CODES: dict[str, str] = {
    "billing": "BIL",
    "operations": "OPS",
    "inventory": "INV",
    "customer_service": "CUS",
    "technical": "TEC",
    "agent_ticket": "TKT",
}

GREETING_PHRASES = (
    "hi",
    "hii",
    "hello",
    "hey",
    "hey there",
    "hola",
    "namaste",
    "good morning",
    "good afternoon",
    "good evening",
)

PRODUCT_KEYWORDS = AMBIGUOUS_PRODUCTS + GENDER_SPECIFIC_PRODUCTS + (
    "lamp",
    "decor",
    "cushion",
    "bedsheet",
    "curtain",
    "vase",
    "candle",
    "skincare",
    "makeup",
    "lipstick",
    "serum",
    "wellness",
    "yoga",
    "kitchen",
    "cookware",
    "toy",
    "gift",
)


@dataclass(frozen=True)
class CategoryMatch:
    category: str
    confidence: float
    synonym: Optional[str] = None

    @property
    def is_unknown(self) -> bool:
        return self.category == UNKNOWN


def normalize_for_matching(text: str) -> str:
    """Lowercase, trim and drop leading/trailing punctuation ("Hi!" -> "hi")."""
    if not text:
        return ""
    normalized = text.strip().lower()
    normalized = re.sub(r"\s+", " ", normalized)
    normalized = re.sub(r"^[^\w]+|[^\w]+$", "", normalized)
    return normalized


def is_greeting_message(text: str) -> bool:
    normalized = normalize_for_matching(text)
    if not normalized:
        return False
    return any(normalized == phrase or normalized.startswith(phrase + " ") for phrase in GREETING_PHRASES)


def matches_product_keyword(text: str) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in PRODUCT_KEYWORDS)


def classify(
    text: str,
    *,
    taxonomy: Optional[dict[str, tuple[str, ...]]] = None,
    threshold: Optional[float] = None,
) -> CategoryMatch:
    """Pick the taxonomy category whose synonym best matches the whole text."""
    taxonomy = taxonomy if taxonomy is not None else SYNONYM_TAXONOMY
    threshold = threshold if threshold is not None else settings.intent_threshold

    best_category = None
    best_synonym = None
    best_score = 0.0
    for category, synonyms in taxonomy.items():
        for synonym in synonyms:
            current = score(text, synonym)
            if best_category is None or current > best_score:
                best_category, best_synonym, best_score = category, synonym, current

    if best_category is None or best_score < threshold:
        logger.debug(f"No category above threshold: best={best_category}, score={best_score:.2f}")
        return CategoryMatch(category=UNKNOWN, confidence=best_score)

    return CategoryMatch(category=best_category, confidence=best_score, synonym=best_synonym)


def category_code(category: str) -> str:
    return CATEGORY_CODES.get(category, UNKNOWN_CODE)
