import re
from dataclasses import dataclass, field
from typing import Optional

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.catalog_service import Catalog, Category
from zulu_assistant.services.gender_service import GENDER_KEYWORDS

logger = get_logger("resolver_service")

QUERY_STOPWORDS = {
    "i",
    "im",
    "a",
    "an",
    "the",
    "want",
    "wanna",
    "need",
    "looking",
    "look",
    "show",
    "me",
    "some",
    "any",
    "please",
    "pls",
    "for",
    "my",
    "to",
    "buy",
    "get",
    "of",
    "with",
    "can",
    "you",
    "do",
    "have",
    "is",
    "are",
    "there",
}
GENDER_WORDS = {word for words in GENDER_KEYWORDS.values() for word in words}

NO_CATEGORY_REPLY = "Sorry, I couldn't find related categories 😔"
NO_GALLERY_REPLY = "No products found right now, please try a different category."


@dataclass(frozen=True)
class ResolverWeights:
    exact: int = 100
    name_contains_query: int = 50
    query_contains_name: int = 30
    word_overlap: int = 10
    gender: int = 20
    max_categories: int = 3
    max_links: int = 6

    @classmethod
    def from_settings(cls) -> "ResolverWeights":
        return cls(
            exact=settings.score_exact,
            name_contains_query=settings.score_name_contains_query,
            query_contains_name=settings.score_query_contains_name,
            word_overlap=settings.score_word_overlap,
            gender=settings.score_gender,
            max_categories=settings.max_categories,
            max_links=settings.max_gallery_links,
        )


@dataclass(frozen=True)
class Resolution:
    categories: tuple[Category, ...] = ()
    gallery_links: tuple[str, ...] = field(default_factory=tuple)


def prepare_query(text: str) -> str:
    """Reduce a chat message to the product words the catalog is named with."""
    lowered = (text or "").lower()
    lowered = re.sub(r"[^\w\s&-]", " ", lowered)
    words = [w for w in lowered.split() if w not in QUERY_STOPWORDS and w not in GENDER_WORDS]
    return " ".join(words)


def gender_in_name(gender: str, name: str) -> bool:
    """Substring match anchored at a word start: "men" hits "Mens Shoes" but not "Women Shoes"."""
    return re.search(rf"(?<![a-z]){re.escape(gender.lower())}", name.lower()) is not None


def score_category(
    name: str,
    query: str,
    gender: Optional[str] = None,
    weights: Optional[ResolverWeights] = None,
    product_words: Optional[str] = None,
) -> int:
    """Score one category name against the customer's query.

    ``query`` is compared as typed (lowercased). ``product_words`` is the
    cleaned-up form from ``prepare_query``; when given, it can also earn the
    containment bonuses and it is the word list used for the overlap bonus.
    """
    weights = weights or ResolverWeights()
    name_l = name.lower().strip()
    query_l = " ".join(query.lower().split())
    if not name_l or not query_l:
        return 0
    words_l = " ".join((product_words or "").lower().split()) or query_l

    total = 0
    if name_l == query_l:
        total += weights.exact
    if query_l in name_l or words_l in name_l:
        total += weights.name_contains_query
    if name_l in query_l or name_l in words_l:
        total += weights.query_contains_name

    name_words = name_l.split()
    for query_word in words_l.split():
        if any(query_word in name_word or name_word in query_word for name_word in name_words):
            total += weights.word_overlap

    if gender and gender_in_name(gender, name_l):
        total += weights.gender

    return total


def rank_categories(
    categories: tuple[Category, ...],
    query: str,
    gender: Optional[str] = None,
    weights: Optional[ResolverWeights] = None,
    product_words: Optional[str] = None,
) -> list[Category]:
    weights = weights or ResolverWeights()
    scored = []
    for category in categories:
        value = score_category(category.name, query, gender, weights, product_words)
        if value > 0:
            scored.append((value, category))
    # sorted() is stable, so ties keep table order.
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    return [category for _, category in scored[: weights.max_categories]]


def gallery_link(display_key: str, base_url: Optional[str] = None) -> str:
    base_url = base_url if base_url is not None else settings.gallery_base_url
    return base_url + re.sub(r"\s+", "%20", display_key.strip())


def collect_gallery_links(
    catalog: Catalog,
    category_ids: list[str],
    max_links: int = 6,
    base_url: Optional[str] = None,
) -> list[str]:
    seen: set[str] = set()
    links: list[str] = []
    for category_id in category_ids:
        for gallery in catalog.galleries:
            if gallery.category_id != category_id and category_id not in gallery.related_category_ids:
                continue
            if gallery.display_key in seen:
                continue
            seen.add(gallery.display_key)
            links.append(gallery_link(gallery.display_key, base_url))
            if len(links) >= max_links:
                return links
    return links


def resolve(
    catalog: Catalog,
    query: str,
    gender: Optional[str] = None,
    weights: Optional[ResolverWeights] = None,
) -> Resolution:
    weights = weights or ResolverWeights.from_settings()
    product_words = prepare_query(query)
    ranked = rank_categories(catalog.categories, query or "", gender, weights, product_words)
    links = collect_gallery_links(catalog, [c.id for c in ranked], weights.max_links)
    logger.info(
        "Resolved query",
        extra={
            "context": {
                "query": query,
                "product_words": product_words,
                "gender": gender,
                "categories": [c.name for c in ranked],
                "links": len(links),
            }
        },
    )
    return Resolution(categories=tuple(ranked), gallery_links=tuple(links))


def render_resolution(resolution: Resolution, query: str, gender: Optional[str] = None) -> str:
    if not resolution.categories:
        return NO_CATEGORY_REPLY
    if not resolution.gallery_links:
        return NO_GALLERY_REPLY

    label = prepare_query(query) or query
    heading = f"Here are some *{label}* picks"
    if gender:
        heading += f" for *{gender}*"
    links = "\n".join(resolution.gallery_links)
    return f"{heading}:\n\n{links}\n\n🛒 Explore more on app.zulu.club"
