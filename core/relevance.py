"""Title relevance filtering.

A keyword search upstream returns anything that loosely matches, so titles
are checked against the query before prices are averaged. Queries that name a
phone model ("iPhone 15", "Galaxy S22") are matched on brand and model digits;
everything else falls back to a permissive any-term match.
"""

import logging
import re
from dataclasses import dataclass
from typing import TypeVar

log = logging.getLogger(__name__)

# Category labels the search UI can prepend or append to a query.
CATEGORY_WORDS = (
    "phones & smartphones",
    "laptops & computers",
    "cameras & photography",
    "gaming consoles",
    "tablets & e-readers",
    "audio equipment",
    "power tools",
    "hand tools",
    "garden tools",
    "measuring & layout",
    "workshop equipment",
    "electric bikes",
    "mountain bikes",
    "road bikes",
    "hybrid bikes",
    "bike parts",
    "electronics",
)

MODEL_BRANDS = ("iphone", "galaxy", "pixel", "samsung", "oneplus", "xperia", "nokia", "moto")
MODEL_VARIANTS = ("pro", "plus", "max", "mini", "ultra", "fe", "edge")

BRAND_MODEL_PATTERN = re.compile(
    r"\b(?P<brand>" + "|".join(MODEL_BRANDS) + r")\s*(?P<digits>\d+)"
    r"(?:\s*(?P<variant>" + "|".join(MODEL_VARIANTS) + r"))?\b"
)
# Galaxy S-series shorthand, e.g. "samsung s22"
S_SERIES_PATTERN = re.compile(r"\bs(?P<digits>\d{1,2})\b")


@dataclass(frozen=True)
class ModelNumberMatch:
    brand: str | None
    digits: str
    variant: str | None = None


@dataclass(frozen=True)
class GenericTerms:
    terms: tuple[str, ...]


SearchMode = ModelNumberMatch | GenericTerms


def normalize_query(query: str | None) -> str:
    text = (query or "").lower()
    for word in CATEGORY_WORDS:
        text = text.replace(word, " ")
    return " ".join(text.split())


def classify_query(query: str | None) -> SearchMode:
    normalized = normalize_query(query)

    match = BRAND_MODEL_PATTERN.search(normalized)
    if match:
        return ModelNumberMatch(
            brand=match.group("brand"),
            digits=match.group("digits"),
            variant=match.group("variant"),
        )

    match = S_SERIES_PATTERN.search(normalized)
    if match:
        return ModelNumberMatch(brand=None, digits=match.group("digits"))

    return GenericTerms(terms=tuple(normalized.split()))


def title_matches(title: str, mode: SearchMode) -> bool:
    title_lower = title.lower()
    if isinstance(mode, ModelNumberMatch):
        if mode.brand and mode.brand not in title_lower:
            return False
        return mode.digits in title_lower
    return any(term in title_lower for term in mode.terms if term)


T = TypeVar("T")


def filter_relevant(listings: list[T], query: str | None) -> list[T]:
    """Keep listings whose title plausibly refers to the searched product.

    Untitled listings are always dropped. A query that is empty once category
    words are stripped does no title narrowing beyond that.
    """
    mode = classify_query(query)
    narrowing = True

    if isinstance(mode, ModelNumberMatch):
        log.debug(
            f"Model match for {query!r}: brand={mode.brand} digits={mode.digits} "
            f"variant={mode.variant}"
        )
    elif not mode.terms:
        log.debug(f"No usable terms in query {query!r}, skipping title matching")
        narrowing = False

    kept = []
    for item in listings:
        title = getattr(item, "title", None)
        if not title:
            continue
        if not narrowing or title_matches(title, mode):
            kept.append(item)

    log.debug(f"Relevance filter kept {len(kept)}/{len(listings)} for {query!r}")
    return kept
