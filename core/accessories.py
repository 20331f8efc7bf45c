"""Accessory exclusion.

Keyword searches for a product also return its cases, chargers and spare
parts, which drag the average price down. Listings are screened against
category-specific term tables, and phone listings priced below a plausibility
floor are treated as accessories too.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from core.parser import parse_price

log = logging.getLogger(__name__)


class SearchCategory(Enum):
    PHONE = "phone"
    ELECTRONICS = "electronics"
    OTHER = "other"


PHONE_BRANDS = (
    "iphone", "galaxy", "samsung", "pixel", "oneplus", "xperia", "nokia",
    "motorola", "huawei", "xiaomi",
)
# Whole-word "phone", so "headphones" and "microphone" don't count.
# Brands only need a leading boundary to allow "iphone15".
PHONE_PATTERN = re.compile(
    r"\b(?:smart)?phones?\b|\b(?:" + "|".join(PHONE_BRANDS) + r")"
)
ELECTRONICS_TOKENS = (
    "laptop", "macbook", "notebook", "chromebook", "computer", "tablet", "ipad",
    "kindle", "e-reader", "camera", "dslr", "gopro", "lens", "console",
    "playstation", "xbox", "nintendo", "switch",
)


@dataclass(frozen=True)
class ExclusionRules:
    common: tuple[str, ...] = (
        "case", "cover", "protector", "tempered glass", "skin", "sticker",
        "decal", "wrap", "pouch",
    )
    electronics_only: tuple[str, ...] = (
        "charger", "charging", "cable", "adapter", "stand", "dock", "holder",
        "mount", "armband", "stylus", "power bank",
    )
    audio: tuple[str, ...] = (
        "earphone", "headphone", "earbud", "headset", "speaker", "audio",
    )
    phone_only: tuple[str, ...] = (
        "unlocking", "unlock code", "unlock service", "replacement", "repair",
        "kit", "back cover", "battery", "sim tray", "camera lens", "lens protector",
        "housing", "frame", "spare part",
    )
    screen: tuple[str, ...] = (
        "screen", "display", "lcd", "oled panel", "digitizer", "back glass", "glass",
    )
    phone_words: tuple[str, ...] = ("phone", "smartphone")


DEFAULT_RULES = ExclusionRules()


@dataclass(frozen=True)
class ExclusionPolicy:
    rules: ExclusionRules = field(default_factory=ExclusionRules)
    min_phone_price: Decimal = Decimal("50.00")
    # Keep listings that can't be judged (no title, unreadable price).
    conservative_include: bool = True


def infer_category(query: str | None) -> SearchCategory:
    text = (query or "").lower()
    if PHONE_PATTERN.search(text):
        return SearchCategory.PHONE
    if any(token in text for token in ELECTRONICS_TOKENS):
        return SearchCategory.ELECTRONICS
    return SearchCategory.OTHER


def _first_hit(title: str, terms: tuple[str, ...], query: str | None = None) -> str | None:
    """Return the first term found in the title, skipping terms the query itself names."""
    for term in terms:
        if term not in title:
            continue
        if query is not None and term in query:
            continue
        return term
    return None


def accessory_reason(
    title: str | None,
    price: object,
    query: str,
    category: SearchCategory,
    policy: ExclusionPolicy,
) -> str | None:
    """Why a listing looks like an accessory, or None when it should be kept.

    ``query`` must already be lower-cased. Returns ``"inconclusive"`` when the
    listing can't be judged and the policy is not conservative.
    """
    if not title:
        return None if policy.conservative_include else "inconclusive"

    rules = policy.rules
    title = title.lower()

    if category is SearchCategory.PHONE:
        terms = rules.common + rules.electronics_only + rules.phone_only + rules.audio
        term = _first_hit(title, terms, query)
        if term:
            return f"accessory term '{term}'"

        screen_term = _first_hit(title, rules.screen, query)
        if screen_term and not any(word in title for word in rules.phone_words):
            return f"screen part '{screen_term}'"

        # An accessory search ("iphone 15 case") has no meaningful phone price floor.
        if _first_hit(query, terms) is None:
            parsed = parse_price(price)
            if parsed is None:
                return None if policy.conservative_include else "inconclusive"
            if parsed < policy.min_phone_price:
                return f"price {parsed} below {policy.min_phone_price}"
        return None

    if category is SearchCategory.ELECTRONICS:
        term = _first_hit(title, rules.common + rules.audio, query)
        return f"accessory term '{term}'" if term else None

    term = _first_hit(title, rules.common, query)
    return f"accessory term '{term}'" if term else None


T = TypeVar("T")


def exclude_accessories(
    listings: list[T],
    query: str | None,
    policy: ExclusionPolicy | None = None,
) -> list[T]:
    """Drop listings that look like accessories for the searched product.

    Works on anything with ``title`` and ``price`` attributes. Never raises on
    odd listings; order is preserved.
    """
    policy = policy or ExclusionPolicy()
    query_lower = (query or "").lower()
    category = infer_category(query_lower)

    kept = []
    for item in listings:
        reason = accessory_reason(
            getattr(item, "title", None),
            getattr(item, "price", None),
            query_lower,
            category,
            policy,
        )
        if reason:
            log.debug(f"Excluding {getattr(item, 'title', None)!r}: {reason}")
            continue
        kept.append(item)

    log.debug(
        f"Accessory filter ({category.value}) kept {len(kept)}/{len(listings)} "
        f"for {query!r}"
    )
    return kept
