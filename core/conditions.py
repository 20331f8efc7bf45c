import logging
from enum import Enum
from typing import Iterable, TypeVar

log = logging.getLogger(__name__)


class Condition(str, Enum):
    NEW = "New"
    OPEN_BOX = "Open Box"
    REFURBISHED = "Refurbished"
    USED = "Used"
    NOT_SPECIFIED = "Not Specified"


CONDITION_TOKENS: dict[str, Condition] = {
    "new": Condition.NEW,
    "openBox": Condition.OPEN_BOX,
    "refurbished": Condition.REFURBISHED,
    "used": Condition.USED,
}

_NEW_TERMS = ("brand new", "sealed", "unopened")
_OPEN_BOX_TERMS = ("open box", "opened")
_REFURBISHED_TERMS = ("refurbished", "certified")
_USED_TERMS = ("used", "pre-owned", "good", "excellent", "acceptable")


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    return any(term in text for term in terms)


def normalize_condition(raw_condition: str | None) -> Condition:
    """Map free-text condition into the fixed taxonomy.

    Rules are evaluated in order and the first match wins, so "open box, like
    new" resolves to Open Box rather than New.
    """
    if not raw_condition:
        return Condition.NOT_SPECIFIED

    text = str(raw_condition).lower()

    if "new" in text and "open" not in text and "refurbished" not in text:
        return Condition.NEW
    if _contains_any(text, _NEW_TERMS):
        return Condition.NEW
    if _contains_any(text, _OPEN_BOX_TERMS):
        return Condition.OPEN_BOX
    if _contains_any(text, _REFURBISHED_TERMS):
        return Condition.REFURBISHED
    if _contains_any(text, _USED_TERMS):
        return Condition.USED

    if "sealed" in text or "boxed" in text:
        return Condition.NEW
    if "preowned" in text or "pre owned" in text:
        return Condition.USED

    return Condition.NOT_SPECIFIED


def resolve_condition_token(token: str | None) -> Condition | None:
    if token is None:
        return None
    condition = CONDITION_TOKENS.get(token)
    if condition is None:
        log.warning(f"Ignoring unknown condition filter {token!r}")
    return condition


T = TypeVar("T")


def filter_by_condition(listings: list[T], token: str | None) -> list[T]:
    """Keep listings whose normalized condition matches the requested token.

    Listings must carry a ``condition`` attribute holding a ``Condition``.
    An absent or unknown token leaves the list unchanged.
    """
    wanted = resolve_condition_token(token)
    if wanted is None:
        return list(listings)
    return [item for item in listings if item.condition == wanted]  # type: ignore[attr-defined]
