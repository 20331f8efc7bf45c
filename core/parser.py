import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from core.conditions import Condition, normalize_condition
from core.scanner import RawListing

log = logging.getLogger(__name__)

DEFAULT_TITLE = "No Title"
DEFAULT_LINK = "#"
DEFAULT_CURRENCY = "GBP"
SOLD_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class ProjectedListing:
    title: str
    price: Decimal
    currency: str
    condition: Condition
    raw_condition: str | None
    link: str
    sold_date: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "price": float(self.price),
            "currency": self.currency,
            "normalizedCondition": self.condition.value,
            "rawCondition": self.raw_condition,
            "link": self.link,
            "soldDate": self.sold_date,
        }


def parse_price(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite():
        return None
    return price


def format_sold_date(date_string: str | None) -> str | None:
    """Format an ISO-8601 timestamp as dd/mm/yyyy, or None if it can't be read."""
    if not date_string:
        return None
    text = date_string.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).strftime(SOLD_DATE_FORMAT)
    except ValueError:
        log.warning(f"Invalid sold date: {date_string!r}")
        return None


def project_listing(
    raw: RawListing, fallback_currency: str = DEFAULT_CURRENCY
) -> ProjectedListing | None:
    price = parse_price(raw.price)
    if price is None:
        log.debug(f"Dropping item {raw.item_id or raw.link}: missing price")
        return None

    return ProjectedListing(
        title=raw.title or DEFAULT_TITLE,
        price=price,
        currency=raw.currency or fallback_currency,
        condition=normalize_condition(raw.condition),
        raw_condition=raw.condition,
        link=raw.link or DEFAULT_LINK,
        sold_date=format_sold_date(raw.end_date),
    )


def project_listings(
    raw_listings: list[RawListing], fallback_currency: str = DEFAULT_CURRENCY
) -> list[ProjectedListing]:
    projected = (project_listing(r, fallback_currency) for r in raw_listings)
    return [p for p in projected if p is not None]
