import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from core.parser import ProjectedListing, parse_price

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateResult:
    items: list[ProjectedListing] = field(default_factory=list)
    average_price: Decimal = Decimal("0")
    total_items: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "averagePrice": float(self.average_price),
            "totalItems": self.total_items,
        }


def mean_price(listings: Iterable[ProjectedListing]) -> Decimal:
    prices = [p for p in (parse_price(item.price) for item in listings) if p is not None]
    if not prices:
        return Decimal("0")
    return sum(prices, Decimal("0")) / len(prices)


def aggregate(listings: Iterable[ProjectedListing]) -> AggregateResult:
    items = list(listings)
    return AggregateResult(
        items=items,
        average_price=mean_price(items),
        total_items=len(items),
    )


def merge(windows: Iterable[AggregateResult]) -> AggregateResult:
    """Combine several time windows into one population, one entry per sale.

    Listings sharing a link are the same sale; the first occurrence (in window
    order) is kept. The placeholder link counts as a link too, so listings
    without one collapse into the first of them.
    """
    seen: set[str] = set()
    unique = []
    total = 0
    for window in windows:
        for item in window.items:
            total += 1
            if item.link in seen:
                continue
            seen.add(item.link)
            unique.append(item)

    log.debug(f"Merged {total} listings into {len(unique)} unique")
    return aggregate(unique)
