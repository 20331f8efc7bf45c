import logging
from dataclasses import dataclass

from core.accessories import ExclusionPolicy, SearchCategory, exclude_accessories, infer_category
from core.aggregate import AggregateResult, aggregate
from core.conditions import filter_by_condition
from core.parser import DEFAULT_CURRENCY, project_listings
from core.relevance import filter_relevant
from core.scanner import RawListing

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchContext:
    query: str
    category: SearchCategory
    condition: str | None = None

    @classmethod
    def build(cls, query: str | None, condition: str | None = None) -> "SearchContext":
        query = (query or "").strip()
        return cls(query=query, category=infer_category(query), condition=condition)


def run_pipeline(
    listings: list[RawListing],
    query: str | None,
    condition: str | None = None,
    policy: ExclusionPolicy | None = None,
    fallback_currency: str = DEFAULT_CURRENCY,
) -> AggregateResult:
    """Filter one raw search batch down to priced, relevant, non-accessory sales."""
    context = SearchContext.build(query, condition)

    relevant = filter_relevant(listings, context.query)
    products = exclude_accessories(relevant, context.query, policy)
    projected = project_listings(products, fallback_currency)
    matching = filter_by_condition(projected, context.condition)
    result = aggregate(matching)

    log.info(
        f"[{context.query}] {len(listings)} raw -> {len(relevant)} relevant -> "
        f"{len(products)} products -> {len(projected)} priced -> "
        f"{result.total_items} kept ({context.category.value}, "
        f"condition={context.condition or 'any'})"
    )
    return result
