import asyncio
import itertools
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Hashable, Protocol

from config import settings
from core.accessories import DEFAULT_RULES, ExclusionPolicy
from core.aggregate import AggregateResult, merge
from core.pipeline import run_pipeline
from core.scanner import EbayAPIError, RawListing, TimeWindow, ebay_client

log = logging.getLogger(__name__)

WINDOWS = (TimeWindow.WEEK, TimeWindow.MONTH, TimeWindow.YEAR)


class ListingSource(Protocol):
    async def search(
        self, keyword: str, window: TimeWindow = ..., condition: str | None = ...
    ) -> list[RawListing]: ...


@dataclass(frozen=True)
class PriceReport:
    query: str
    condition: str | None
    windows: dict[TimeWindow, AggregateResult]
    overall_average: Decimal
    total_unique_items: int

    @property
    def recent(self) -> AggregateResult:
        return self.windows[TimeWindow.WEEK]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            window.name.lower(): result.to_dict() for window, result in self.windows.items()
        }
        data["overallAverage"] = float(self.overall_average)
        data["totalUniqueItems"] = self.total_unique_items
        return data


def policy_from_settings() -> ExclusionPolicy:
    return ExclusionPolicy(
        rules=DEFAULT_RULES,
        min_phone_price=settings.min_phone_price,
        conservative_include=settings.conservative_include,
    )


class PriceSearch:
    """Runs a query across the week/month/year windows and merges the results.

    Each call to ``run`` is a new round for its caller ``key``. When the same
    caller has started a newer round by the time an older one finishes, the
    older result is stale and is discarded, including its failures.
    """

    def __init__(
        self,
        source: ListingSource | None = None,
        policy: ExclusionPolicy | None = None,
        fallback_currency: str | None = None,
    ):
        self.source = source or ebay_client
        self.policy = policy or policy_from_settings()
        self.fallback_currency = fallback_currency or settings.fallback_currency
        self._tokens = itertools.count(1)
        self._latest: dict[Hashable, int] = {}

    def latest_token(self, key: Hashable = None) -> int:
        return self._latest.get(key, 0)

    def _is_stale(self, key: Hashable, token: int) -> bool:
        return token != self._latest.get(key)

    async def _fetch_window(
        self, query: str, window: TimeWindow, condition: str | None
    ) -> AggregateResult:
        raw = await self.source.search(query, window=window, condition=condition)
        return run_pipeline(
            raw,
            query,
            condition=condition,
            policy=self.policy,
            fallback_currency=self.fallback_currency,
        )

    async def run(
        self, query: str, condition: str | None = None, key: Hashable = None
    ) -> PriceReport | None:
        token = next(self._tokens)
        self._latest[key] = token
        query = query.strip()
        log.info(f"Price search #{token}: {query!r} (condition={condition or 'any'})")

        try:
            results = await asyncio.gather(
                *(self._fetch_window(query, window, condition) for window in WINDOWS)
            )
        except EbayAPIError as e:
            if self._is_stale(key, token):
                log.info(f"Ignoring failure of stale price search #{token}: {e}")
                return None
            raise

        if self._is_stale(key, token):
            log.info(
                f"Discarding stale price search #{token} "
                f"(latest is #{self.latest_token(key)})"
            )
            return None

        windows = dict(zip(WINDOWS, results))
        overall = merge(results)
        return PriceReport(
            query=query,
            condition=condition,
            windows=windows,
            overall_average=overall.average_price,
            total_unique_items=overall.total_items,
        )


price_search = PriceSearch()
