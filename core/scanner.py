import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import httpx

from config import settings

log = logging.getLogger(__name__)

BUYING_OPTIONS_FILTER = "buyingOptions:{FIXED_PRICE|AUCTION}"
SORT_BY_END_DATE = "-itemEndDate"

# Caller condition tokens to Browse API condition ids.
EBAY_CONDITION_IDS: dict[str, str] = {
    "new": "NEW",
    "openBox": "OPEN_BOX",
    "refurbished": "CERTIFIED_REFURBISHED|SELLER_REFURBISHED",
    "used": "USED_EXCELLENT|USED_VERY_GOOD|USED_GOOD|USED_ACCEPTABLE",
}


class TimeWindow(Enum):
    WEEK = 7
    MONTH = 30
    YEAR = 365

    @property
    def label(self) -> str:
        return f"Last {self.name.capitalize()}"

    def start(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(days=self.value)


class EbayAPIError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@dataclass(frozen=True)
class RawListing:
    item_id: str | None
    title: str | None
    price: str | None
    currency: str | None
    condition: str | None
    end_date: str | None
    link: str | None


def _format_filter_date(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{moment.microsecond // 1000:03d}Z"
    )


def build_filter(
    window: TimeWindow,
    condition: str | None = None,
    country: str = "GB",
    now: datetime | None = None,
) -> str:
    filters = [
        BUYING_OPTIONS_FILTER,
        f"deliveryCountry:{country}",
        f"itemLocationCountry:{country}",
        f"itemEndDate:[{_format_filter_date(window.start(now))}]",
    ]
    if condition:
        condition_ids = EBAY_CONDITION_IDS.get(condition)
        if condition_ids:
            filters.append(f"itemCondition:{{{condition_ids}}}")
        else:
            log.warning(f"No upstream condition filter for {condition!r}")
    return ",".join(filters)


def parse_item_summaries(json_data: dict) -> list[RawListing]:
    items = json_data.get("itemSummaries") or []
    results = []
    for item in items:
        if not isinstance(item, dict):
            log.warning(f"Skipping malformed item summary: {item!r}")
            continue
        price = item.get("price") or {}
        if not isinstance(price, dict):
            price = {}
        value = price.get("value")
        results.append(
            RawListing(
                item_id=item.get("legacyItemId") or item.get("itemId"),
                title=item.get("title"),
                price=str(value) if value is not None else None,
                currency=price.get("currency"),
                condition=item.get("condition"),
                end_date=item.get("itemEndDate"),
                link=item.get("itemWebUrl"),
            )
        )
    return results


def _error_details(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    errors = data.get("errors") if isinstance(data, dict) else None
    if errors and isinstance(errors, list) and isinstance(errors[0], dict):
        return errors[0].get("longMessage") or resp.text
    return resp.text


class EbayClient:
    def __init__(self, token: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if not self._client:
            token = self._token or settings.ebay_token
            if not token:
                raise EbayAPIError(
                    "eBay API configuration error",
                    details="Access token is missing. Set EBAY_ACCESS_TOKEN in .env.",
                )
            self._client = httpx.AsyncClient(
                headers={
                    "Authorization": f"Bearer {token}",
                    "X-EBAY-C-MARKETPLACE-ID": settings.ebay_marketplace_id,
                    "Content-Type": "application/json",
                },
                timeout=settings.http_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def search(
        self,
        keyword: str,
        window: TimeWindow = TimeWindow.WEEK,
        condition: str | None = None,
    ) -> list[RawListing]:
        client = await self._get_client()
        params = {
            "q": keyword,
            "filter": build_filter(window, condition, country=settings.ebay_country),
            "sort": SORT_BY_END_DATE,
            "limit": str(settings.ebay_search_limit),
        }
        log.info(f"Searching eBay ({window.name.lower()}): {keyword!r}")

        try:
            resp = await client.get(settings.ebay_api_url, params=params)
        except httpx.HTTPError as e:
            raise EbayAPIError("Failed to reach eBay API", details=str(e)) from e

        if resp.is_error:
            details = _error_details(resp)
            log.error(f"eBay API error {resp.status_code}: {details}")
            raise EbayAPIError(
                "Failed to fetch data from eBay API",
                status_code=resp.status_code,
                details=details,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise EbayAPIError("Invalid response from eBay API", details=str(e)) from e

        listings = parse_item_summaries(data if isinstance(data, dict) else {})
        log.info(f"Found {len(listings)} raw listings for {window.name.lower()} window")
        return listings


ebay_client = EbayClient()
