"""Configuration management via pydantic-settings."""

from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord
    discord_bot_token: str | None = None

    # eBay Browse API
    ebay_access_token: str | None = None
    ebay_api_url: str = "https://api.ebay.com/buy/browse/v1/item_summary/search"
    ebay_marketplace_id: str = "EBAY_GB"
    ebay_country: str = "GB"
    ebay_search_limit: int = 100
    http_timeout_seconds: float = 30.0

    # Filtering
    fallback_currency: str = "GBP"
    min_phone_price: Decimal = Decimal("50.00")
    conservative_include: bool = True

    # Database
    database_path: Path = Field(default=Path("./data/sold-price.db"))
    max_saved_searches: int = 10

    # Logging
    log_level: str = "INFO"

    @property
    def ebay_token(self) -> str | None:
        """Access token with any surrounding quotes from the .env file removed."""
        if not self.ebay_access_token:
            return None
        token = self.ebay_access_token.strip().strip("\"'")
        return token or None


settings = Settings()
