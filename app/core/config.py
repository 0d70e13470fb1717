from functools import lru_cache
from typing import Dict, List
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, PORT,
    OPEN_EXCHANGE_API_KEY, RATES_CACHE_TTL_SECONDS). List / dict fields are read as JSON.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Currency Converter"
    debug: bool = False
    version: str = "1.0.0"

    # Process
    host: str = "0.0.0.0"
    port: int = 3000

    # Currencies
    base_currency: str = "USD"
    supported_currencies: List[str] = ["USD", "INR", "EUR", "GBP", "JPY", "AED"]
    # Static table (base USD) served whenever the live provider is unavailable
    fallback_rates: Dict[str, float] = {
        "USD": 1.0,
        "INR": 88.00,
        "EUR": 0.92,
        "GBP": 0.78,
        "JPY": 156.3,
        "AED": 3.67,
    }

    # Exchange rates / caching
    open_exchange_api_url: AnyHttpUrl = "https://openexchangerates.org/api/latest.json"
    open_exchange_api_key: str = "demo"
    rates_cache_ttl_seconds: int = 600  # 10 minutes
    http_timeout_seconds: float = 5.0

    def init_post_load(self) -> None:
        """Normalize currency codes and validate the fallback table."""
        self.base_currency = self.base_currency.strip().upper()
        self.supported_currencies = [c.strip().upper() for c in self.supported_currencies]
        self.fallback_rates = {
            k.strip().upper(): float(v) for k, v in self.fallback_rates.items()
        }
        if self.base_currency not in self.supported_currencies:
            raise ValueError(
                f"Base currency '{self.base_currency}' must be one of the supported currencies"
            )
        missing = set(self.supported_currencies) - set(self.fallback_rates)
        if missing:
            raise ValueError(f"Fallback rates missing for: {sorted(missing)}")
        bad = [k for k, v in self.fallback_rates.items() if not v > 0]
        if bad:
            raise ValueError(f"Fallback rates must be positive: {sorted(bad)}")
        # Base is always exactly 1.0 regardless of what was configured
        self.fallback_rates[self.base_currency] = 1.0
        if self.rates_cache_ttl_seconds <= 0:
            raise ValueError("rates_cache_ttl_seconds must be positive")
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
