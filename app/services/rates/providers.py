from __future__ import annotations

"""Concrete rate provider backed by the Open Exchange Rates API.

The `latest.json` endpoint answers with `{"base": "USD", "rates": {...}}`. Only
the configured currencies are kept and the base currency is pinned to 1.0, so a
provider answering in another base cannot skew conversions.
"""
import logging
import math
from typing import Dict, Iterable
from urllib.parse import urlencode

from app.core.config import Settings
from app.services.http_client import (
    get_json,
    HttpDecodeError,
    HttpError,
    HttpTimeout,
)
from .base import FailureReason, FetchFailure, FetchResult, RateProvider

logger = logging.getLogger("app.rates")


class OpenExchangeRatesProvider(RateProvider):
    def __init__(
        self,
        api_url: str,
        api_key: str,
        currencies: Iterable[str],
        *,
        base_currency: str = "USD",
        timeout: float = 5.0,
    ):
        self.base_currency = base_currency
        self._currencies = tuple(currencies)
        self._timeout = timeout
        query = urlencode({"app_id": api_key, "symbols": ",".join(self._currencies)})
        self._url = f"{api_url}?{query}"

    def fetch(self) -> FetchResult:  # type: ignore[override]
        logger.info(
            "fetching live exchange rates",
            extra={"provider": "openexchangerates", "timeout": self._timeout},
        )
        try:
            payload = get_json(self._url, timeout=self._timeout)
        except HttpTimeout as e:
            return FetchFailure(FailureReason.TIMEOUT, str(e))
        except HttpDecodeError as e:
            return FetchFailure(FailureReason.MALFORMED, str(e))
        except HttpError as e:
            return FetchFailure(FailureReason.NETWORK, str(e))
        except Exception as e:  # noqa: BLE001 - fetch returns, never raises
            logger.exception("unexpected error fetching exchange rates")
            return FetchFailure(FailureReason.NETWORK, f"{type(e).__name__}: {e}")
        return self._extract_rates(payload)

    def _extract_rates(self, payload: object) -> FetchResult:
        if not isinstance(payload, dict):
            return FetchFailure(FailureReason.MALFORMED, "response is not a JSON object")
        rates = payload.get("rates")
        if rates is None:
            return FetchFailure(FailureReason.MISSING_RATES, "response has no 'rates' field")
        if not isinstance(rates, dict):
            return FetchFailure(FailureReason.MALFORMED, "'rates' is not an object")
        table: Dict[str, float] = {}
        for code in self._currencies:
            value = rates.get(code)
            # bool is an int subclass; reject it along with non-numbers
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value) or value <= 0:
                continue
            table[code] = float(value)
        table[self.base_currency] = 1.0
        return table


def make_rate_provider(settings: Settings) -> RateProvider:
    return OpenExchangeRatesProvider(
        str(settings.open_exchange_api_url),
        settings.open_exchange_api_key,
        settings.supported_currencies,
        base_currency=settings.base_currency,
        timeout=settings.http_timeout_seconds,
    )
