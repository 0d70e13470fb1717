"""Shared fixtures: a controllable clock, a scripted provider, and an app wired to both."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.rates.base import FailureReason, FetchFailure, RateProvider
from app.services.rates.cache_service import RateCache

FALLBACK = {
    "USD": 1.0,
    "INR": 88.00,
    "EUR": 0.92,
    "GBP": 0.78,
    "JPY": 156.3,
    "AED": 3.67,
}

LIVE = {
    "USD": 1.0,
    "INR": 83.25,
    "EUR": 0.90,
    "GBP": 0.80,
    "JPY": 150.0,
    "AED": 3.6725,
}

NETWORK_DOWN = FetchFailure(FailureReason.NETWORK, "connection refused")


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeProvider(RateProvider):
    """Replays scripted outcomes; the last one repeats once the script runs out."""

    base_currency = "USD"

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes) or [dict(LIVE)]
        self.calls = 0

    def fetch(self):
        self.calls += 1
        idx = min(self.calls, len(self._outcomes)) - 1
        return self._outcomes[idx]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    def _make(*outcomes, ttl_seconds=600):
        provider = FakeProvider(*outcomes)
        cache = RateCache(provider, FALLBACK, ttl_seconds=ttl_seconds, clock=clock)
        return cache, provider

    return _make


@pytest.fixture
def settings():
    s = Settings(_env_file=None, open_exchange_api_key="test-key")
    s.init_post_load()
    return s


@pytest.fixture
def make_client(settings, make_cache):
    def _make(*outcomes):
        cache, provider = make_cache(*outcomes)
        app = create_app(settings_override=settings, rate_cache=cache)
        return TestClient(app), provider

    return _make
