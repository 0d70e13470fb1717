from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Iterable, List, Optional

from app.core.config import Settings
from .base import (
    Clock,
    FetchFailure,
    RateProvider,
    RateTable,
    SourceKind,
    utc_now,
)
from .providers import make_rate_provider

"""Central rate cache service.

Purpose:
    Decide, per request, whether to reuse the cached rate table, fetch a fresh
    one from the provider, or degrade to the static fallback table.

Design:
    - One RateCache per application instance (held on app.state); tests build
      their own with a fake provider and clock.
    - State is an immutable _CacheState replaced by a single assignment, so a
      reader never sees a half-updated table.
    - A failed refresh does not advance the fetch timestamp; the next request
      retries immediately. The previous live table is dropped in favour of the
      fallback rather than served stale.
    - Refreshes are single-flight: requests that queued behind an in-flight
      refresh reuse its outcome instead of fetching again.
"""

LIVE_SOURCE_LABEL = "Open Exchange Rates API"
FALLBACK_SOURCE_LABEL = "Fallback rates"

logger = logging.getLogger("app.rates")


@dataclass(frozen=True)
class _CacheState:
    table: RateTable
    last_fetch: Optional[datetime]
    source: SourceKind


@dataclass(frozen=True)
class RateSnapshot:
    table: RateTable
    source: SourceKind
    last_update: Optional[datetime]


@dataclass(frozen=True)
class CacheStatus:
    is_live: bool
    last_update: Optional[datetime]
    source: str
    supported_currencies: List[str]


class RateCache:
    """Time-bound cache in front of a RateProvider with a static fallback."""

    def __init__(
        self,
        provider: RateProvider,
        fallback: RateTable,
        *,
        ttl_seconds: float = 600,
        supported_currencies: Iterable[str] | None = None,
        clock: Clock = utc_now,
    ):
        self._provider = provider
        self._base = provider.base_currency
        fallback_table = dict(fallback)
        fallback_table[self._base] = 1.0
        self._fallback: RateTable = MappingProxyType(fallback_table)
        self._ttl = timedelta(seconds=ttl_seconds)
        self._supported = list(supported_currencies or fallback_table.keys())
        self._clock = clock
        self._state = _CacheState(self._fallback, None, SourceKind.FALLBACK)
        self._refresh_lock = threading.Lock()
        self._attempts = 0

    # Internal --------------------------------------------------
    def _is_fresh(self, state: _CacheState, now: datetime) -> bool:
        if state.last_fetch is None:
            return False
        age = now - state.last_fetch
        # A clock that stepped backwards yields a negative age: treat as expired
        return timedelta(0) <= age < self._ttl

    def _refresh(self) -> RateSnapshot:
        previous = self._state
        result = self._provider.fetch()
        if isinstance(result, FetchFailure):
            logger.warning(
                "rate fetch failed; using fallback rates",
                extra={
                    "reason": result.reason.value,
                    "detail": result.detail,
                    "source": SourceKind.FALLBACK.value,
                    "last_update": previous.last_fetch,
                },
            )
            state = _CacheState(self._fallback, previous.last_fetch, SourceKind.FALLBACK)
        else:
            table = dict(result)
            table[self._base] = 1.0
            state = _CacheState(MappingProxyType(table), self._clock(), SourceKind.LIVE)
            logger.info(
                "live exchange rates updated",
                extra={
                    "source": SourceKind.LIVE.value,
                    "last_update": state.last_fetch,
                    "rates": table,
                },
            )
        self._state = state
        self._attempts += 1
        return RateSnapshot(state.table, state.source, state.last_fetch)

    # Public API -----------------------------------------------
    @property
    def last_fetch(self) -> Optional[datetime]:
        return self._state.last_fetch

    @property
    def fallback_table(self) -> RateTable:
        return self._fallback

    def get_rates(self) -> RateSnapshot:
        # Read the attempt counter before the state: a refresh publishes state first
        seen = self._attempts
        state = self._state
        if state.source is SourceKind.LIVE and self._is_fresh(state, self._clock()):
            logger.debug(
                "using cached exchange rates",
                extra={"source": SourceKind.LIVE.value, "last_update": state.last_fetch},
            )
            return RateSnapshot(state.table, SourceKind.LIVE, state.last_fetch)
        with self._refresh_lock:
            if self._attempts != seen:
                # Another request finished a refresh while we waited; share it
                state = self._state
                return RateSnapshot(state.table, state.source, state.last_fetch)
            return self._refresh()

    def status(self) -> CacheStatus:
        state = self._state
        is_live = state.source is SourceKind.LIVE and self._is_fresh(state, self._clock())
        return CacheStatus(
            is_live=is_live,
            last_update=state.last_fetch,
            source=LIVE_SOURCE_LABEL if is_live else FALLBACK_SOURCE_LABEL,
            supported_currencies=list(self._supported),
        )


def build_rate_cache(settings: Settings, clock: Clock = utc_now) -> RateCache:
    """Factory wiring the configured provider, fallback table and TTL."""
    return RateCache(
        make_rate_provider(settings),
        settings.fallback_rates,
        ttl_seconds=settings.rates_cache_ttl_seconds,
        supported_currencies=settings.supported_currencies,
        clock=clock,
    )
