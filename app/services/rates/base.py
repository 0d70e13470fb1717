from __future__ import annotations

"""Rate provider abstraction.

A provider performs one fetch of a full rate table and reports the outcome as a
value: either the table or a FetchFailure tagged with a reason. Providers never
raise, which keeps the cache's fallback decision a plain branch.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Mapping, Union

# Currency code -> units per 1 base currency unit
RateTable = Mapping[str, float]

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SourceKind(str, Enum):
    LIVE = "live"
    FALLBACK = "fallback"


class FailureReason(str, Enum):
    NETWORK = "network_error"
    TIMEOUT = "timeout"
    MALFORMED = "malformed_response"
    MISSING_RATES = "missing_rates"


@dataclass(frozen=True)
class FetchFailure:
    reason: FailureReason
    detail: str = ""


FetchResult = Union[RateTable, FetchFailure]


class RateProvider(ABC):
    base_currency: str = "USD"

    @abstractmethod
    def fetch(self) -> FetchResult:
        """Return a fresh rate table, or a FetchFailure describing why not."""
        raise NotImplementedError
