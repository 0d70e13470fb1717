from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import localcontext
from typing import Optional, Protocol

from app.services.money import MONEY_PRECISION, is_valid_amount, round2, to_decimal
from .base import RateTable, SourceKind
from .cache_service import RateSnapshot

"""Currency conversion utility.

Centralizes logic for converting an amount between two supported currencies.
Responsibilities:
    - Fetch the current rate table via the injected rate cache.
    - Go through the base currency: amount / from_rate * to_rate, in Decimal.
    - Apply rounding (round2) only once, on the final value.
    - Return a simple immutable result object carrying rate provenance.

Codes are expected upper-cased by the caller. A code missing from the table is
an error; there is no default rate.
"""


class ConversionError(ValueError):
    kind = "conversion_error"


class InvalidCurrencyError(ConversionError):
    kind = "invalid_currency"

    def __init__(self, code: str):
        super().__init__(f"Invalid currency code: {code}")
        self.code = code


class InvalidAmountError(ConversionError):
    kind = "invalid_amount"

    def __init__(self, amount: object, message: str | None = None):
        super().__init__(
            message or f"Amount must be a finite, non-negative number (got {amount!r})"
        )
        self.amount = amount


class SupportsRateSnapshot(Protocol):
    def get_rates(self) -> RateSnapshot: ...


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    result: float
    source: SourceKind
    last_update: Optional[datetime]


def convert_amount(table: RateTable, from_code: str, to_code: str, amount: float) -> float:
    if not is_valid_amount(amount):
        raise InvalidAmountError(amount)
    from_rate = table.get(from_code)
    if from_rate is None:
        raise InvalidCurrencyError(from_code)
    to_rate = table.get(to_code)
    if to_rate is None:
        raise InvalidCurrencyError(to_code)
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        # amount / from_rate * to_rate, multiplied first so A -> A is exact
        result = to_decimal(amount) * to_decimal(to_rate) / to_decimal(from_rate)
    if not math.isfinite(float(result)):
        raise InvalidAmountError(amount, f"Converted amount is too large (got {amount!r})")
    return round2(result)


def convert_currency(
    from_code: str, to_code: str, amount: float, rates: SupportsRateSnapshot
) -> ConversionResult:
    # Reject bad amounts before touching the cache (no needless fetch)
    if not is_valid_amount(amount):
        raise InvalidAmountError(amount)
    snapshot = rates.get_rates()
    return ConversionResult(
        from_currency=from_code,
        to_currency=to_code,
        amount=amount,
        result=convert_amount(snapshot.table, from_code, to_code, amount),
        source=snapshot.source,
        last_update=snapshot.last_update,
    )
