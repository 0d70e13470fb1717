from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.services.rates.cache_service import CacheStatus
from app.services.rates.conversion import ConversionResult


class ConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    amount: float
    result: float
    source: str = Field(..., description="'live' or 'fallback'")

    @classmethod
    def from_result(cls, res: ConversionResult) -> "ConversionOut":
        return cls(
            from_currency=res.from_currency,
            to_currency=res.to_currency,
            amount=res.amount,
            result=res.result,
            source=res.source.value,
        )


class RatesInfoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_live: bool = Field(..., alias="isLive")
    last_update: Optional[datetime] = Field(None, alias="lastUpdate")
    source: str
    supported_currencies: List[str] = Field(..., alias="supportedCurrencies")

    @classmethod
    def from_status(cls, status: CacheStatus) -> "RatesInfoOut":
        return cls(
            is_live=status.is_live,
            last_update=status.last_update,
            source=status.source,
            supported_currencies=status.supported_currencies,
        )
