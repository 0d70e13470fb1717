from fastapi import APIRouter, Depends, Query

from app.models.rates import ConversionOut
from app.services.rates.cache_service import RateCache
from app.services.rates.conversion import convert_currency
from .rates import get_rate_cache

router = APIRouter(tags=["convert"])


# Sync handler: a cache miss blocks on the outbound fetch, so run in the threadpool
@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert(
    from_currency: str = Query(..., alias="from", description="Source currency code"),
    to_currency: str = Query(..., alias="to", description="Target currency code"),
    amount: float = Query(..., description="Amount in the source currency"),
    cache: RateCache = Depends(get_rate_cache),
):
    res = convert_currency(
        from_currency.strip().upper(), to_currency.strip().upper(), amount, cache
    )
    return ConversionOut.from_result(res)
