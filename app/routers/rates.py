from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.models.rates import RatesInfoOut
from app.services.rates.cache_service import RateCache

"""Rates router exposing cache provenance.

GET /rates-info reports whether the last successful fetch is still within the
cache window, when it happened, and which currencies the service converts.
It never triggers a fetch.
"""

router = APIRouter(tags=["rates"])


def get_rate_cache(request: Request) -> RateCache:
    return request.app.state.rate_cache


@router.get(
    "/rates-info",
    response_model=RatesInfoOut,
    summary="Report live vs fallback rate status",
)
def rates_info(cache: RateCache = Depends(get_rate_cache)):
    return RatesInfoOut.from_status(cache.status())
