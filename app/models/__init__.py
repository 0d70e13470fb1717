"""Pydantic response models for the Currency Converter API."""

from .constants import CURRENCY_NAMES  # re-export
from .rates import ConversionOut, RatesInfoOut

__all__ = [
    "CURRENCY_NAMES",
    "ConversionOut",
    "RatesInfoOut",
]
