"""Pydantic request/response models for the exchange rate API."""

from .constants import BASE_CURRENCY, CURRENCY_PATTERN  # re-export
from .rates import (
    ConversionParams,
    RatesRequest,
    TimeframeRequest,
    IndexOut,
    RatesOut,
    TimeframeOut,
    CurrenciesNotFoundOut,
    HealthOut,
)

__all__ = [
    "BASE_CURRENCY",
    "CURRENCY_PATTERN",
    "ConversionParams",
    "RatesRequest",
    "TimeframeRequest",
    "IndexOut",
    "RatesOut",
    "TimeframeOut",
    "CurrenciesNotFoundOut",
    "HealthOut",
]
