from __future__ import annotations

import datetime as dt
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from .constants import CURRENCY_PATTERN

CurrencyCode = Annotated[str, StringConstraints(pattern=CURRENCY_PATTERN)]


class ConversionParams(BaseModel):
    """Base currency and optional target subset shared by the rate queries."""

    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[CurrencyCode] = Field(
        None, alias="from", description="Base currency (defaults to EUR)"
    )
    to: Optional[List[CurrencyCode]] = Field(
        None, description="Currencies to return (defaults to all)"
    )


class RatesRequest(ConversionParams):
    date: Optional[dt.date] = Field(
        None, description="Day to return; the closest preceding day is used when absent"
    )


class TimeframeRequest(ConversionParams):
    timeframe: Tuple[Optional[dt.date], Optional[dt.date]] = Field(
        ..., description="Inclusive [start, end]; null leaves that end open"
    )

    @model_validator(mode="after")
    def start_not_after_end(self) -> "TimeframeRequest":
        start, end = self.timeframe
        if start is not None and end is not None and start > end:
            raise ValueError("timeframe start must not be after its end")
        return self


class IndexOut(BaseModel):
    currencies: List[str]
    timeframe: Tuple[dt.date, dt.date]


class RatesOut(BaseModel):
    date: dt.date
    rates: Dict[str, Optional[float]]


class TimeframeOut(BaseModel):
    timeframe: Tuple[dt.date, dt.date]
    rates: List[RatesOut]


class CurrenciesNotFoundOut(BaseModel):
    currencies_not_found: List[str]


class HealthOut(BaseModel):
    status: str
    dataset_loaded: bool
    last_day: Optional[dt.date] = None
    updated_at: Optional[dt.datetime] = None
