from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from exchangerates.models.rates import (
    CurrenciesNotFoundOut,
    IndexOut,
    RatesOut,
    RatesRequest,
    TimeframeOut,
    TimeframeRequest,
)
from exchangerates.services.rates.cache_service import DatasetStore
from exchangerates.services.rates.conversion import (
    rates_for_day,
    rates_for_days,
    resolve_conversion,
)
from .deps import get_store

"""Exchange rate query endpoints.

    - GET  /                 -> currencies and timeframe of the dataset
    - GET  /rates            -> latest rates (or query params date/from/to)
    - POST /rates            -> rates for a day, optionally rebased/filtered
    - POST /rates/timeframe  -> rates for every day in an inclusive range
"""

router = APIRouter(tags=["rates"])

_NOT_FOUND_RESPONSE = {404: {"model": CurrenciesNotFoundOut, "description": "Unknown currencies"}}


def _rates(store: DatasetStore, req: Optional[RatesRequest]) -> RatesOut:
    dataset = store.require()
    conversion = resolve_conversion(req, dataset)
    if req is not None and req.date is not None:
        index = dataset.day_index(req.date)
    else:
        index = dataset.latest_index()
    return rates_for_day(dataset, index, conversion)


@router.get(
    "/",
    response_model=IndexOut,
    summary="List available currencies and the timeframe of the dataset",
)
async def index(store: DatasetStore = Depends(get_store)):
    dataset = store.require()
    first, last = dataset.timeframe()  # type: ignore[misc]
    return IndexOut(currencies=list(dataset.currencies), timeframe=(first, last))


@router.post(
    "/rates",
    response_model=RatesOut,
    responses=_NOT_FOUND_RESPONSE,
    summary="Exchange rates for the given date",
)
async def rates(
    payload: Optional[RatesRequest] = Body(None),
    store: DatasetStore = Depends(get_store),
):
    return _rates(store, payload)


@router.get(
    "/rates",
    response_model=RatesOut,
    responses=_NOT_FOUND_RESPONSE,
    summary="Latest exchange rates (query parameters optional)",
)
async def rates_query(
    date: Optional[dt.date] = Query(None, description="Day to return"),
    from_: Optional[str] = Query(None, alias="from", description="Base currency"),
    to: Optional[List[str]] = Query(None, description="Currencies to return"),
    store: DatasetStore = Depends(get_store),
):
    if date is None and from_ is None and not to:
        return _rates(store, None)
    try:
        req = RatesRequest(date=date, from_=from_, to=to)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e
    return _rates(store, req)


@router.post(
    "/rates/timeframe",
    response_model=TimeframeOut,
    responses=_NOT_FOUND_RESPONSE,
    summary="Exchange rates for every day in a timeframe",
)
async def timeframe(
    payload: TimeframeRequest,
    store: DatasetStore = Depends(get_store),
):
    dataset = store.require()
    conversion = resolve_conversion(payload, dataset)
    start, end = payload.timeframe
    days = dataset.slice(start, end)
    if not days:
        raise HTTPException(status_code=404, detail="No rates available in the requested timeframe")
    out = rates_for_days(days, conversion, dataset.currencies)
    return TimeframeOut(timeframe=(out[0].date, out[-1].date), rates=out)
