from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from exchangerates.core.errors import CurrenciesNotFound
from exchangerates.models.constants import BASE_CURRENCY
from exchangerates.models.rates import ConversionParams, RatesOut
from .dataset import Dataset, Day

"""Currency conversion for the rate queries.

Responsibilities:
    - Validate the requested base/target currencies against the dataset.
    - Rebase a day's EUR rates on the requested base currency.
    - Restrict the output to the requested targets.

A currency can be known to the dataset yet missing on a given day (currencies
join and leave the ECB basket over time): such targets come back as null, and
a day missing the base currency is skipped or reported by the caller.
"""


@dataclass(frozen=True)
class Conversion:
    base: str = BASE_CURRENCY
    targets: List[str] = field(default_factory=list)


def resolve_conversion(params: Optional[ConversionParams], dataset: Dataset) -> Conversion:
    if params is None:
        return Conversion()

    base = params.from_ or BASE_CURRENCY
    if not dataset.has_currency(base):
        raise CurrenciesNotFound([base])

    targets = list(params.to or [])
    missing = [c for c in targets if not dataset.has_currency(c)]
    if missing:
        raise CurrenciesNotFound(missing)
    return Conversion(base=base, targets=targets)


def convert_day(day: Day, conversion: Conversion, currencies: Sequence[str]) -> Optional[RatesOut]:
    converted = day.convert(conversion.base)
    if converted is None:
        return None
    rates = converted.to_mapping(currencies)
    if conversion.targets:
        rates = {c: r for c, r in rates.items() if c in conversion.targets}
    return RatesOut(date=day.date, rates=rates)


def rates_for_day(dataset: Dataset, index: int, conversion: Conversion) -> RatesOut:
    out = convert_day(dataset.days[index], conversion, dataset.currencies)
    if out is None:
        # validated against the dataset, but absent on this particular day
        raise CurrenciesNotFound([conversion.base])
    return out


def rates_for_days(days: Sequence[Day], conversion: Conversion, currencies: Sequence[str]) -> List[RatesOut]:
    out: List[RatesOut] = []
    for day in days:
        converted = convert_day(day, conversion, currencies)
        if converted is not None:
            out.append(converted)
    if not out:
        raise CurrenciesNotFound([conversion.base])
    return out
