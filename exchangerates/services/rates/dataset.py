from __future__ import annotations

"""In-memory exchange rate dataset.

Days are kept sorted by date so lookups can bisect. Rates on a day are units of
currency per one unit of that day's base currency; days parsed from the ECB feed
are EUR based.
"""
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from functools import cached_property
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from exchangerates.services.money import round_rate

EUR = "EUR"


@dataclass(frozen=True)
class Day:
    date: date
    rates: Dict[str, float]

    def rate(self, currency: str) -> Optional[float]:
        return self.rates.get(currency)

    def convert(self, base: str) -> Optional["Day"]:
        """Rebase the day's rates on ``base``; None when base has no rate that day."""
        base_rate = self.rates.get(base)
        if not base_rate:
            return None
        if base_rate == 1.0:
            return self
        return Day(
            date=self.date,
            rates={c: round_rate(r / base_rate) for c, r in self.rates.items()},
        )

    def to_mapping(self, currencies: Sequence[str]) -> Dict[str, Optional[float]]:
        return {c: self.rates.get(c) for c in currencies}


@dataclass(frozen=True)
class Dataset:
    days: List[Day] = field(default_factory=list)
    currencies: List[str] = field(default_factory=list)

    @classmethod
    def from_days(cls, days: Sequence[Day]) -> "Dataset":
        by_date: Dict[date, Day] = {}
        for day in days:
            by_date[day.date] = day
        ordered = [by_date[d] for d in sorted(by_date)]
        currencies = sorted({c for day in ordered for c in day.rates})
        return cls(days=ordered, currencies=currencies)

    def __len__(self) -> int:
        return len(self.days)

    @cached_property
    def dates(self) -> List[date]:
        return [d.date for d in self.days]

    def timeframe(self) -> Optional[Tuple[date, date]]:
        if not self.days:
            return None
        return self.days[0].date, self.days[-1].date

    def has_currency(self, currency: str) -> bool:
        i = bisect_left(self.currencies, currency)
        return i < len(self.currencies) and self.currencies[i] == currency

    def day_index(self, when: date) -> int:
        """Index of the day on ``when`` or the closest preceding day (0 if none precede)."""
        return max(bisect_right(self.dates, when) - 1, 0)

    def latest_index(self) -> int:
        return max(len(self.days) - 1, 0)

    def slice(self, start: Optional[date], end: Optional[date]) -> List[Day]:
        """Days between start and end, both inclusive.

        ``start`` snaps back to the closest preceding day so a range beginning on
        a non-publication day still carries the rates valid at that time.
        """
        if not self.days:
            return []
        lo = self.day_index(start) if start is not None else 0
        hi = bisect_right(self.dates, end) if end is not None else len(self.days)
        return self.days[lo:hi]
