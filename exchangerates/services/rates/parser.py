from __future__ import annotations

"""ECB euro foreign exchange reference rate feed parser.

Document shape (namespaces elided)::

    <Envelope>
      <Cube>
        <Cube time="2024-01-05">
          <Cube currency="USD" rate="1.0921"/>
          ...
        </Cube>
        ...
      </Cube>
    </Envelope>

The feed lists the newest day first and omits EUR itself.
"""
from datetime import date
from typing import Dict, List
import math
import xml.etree.ElementTree as ET

from .dataset import EUR, Dataset, Day


class DatasetParseError(ValueError):
    pass


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_rate(raw: str | None, currency: str, day: str) -> float:
    try:
        rate = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise DatasetParseError(f"invalid rate {raw!r} for {currency} on {day}") from e
    if not math.isfinite(rate) or rate <= 0:
        raise DatasetParseError(f"non-finite or non-positive rate {raw!r} for {currency} on {day}")
    return rate


def _parse_day(cube: ET.Element) -> Day:
    raw_time = cube.get("time")
    if not raw_time:
        raise DatasetParseError("day cube without a time attribute")
    try:
        when = date.fromisoformat(raw_time)
    except ValueError as e:
        raise DatasetParseError(f"invalid date {raw_time!r}") from e

    rates: Dict[str, float] = {EUR: 1.0}
    for child in cube:
        if _local(child.tag) != "Cube":
            continue
        currency = child.get("currency")
        if not currency:
            raise DatasetParseError(f"rate cube without currency on {raw_time}")
        rates[currency.upper()] = _parse_rate(child.get("rate"), currency, raw_time)
    return Day(date=when, rates=dict(sorted(rates.items())))


def parse_dataset(document: str | bytes) -> Dataset:
    if isinstance(document, str):
        document = document.encode("utf-8")
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise DatasetParseError(f"malformed XML: {e}") from e

    outer = next((el for el in root if _local(el.tag) == "Cube"), None)
    if outer is None:
        raise DatasetParseError("document has no Cube element")

    days: List[Day] = [_parse_day(el) for el in outer if _local(el.tag) == "Cube"]
    if not days:
        raise DatasetParseError("document contains no exchange rate days")
    return Dataset.from_days(days)
