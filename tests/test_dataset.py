from datetime import date

import pytest

from exchangerates.services.money import round_rate
from exchangerates.services.rates.dataset import Dataset, Day


def test_timeframe(dataset):
    assert dataset.timeframe() == (date(2024, 1, 2), date(2024, 1, 5))
    assert Dataset().timeframe() is None


def test_has_currency(dataset):
    assert dataset.has_currency("USD")
    assert dataset.has_currency("EUR")
    assert not dataset.has_currency("CHF")
    assert not Dataset().has_currency("EUR")


@pytest.mark.parametrize(
    "when, expected",
    [
        (date(2024, 1, 4), date(2024, 1, 4)),  # exact
        (date(2024, 1, 7), date(2024, 1, 5)),  # weekend -> previous day
        (date(2023, 12, 1), date(2024, 1, 2)),  # before the first day
        (date(2030, 1, 1), date(2024, 1, 5)),  # after the last day
    ],
)
def test_day_index(dataset, when, expected):
    assert dataset.days[dataset.day_index(when)].date == expected


def test_latest_index(dataset):
    assert dataset.days[dataset.latest_index()].date == date(2024, 1, 5)
    assert Dataset().latest_index() == 0


def test_slice_inclusive(dataset):
    days = dataset.slice(date(2024, 1, 3), date(2024, 1, 4))
    assert [d.date for d in days] == [date(2024, 1, 3), date(2024, 1, 4)]


def test_slice_start_snaps_to_preceding_day():
    ds = Dataset.from_days(
        [
            Day(date(2024, 1, 5), {"EUR": 1.0}),
            Day(date(2024, 1, 8), {"EUR": 1.0}),
            Day(date(2024, 1, 9), {"EUR": 1.0}),
        ]
    )
    days = ds.slice(date(2024, 1, 6), date(2024, 1, 8))
    assert [d.date for d in days] == [date(2024, 1, 5), date(2024, 1, 8)]


def test_slice_open_ends(dataset):
    assert len(dataset.slice(None, None)) == 4
    assert [d.date for d in dataset.slice(None, date(2024, 1, 2))] == [date(2024, 1, 2)]
    assert dataset.slice(None, date(2023, 1, 1)) == []


def test_convert_rebases_rates(dataset):
    day = dataset.days[-1]
    usd = day.convert("USD")
    assert usd.rates["USD"] == 1.0
    assert usd.rates["EUR"] == round_rate(1 / 1.0921)
    assert usd.rates["JPY"] == pytest.approx(158.19 / 1.0921, abs=1e-6)


def test_convert_eur_is_identity(dataset):
    day = dataset.days[-1]
    assert day.convert("EUR") is day


def test_convert_missing_base(dataset):
    assert dataset.days[0].convert("GBP") is None


def test_to_mapping_fills_missing_with_none(dataset):
    mapping = dataset.days[-1].to_mapping(dataset.currencies)
    assert list(mapping) == dataset.currencies
    assert mapping["HRK"] is None
    assert mapping["GBP"] == pytest.approx(0.8603)


def test_round_rate_significant_digits_half_up():
    assert round_rate(0.1234565, digits=6) == 0.123457
    assert round_rate(2.675, digits=3) == 2.68
    assert round_rate(1.0) == 1.0
    assert round_rate(0.0) == 0.0
    assert round_rate(1 / 1800000) == pytest.approx(5.555555556e-07, rel=1e-12)
    assert round_rate(1800000 / 0.668, digits=4) == 2695000.0


def test_convert_on_large_rate_base_keeps_small_rates():
    day = Day(date(2001, 1, 2), {"EUR": 1.0, "GBP": 0.668, "TRL": 1800000.0, "USD": 1.22})
    trl = day.convert("TRL")
    assert trl.rates["TRL"] == 1.0
    assert trl.rates["EUR"] == pytest.approx(1 / 1800000, rel=1e-9)
    assert trl.rates["GBP"] == pytest.approx(0.668 / 1800000, rel=1e-9)
    assert trl.rates["USD"] == pytest.approx(1.22 / 1800000, rel=1e-9)
    assert all(r > 0 for r in trl.rates.values())
