"""Tests for command line date parsing."""

from datetime import date

import pytest

from passbook.utils.date_parser import (
    PERIODS,
    financial_year_start,
    get_date_range,
    parse_date,
    parse_optional_date,
)

# A Saturday in the first quarter of FY 2024-25
TODAY = date(2024, 6, 15)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2024-01-05", date(2024, 1, 5)),
        ("05/04/2024", date(2024, 4, 5)),
        ("15/01/2024", date(2024, 1, 15)),
        ("5-4-2024", date(2024, 4, 5)),
        ("15 Jan 2024", date(2024, 1, 15)),
        ("January 15, 2024", date(2024, 1, 15)),
        ("  2024-03-31  ", date(2024, 3, 31)),
    ],
)
def test_absolute_dates_are_day_first(text, expected):
    assert parse_date(text, TODAY) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("yesterday", date(2024, 6, 14)),
        ("Today", date(2024, 6, 15)),
        ("tomorrow", date(2024, 6, 16)),
    ],
)
def test_relative_days(text, expected):
    assert parse_date(text, TODAY) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("last month", date(2024, 5, 1)),
        ("this-fy", date(2024, 4, 1)),
        ("last fy", date(2023, 4, 1)),
        ("this week", date(2024, 6, 10)),
    ],
)
def test_period_names_resolve_to_period_start(text, expected):
    assert parse_date(text, TODAY) == expected


@pytest.mark.parametrize("text", ["2024-13-01", "31/02/2024", "not a date", "99/99/9999"])
def test_invalid_dates(text):
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date(text, TODAY)


def test_defaults_to_real_today():
    assert parse_date("today") == date.today()


@pytest.mark.parametrize("text", [None, "", "   ", "dd/mm/yyyy", "DD/MM/YYYY", "yyyy-mm-dd", "null", "undefined"])
def test_placeholders_mean_no_date(text):
    assert parse_optional_date(text, TODAY) is None


def test_optional_date_still_validates():
    assert parse_optional_date("01/04/2024", TODAY) == date(2024, 4, 1)
    with pytest.raises(ValueError):
        parse_optional_date("someday", TODAY)


@pytest.mark.parametrize(
    "period,expected",
    [
        ("this-week", (date(2024, 6, 10), date(2024, 6, 15))),
        ("last-week", (date(2024, 6, 3), date(2024, 6, 9))),
        ("this-month", (date(2024, 6, 1), date(2024, 6, 15))),
        ("last-month", (date(2024, 5, 1), date(2024, 5, 31))),
        ("this-year", (date(2024, 1, 1), date(2024, 6, 15))),
        ("last-year", (date(2023, 1, 1), date(2023, 12, 31))),
        ("this-fy", (date(2024, 4, 1), date(2024, 6, 15))),
        ("last-fy", (date(2023, 4, 1), date(2024, 3, 31))),
    ],
)
def test_get_date_range(period, expected):
    assert get_date_range(period, TODAY) == expected


def test_every_period_is_ordered():
    for period in PERIODS:
        start, end = get_date_range(period, TODAY)
        assert start <= end <= TODAY, period


def test_ranges_at_year_end():
    march_end = date(2024, 3, 31)
    assert get_date_range("this-fy", march_end) == (date(2023, 4, 1), march_end)
    assert get_date_range("last-fy", march_end) == (date(2022, 4, 1), date(2023, 3, 31))
    # Leap February
    assert get_date_range("last-month", march_end) == (date(2024, 2, 1), date(2024, 2, 29))


def test_period_names_are_forgiving():
    assert get_date_range("Last Month", TODAY) == get_date_range("last-month", TODAY)


def test_unknown_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("fortnight", TODAY)


@pytest.mark.parametrize(
    "day,expected",
    [
        (date(2024, 4, 1), date(2024, 4, 1)),
        (date(2024, 3, 31), date(2023, 4, 1)),
        (date(2025, 1, 10), date(2024, 4, 1)),
        (date(2024, 12, 31), date(2024, 4, 1)),
    ],
)
def test_financial_year_start(day, expected):
    assert financial_year_start(day) == expected
