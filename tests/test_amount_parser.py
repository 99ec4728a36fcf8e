"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from passbook.utils.amount_parser import parse_amount, parse_positive_amount


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123.45", Decimal("123.45")),
        ("₹2,500.00", Decimal("2500.00")),
        ("Rs. 1,23,456.78", Decimal("123456.78")),
        ("INR 99", Decimal("99")),
        ("-50", Decimal("-50")),
        ("(75.25)", Decimal("-75.25")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "abc", "12.3.4"])
def test_parse_amount_invalid(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_parse_positive_amount_keeps_precision():
    assert parse_positive_amount("10.006") == Decimal("10.006")
    assert parse_positive_amount("₹7") == Decimal("7")


@pytest.mark.parametrize("raw", ["0", "-1", "(5)"])
def test_parse_positive_amount_rejects_non_positive(raw):
    with pytest.raises(ValueError):
        parse_positive_amount(raw)
