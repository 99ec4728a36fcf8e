"""Utility functions for passbook."""

from passbook.utils.date_parser import parse_date, parse_optional_date
from passbook.utils.amount_parser import parse_amount, parse_positive_amount
from passbook.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_optional_date", "parse_amount", "parse_positive_amount", "resolve_account"]
