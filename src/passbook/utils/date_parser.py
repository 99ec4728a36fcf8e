"""Date parsing for command line input.

Numeric dates are read day-first (``05/04/2024`` is 5 April 2024), the way
cheques and bank statements print them. ISO dates are always year-month-day.
Relative words and named periods resolve against a reference date that
defaults to today.
"""

import re
from datetime import date, timedelta
from typing import Callable, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Strings that form inputs send when a date field was left empty
PLACEHOLDER_DATES = frozenset({"", "dd/mm/yyyy", "mm/dd/yyyy", "yyyy-mm-dd", "null", "undefined", "none"})

# Financial years run from 1 April to 31 March
FY_START_MONTH = 4

_DAY_OFFSETS = {"yesterday": -1, "today": 0, "tomorrow": 1}
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def financial_year_start(day: date) -> date:
    """Return 1 April of the financial year containing ``day``."""
    year = day.year if day.month >= FY_START_MONTH else day.year - 1
    return date(year, FY_START_MONTH, 1)


def _this_week(today: date) -> tuple[date, date]:
    return today - timedelta(days=today.weekday()), today


def _last_week(today: date) -> tuple[date, date]:
    monday = today - timedelta(days=today.weekday() + 7)
    return monday, monday + timedelta(days=6)


def _this_month(today: date) -> tuple[date, date]:
    return today.replace(day=1), today


def _last_month(today: date) -> tuple[date, date]:
    first = today.replace(day=1)
    return first - relativedelta(months=1), first - timedelta(days=1)


def _this_year(today: date) -> tuple[date, date]:
    return today.replace(month=1, day=1), today


def _last_year(today: date) -> tuple[date, date]:
    first = today.replace(month=1, day=1)
    return first - relativedelta(years=1), first - timedelta(days=1)


def _this_fy(today: date) -> tuple[date, date]:
    return financial_year_start(today), today


def _last_fy(today: date) -> tuple[date, date]:
    start = financial_year_start(today)
    return start - relativedelta(years=1), start - timedelta(days=1)


# Periods that are still running end on the reference date
PERIODS: dict[str, Callable[[date], tuple[date, date]]] = {
    "this-week": _this_week,
    "last-week": _last_week,
    "this-month": _this_month,
    "last-month": _last_month,
    "this-year": _this_year,
    "last-year": _last_year,
    "this-fy": _this_fy,
    "last-fy": _last_fy,
}


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Return the first and last day of a named period.

    Args:
        period: One of ``PERIODS`` (e.g. "last-month", "this-fy")
        today: Reference date (defaults to date.today())

    Raises:
        ValueError: If the period is not recognized
    """
    key = period.strip().lower().replace(" ", "-")
    if key not in PERIODS:
        raise ValueError(f"Unknown period '{period}'. Supported periods: {', '.join(PERIODS)}")
    return PERIODS[key](today or date.today())


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date typed on the command line.

    Accepts ISO dates, day-first numeric dates ("15/01/2024"), written-out
    dates ("15 Jan 2024"), "yesterday"/"today"/"tomorrow", and period names
    such as "last month" or "this fy", which resolve to the first day of the
    period.

    Raises:
        ValueError: If the string is not a date
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text in _DAY_OFFSETS:
        return today + timedelta(days=_DAY_OFFSETS[text])
    if text.replace(" ", "-") in PERIODS:
        return get_date_range(text, today)[0]

    try:
        if _ISO_DATE.fullmatch(text):
            return date.fromisoformat(text)
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None


def parse_optional_date(date_str: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """Parse a date that may be absent.

    None, empty strings and placeholder strings such as "dd/mm/yyyy" mean
    "no date" and return None. Anything else must be a real date.

    Raises:
        ValueError: If a non-placeholder string cannot be parsed
    """
    if date_str is None or date_str.strip().lower() in PLACEHOLDER_DATES:
        return None
    return parse_date(date_str, today)
