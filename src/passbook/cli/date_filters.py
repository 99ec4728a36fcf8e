"""Date range resolution for listing commands."""

from datetime import date
from typing import Optional

import click

from passbook.utils.date_parser import get_date_range, parse_optional_date


def resolve_date_range(
    period: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    today: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """Turn ``--period``/``--start-date``/``--end-date`` values into a date range.

    Placeholder dates such as "dd/mm/yyyy" leave that end of the range open.

    Raises:
        click.UsageError: If a period is combined with explicit dates or the range is reversed
        click.BadParameter: If a date cannot be parsed
    """
    if period and (start_date or end_date):
        raise click.UsageError("--period cannot be combined with --start-date or --end-date")
    if period:
        return get_date_range(period, today)

    start = _parse_bound(start_date, "--start-date", today)
    end = _parse_bound(end_date, "--end-date", today)
    if start is not None and end is not None and start > end:
        raise click.UsageError(f"--start-date {start} is after --end-date {end}")
    return start, end


def _parse_bound(value: Optional[str], option: str, today: Optional[date]) -> Optional[date]:
    try:
        return parse_optional_date(value, today)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint=option) from None

