"""
Date utilities for lease accounting
Month arithmetic and day-precision normalization used by the schedule and report builders
"""

from datetime import date, datetime
from dateutil.relativedelta import relativedelta
from typing import Union

MONTH_ABBREVIATIONS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                       'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

DateLike = Union[date, datetime, str]


def normalize_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a timezone-naive calendar date (day precision)

    Accepts date, datetime or an ISO string ("2024-06-30" or "2024-06-30T00:00:00.000Z").
    Raises ValueError for anything else so callers never compare half-parsed dates.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date string")
        # Only the calendar part matters; time and offset are dropped
        try:
            return datetime.strptime(text[:10], '%Y-%m-%d').date()
        except ValueError:
            raise ValueError(f"Malformed date '{value}'. Expected YYYY-MM-DD.")
    raise ValueError(f"Unsupported date value: {value!r}")


def first_of_month(d: date) -> date:
    """Return the first day of the month containing d"""
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """
    Add months to a date - similar to EDATE in Excel
    Preserves the day of month when possible, clamps to month end otherwise
    """
    return d + relativedelta(months=months)


def add_years(d: date, years: int) -> date:
    """Add whole years to a date (29 Feb clamps to 28 Feb)"""
    return d + relativedelta(years=years)


def full_months_between(start_date: date, end_date: date) -> int:
    """
    Number of whole calendar months from start_date to end_date

    2022-05-15 -> 2024-05-10 is 23 months (the 24th anniversary is not reached).
    """
    delta = relativedelta(end_date, start_date)
    return delta.years * 12 + delta.months


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


def format_date_short(d: date) -> str:
    """Period label used on the PV calculation tables, e.g. May-22"""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]}-{str(d.year)[-2:]}"


def format_date_dmy(d: date) -> str:
    """dd/mm/yyyy - the format used on report headers and the journal footer"""
    return d.strftime('%d/%m/%Y')
