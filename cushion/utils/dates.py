"""Date and month-key utilities"""

import calendar
from datetime import date


def date_key(day: date) -> str:
    """Format a date as the YYYY-MM-DD key used by the transaction log"""
    return day.isoformat()


def parse_date_key(value: str) -> date:
    """Parse a YYYY-MM-DD key into a date"""
    return date.fromisoformat(value)


def month_key(year: int, month: int) -> str:
    """Format a year/month pair as YYYY-MM"""
    return f"{year:04d}-{month:02d}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_of_month(year: int, month: int) -> date:
    return date(year, month, 1)


def last_of_month(year: int, month: int) -> date:
    return date(year, month, days_in_month(year, month))


def months_between(from_year: int, from_month: int, to_year: int, to_month: int) -> int:
    """Signed number of whole months from one year/month to another"""
    return (to_year - from_year) * 12 + (to_month - from_month)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5
