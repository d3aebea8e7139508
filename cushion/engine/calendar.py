"""Month grid builder for the calendar view"""

from datetime import date, timedelta
from typing import List

from cushion.models.views import CalendarDay
from cushion.utils.dates import days_in_month, first_of_month

GRID_CELLS = 42
WEEK_LENGTH = 7


def build_calendar_days(reference: date) -> List[CalendarDay]:
    """
    Build the 6x7 grid for the month containing `reference`.

    Weeks start on Monday. The grid is padded with the tail of the previous
    month and the head of the next one so it always holds 42 cells.
    """
    first = first_of_month(reference.year, reference.month)
    # weekday() is already Monday=0 .. Sunday=6
    leading = first.weekday()
    start = first - timedelta(days=leading)
    month_length = days_in_month(reference.year, reference.month)

    days = []
    for offset in range(GRID_CELLS):
        day = start + timedelta(days=offset)
        days.append(
            CalendarDay(
                date=day,
                is_current_month=leading <= offset < leading + month_length,
                date_key=day.isoformat(),
            )
        )
    return days


def split_weeks(days: List[CalendarDay]) -> List[List[CalendarDay]]:
    """Cut a grid into rows of seven days"""
    return [days[i:i + WEEK_LENGTH] for i in range(0, len(days), WEEK_LENGTH)]
