"""
Calendar arithmetic for leave requests.

Public holidays are not excluded unless the caller passes them in; the
request workflow only does so when EXCLUDE_PUBLIC_HOLIDAYS is switched on.
"""
from datetime import date, timedelta
from typing import Collection, Iterator, Optional

from app.core.exceptions import InvalidRangeError

DEFAULT_WEEKEND = (5, 6)  # Saturday, Sunday


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_working_day(day: date, weekend_days: Collection[int] = DEFAULT_WEEKEND,
                   holidays: Optional[Collection[date]] = None) -> bool:
    if day.weekday() in weekend_days:
        return False
    return not (holidays and day in holidays)


def working_days(
    start: date,
    end: date,
    half_day_start: bool = False,
    half_day_end: bool = False,
    weekend_days: Collection[int] = DEFAULT_WEEKEND,
    holidays: Optional[Collection[date]] = None,
) -> float:
    """
    Number of leave days between two dates, inclusive.

    Weekend days (and holidays, when given) are skipped. Each half-day flag
    takes 0.5 off, but only when that day is itself a working day and the
    total would not drop below zero, so a single working day taken as two
    halves is 0, never -0.5.
    """
    if start > end:
        raise InvalidRangeError(details={"start_date": start.isoformat(), "end_date": end.isoformat()})

    days = 0.0
    for day in iter_dates(start, end):
        if is_working_day(day, weekend_days, holidays):
            days += 1

    if half_day_start and is_working_day(start, weekend_days, holidays) and days >= 0.5:
        days -= 0.5
    if half_day_end and is_working_day(end, weekend_days, holidays) and days >= 0.5:
        days -= 0.5

    return round(max(days, 0.0), 1)


def leave_year_for(day: date, financial_year_start: str = "01-01") -> int:
    """
    The leave year a date is booked against.

    financial_year_start is "MM-DD"; with the default "01-01" this is the
    calendar year. A year starting "04-06" puts 2026-03-01 in leave year 2025.
    """
    month, dom = (int(part) for part in financial_year_start.split("-"))
    if (day.month, day.day) >= (month, dom):
        return day.year
    return day.year - 1
