import pytest
from datetime import date

from app.core.exceptions import InvalidRangeError
from app.services.working_days import is_working_day, leave_year_for, working_days


def test_full_working_week():
    """Mon 2026-03-09 to Fri 2026-03-13 is five working days."""
    assert working_days(date(2026, 3, 9), date(2026, 3, 13)) == 5


def test_weekend_only_range_is_zero():
    assert working_days(date(2026, 3, 14), date(2026, 3, 15)) == 0


def test_range_spanning_weekend():
    # Thu 12th to Tue 17th: Thu, Fri, Mon, Tue
    assert working_days(date(2026, 3, 12), date(2026, 3, 17)) == 4


def test_half_days_on_single_day_never_negative():
    day = date(2026, 3, 10)
    assert working_days(day, day, True, True) == 0


def test_half_day_flags_each_take_half_a_day():
    assert working_days(date(2026, 3, 9), date(2026, 3, 13), half_day_start=True) == 4.5
    assert working_days(date(2026, 3, 9), date(2026, 3, 13), True, True) == 4


def test_half_day_on_weekend_boundary_is_ignored():
    # Starts on a Saturday: the half-day flag has nothing to shorten
    assert working_days(date(2026, 3, 14), date(2026, 3, 17), half_day_start=True) == 2


def test_start_after_end_raises_invalid_range():
    with pytest.raises(InvalidRangeError) as exc:
        working_days(date(2026, 3, 13), date(2026, 3, 9))
    assert exc.value.status_code == 400
    assert exc.value.error_code == "INVALID_RANGE"


def test_holidays_excluded_only_when_passed():
    good_friday = date(2026, 4, 3)
    assert working_days(date(2026, 3, 30), date(2026, 4, 3)) == 5
    assert working_days(date(2026, 3, 30), date(2026, 4, 3), holidays={good_friday}) == 4


def test_custom_weekend():
    # Friday/Saturday weekend
    assert working_days(date(2026, 3, 9), date(2026, 3, 15), weekend_days=(4, 5)) == 5
    assert not is_working_day(date(2026, 3, 13), weekend_days=(4, 5))


def test_leave_year_for_calendar_and_financial_years():
    assert leave_year_for(date(2026, 3, 1)) == 2026
    assert leave_year_for(date(2026, 3, 1), "04-06") == 2025
    assert leave_year_for(date(2026, 4, 6), "04-06") == 2026
