"""
Recurring Occurrence Calculator

Feb 29 policy: in a non-leap year a Feb 29 occasion is observed on Mar 1.
"""

import calendar
from datetime import date


def validate_month_day(month: int, day: int) -> None:
    """Raise ValueError unless (month, day) exists in some year"""
    # 2000 is a leap year, so Feb 29 passes
    date(2000, month, day)


def occurrence_in_year(month: int, day: int, year: int) -> date:
    """The date (month, day) is observed on in ``year``"""
    validate_month_day(month, day)
    if month == 2 and day == 29 and not calendar.isleap(year):
        return date(year, 3, 1)
    return date(year, month, day)


def next_occurrence(month: int, day: int, reference_date: date) -> date:
    """
    Next occurrence of (month, day) on or after ``reference_date``.

    A reference date falling on the occurrence returns that same date: same day
    is due, not passed.
    """
    candidate = occurrence_in_year(month, day, reference_date.year)
    if candidate < reference_date:
        candidate = occurrence_in_year(month, day, reference_date.year + 1)
    return candidate
