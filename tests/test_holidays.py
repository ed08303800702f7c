from datetime import date

import pytest

from app.domain.calendar import holidays
from app.domain.calendar.holidays import MONDAY, SUNDAY, THURSDAY, nth_weekday_of_month
from app.domain.calendar.vocabulary import OccasionType
from app.shared.exceptions import ConfigurationError


@pytest.mark.parametrize("year", range(2020, 2036))
def test_christmas_is_always_december_25(year):
    assert holidays.resolve("Christmas", year) == date(year, 12, 25)


@pytest.mark.parametrize("year", range(2020, 2036))
def test_mothers_day_is_second_sunday_of_may(year):
    result = holidays.resolve(OccasionType.MOTHERS_DAY, year)
    assert result.month == 5
    assert result.weekday() == SUNDAY
    assert 8 <= result.day <= 14


@pytest.mark.parametrize(
    "holiday, year, expected",
    [
        (OccasionType.THANKSGIVING, 2024, date(2024, 11, 28)),
        (OccasionType.THANKSGIVING, 2025, date(2025, 11, 27)),
        (OccasionType.FATHERS_DAY, 2025, date(2025, 6, 15)),
        (OccasionType.MEMORIAL_DAY, 2025, date(2025, 5, 26)),
        (OccasionType.LABOR_DAY, 2025, date(2025, 9, 1)),
        (OccasionType.PRESIDENTS_DAY, 2025, date(2025, 2, 17)),
        (OccasionType.EASTER, 2024, date(2024, 3, 31)),
        (OccasionType.EASTER, 2025, date(2025, 4, 20)),
        (OccasionType.EASTER, 2026, date(2026, 4, 5)),
        (OccasionType.JUNETEENTH, 2025, date(2025, 6, 19)),
        (OccasionType.INDEPENDENCE_DAY, 2025, date(2025, 7, 4)),
    ],
)
def test_known_holiday_dates(holiday, year, expected):
    assert holidays.resolve(holiday, year) == expected


def test_resolve_accepts_stored_string_values():
    assert holidays.resolve("Mother's Day", 2025) == date(2025, 5, 11)


def test_unknown_holiday_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        holidays.resolve("Arbor Day", 2025)


def test_personal_occasion_is_not_a_holiday():
    with pytest.raises(ConfigurationError):
        holidays.resolve(OccasionType.BIRTHDAY, 2025)


def test_nth_weekday_counts_from_month_end():
    assert nth_weekday_of_month(2025, 5, MONDAY, -1) == date(2025, 5, 26)
    assert nth_weekday_of_month(2025, 11, THURSDAY, -1) == date(2025, 11, 27)


def test_nth_weekday_rejects_missing_occurrence():
    # February 2025 has only four Mondays
    with pytest.raises(ValueError):
        nth_weekday_of_month(2025, 2, MONDAY, 5)
    with pytest.raises(ValueError):
        nth_weekday_of_month(2025, 2, MONDAY, 0)


def test_next_holiday_occurrence_same_day_is_due():
    assert holidays.next_holiday_occurrence("Christmas", date(2025, 12, 25)) == date(2025, 12, 25)
    assert holidays.next_holiday_occurrence("Christmas", date(2025, 12, 26)) == date(2026, 12, 25)


def test_holidays_for_year_is_sorted_and_complete():
    result = holidays.holidays_for_year(2025)
    dates = [d for _, d in result]
    assert dates == sorted(dates)
    assert len(result) == len(holidays.HOLIDAY_RULES)


def test_upcoming_holidays_cross_year_boundary():
    result = holidays.upcoming_holidays(date(2025, 12, 20), 3)
    assert result == [
        (OccasionType.CHRISTMAS, date(2025, 12, 25)),
        (OccasionType.NEW_YEARS_EVE, date(2025, 12, 31)),
        (OccasionType.NEW_YEARS, date(2026, 1, 1)),
    ]
