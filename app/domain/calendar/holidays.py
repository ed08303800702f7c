"""
Holiday Date Resolver

Maps (holiday, year) to a calendar date. Every holiday is declared as a rule:
a fixed month/day, the Nth weekday of a month (negative N counts from the
month end), or Western Easter. Adding a rule-based holiday means adding one
entry to HOLIDAY_RULES.
"""

from dataclasses import dataclass
from datetime import date
from typing import Union

from dateutil.easter import EASTER_WESTERN, easter
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from ...shared.exceptions import ConfigurationError
from .vocabulary import OccasionType, parse_occasion_type

# Indexed like date.weekday(): 0 = Monday ... 6 = Sunday
_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date:
    """
    Return the nth occurrence of ``weekday`` in ``month``.

    n = 1..5 counts from the first of the month, n = -1..-5 from the last day.

    Example:
        nth_weekday_of_month(2025, 5, SUNDAY, 2) -> 2025-05-11 (Mother's Day)
        nth_weekday_of_month(2025, 5, MONDAY, -1) -> 2025-05-26 (Memorial Day)
    """
    if n == 0 or not -5 <= n <= 5:
        raise ValueError(f"Occurrence must be in 1..5 or -5..-1, got {n}")
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday must be 0 (Monday) .. 6 (Sunday), got {weekday}")

    first_of_month = date(year, month, 1)
    # day=31 clamps to the last day of the month
    anchor = first_of_month if n > 0 else first_of_month + relativedelta(day=31)
    result = anchor + relativedelta(weekday=_WEEKDAYS[weekday](n))

    if result.month != month:
        raise ValueError(f"{year}-{month:02d} has no occurrence {n} of weekday {weekday}")
    return result


@dataclass(frozen=True)
class FixedDate:
    month: int
    day: int

    def resolve(self, year: int) -> date:
        return date(year, self.month, self.day)


@dataclass(frozen=True)
class NthWeekday:
    month: int
    weekday: int
    n: int

    def resolve(self, year: int) -> date:
        return nth_weekday_of_month(year, self.month, self.weekday, self.n)


@dataclass(frozen=True)
class WesternEaster:
    """Anonymous Gregorian computus"""

    def resolve(self, year: int) -> date:
        return easter(year, EASTER_WESTERN)


HolidayRule = Union[FixedDate, NthWeekday, WesternEaster]

HOLIDAY_RULES: dict[OccasionType, HolidayRule] = {
    OccasionType.NEW_YEARS: FixedDate(1, 1),
    OccasionType.VALENTINES_DAY: FixedDate(2, 14),
    OccasionType.PRESIDENTS_DAY: NthWeekday(2, MONDAY, 3),
    OccasionType.ST_PATRICKS_DAY: FixedDate(3, 17),
    OccasionType.EASTER: WesternEaster(),
    OccasionType.MOTHERS_DAY: NthWeekday(5, SUNDAY, 2),
    OccasionType.MEMORIAL_DAY: NthWeekday(5, MONDAY, -1),
    OccasionType.FATHERS_DAY: NthWeekday(6, SUNDAY, 3),
    OccasionType.JUNETEENTH: FixedDate(6, 19),
    OccasionType.INDEPENDENCE_DAY: FixedDate(7, 4),
    OccasionType.LABOR_DAY: NthWeekday(9, MONDAY, 1),
    OccasionType.HALLOWEEN: FixedDate(10, 31),
    OccasionType.VETERANS_DAY: FixedDate(11, 11),
    OccasionType.THANKSGIVING: NthWeekday(11, THURSDAY, 4),
    OccasionType.CHRISTMAS: FixedDate(12, 25),
    OccasionType.NEW_YEARS_EVE: FixedDate(12, 31),
}

# Card-sending holidays a Just Because card must keep its distance from
MAJOR_HOLIDAYS = frozenset(
    {
        OccasionType.NEW_YEARS,
        OccasionType.VALENTINES_DAY,
        OccasionType.ST_PATRICKS_DAY,
        OccasionType.EASTER,
        OccasionType.MOTHERS_DAY,
        OccasionType.FATHERS_DAY,
        OccasionType.INDEPENDENCE_DAY,
        OccasionType.HALLOWEEN,
        OccasionType.THANKSGIVING,
        OccasionType.CHRISTMAS,
        OccasionType.NEW_YEARS_EVE,
    }
)


def resolve(holiday: Union[OccasionType, str], year: int) -> date:
    """Resolve a holiday to its date in ``year``. Unknown holidays raise ConfigurationError."""
    holiday_type = parse_occasion_type(holiday)
    rule = HOLIDAY_RULES.get(holiday_type)
    if rule is None:
        raise ConfigurationError(f"{holiday_type.value!r} is not a holiday")
    return rule.resolve(year)


def next_holiday_occurrence(holiday: Union[OccasionType, str], reference_date: date) -> date:
    """This year's date, or next year's once this year's has passed (same day is still due)"""
    this_year = resolve(holiday, reference_date.year)
    if this_year < reference_date:
        return resolve(holiday, reference_date.year + 1)
    return this_year


def holidays_for_year(year: int) -> list[tuple[OccasionType, date]]:
    """All declared holidays for ``year``, in calendar order"""
    return sorted(((h, rule.resolve(year)) for h, rule in HOLIDAY_RULES.items()), key=lambda p: p[1])


def upcoming_holidays(reference_date: date, count: int = 3) -> list[tuple[OccasionType, date]]:
    """The next ``count`` holidays on or after ``reference_date``"""
    candidates = holidays_for_year(reference_date.year) + holidays_for_year(reference_date.year + 1)
    return [pair for pair in candidates if pair[1] >= reference_date][:count]
