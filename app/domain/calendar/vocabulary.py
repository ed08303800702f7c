"""Closed vocabularies shared by the calendar engine and the persistence layer"""

import enum
from typing import Union

from ...shared.exceptions import ConfigurationError


class OccasionType(str, enum.Enum):
    # Personal occasions
    BIRTHDAY = "Birthday"
    ANNIVERSARY = "Anniversary"
    JUST_BECAUSE = "Just Because"

    # Holidays (date is always derived for the year in question)
    NEW_YEARS = "New Year's"
    VALENTINES_DAY = "Valentine's Day"
    PRESIDENTS_DAY = "Presidents' Day"
    ST_PATRICKS_DAY = "St. Patrick's Day"
    EASTER = "Easter"
    MOTHERS_DAY = "Mother's Day"
    MEMORIAL_DAY = "Memorial Day"
    FATHERS_DAY = "Father's Day"
    JUNETEENTH = "Juneteenth"
    INDEPENDENCE_DAY = "Independence Day"
    LABOR_DAY = "Labor Day"
    HALLOWEEN = "Halloween"
    VETERANS_DAY = "Veterans Day"
    THANKSGIVING = "Thanksgiving"
    CHRISTMAS = "Christmas"
    NEW_YEARS_EVE = "New Year's Eve"


PERSONAL_OCCASIONS = frozenset({OccasionType.BIRTHDAY, OccasionType.ANNIVERSARY})

HOLIDAY_OCCASIONS = frozenset(
    t for t in OccasionType if t not in PERSONAL_OCCASIONS and t is not OccasionType.JUST_BECAUSE
)


class Relationship(str, enum.Enum):
    FAMILY = "Family"
    FRIEND = "Friend"
    ROMANTIC = "Romantic"
    PROFESSIONAL = "Professional"


def parse_occasion_type(value: Union[OccasionType, str]) -> OccasionType:
    """Map a stored/declared occasion type onto the vocabulary, failing loudly on unknown values"""
    if isinstance(value, OccasionType):
        return value
    try:
        return OccasionType(value)
    except ValueError as e:
        raise ConfigurationError(f"Unknown occasion type: {value!r}") from e


def parse_relationship(value: Union[Relationship, str]) -> Relationship:
    if isinstance(value, Relationship):
        return value
    for member in Relationship:
        if member.value.lower() == str(value).strip().lower():
            return member
    raise ConfigurationError(f"Unknown relationship: {value!r}")


def is_holiday(value: Union[OccasionType, str]) -> bool:
    return parse_occasion_type(value) in HOLIDAY_OCCASIONS
