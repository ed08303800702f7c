from datetime import date, timedelta

import pytest

from app.domain.calendar import just_because
from app.domain.calendar.vocabulary import Relationship
from app.shared.exceptions import ConfigurationError, SchedulingConflictError

BIRTHDAY = date(1960, 5, 10)


def test_selection_is_reproducible_for_recipient_and_year():
    first = just_because.select(42, "Family", 2025, [BIRTHDAY])
    second = just_because.select(42, "Family", 2025, [BIRTHDAY])
    assert first == second
    assert first.date.year == 2025


def test_selection_keeps_distance_from_holidays_and_occasions():
    for recipient_id in range(1, 30):
        selection = just_because.select(recipient_id, "Friend", 2025, [BIRTHDAY])
        exclusions = just_because.exclusion_dates(2025, [BIRTHDAY])
        assert not just_because.is_excluded(selection.date, exclusions, 14)
        assert abs((selection.date - date(2025, 5, 10)).days) > 14
        assert abs((selection.date - date(2025, 12, 25)).days) > 14


def test_selection_respects_not_before():
    not_before = date(2025, 9, 1)
    for recipient_id in range(1, 20):
        selection = just_because.select(recipient_id, "Family", 2025, not_before=not_before)
        assert not_before <= selection.date <= date(2025, 12, 31)


@pytest.mark.parametrize(
    "relationship, variation",
    [
        (Relationship.FAMILY, just_because.THINKING_OF_YOU),
        (Relationship.FRIEND, just_because.THINKING_OF_YOU),
        (Relationship.ROMANTIC, just_because.ROMANTIC),
        (Relationship.PROFESSIONAL, just_because.RECOGNITION),
        ("romantic", just_because.ROMANTIC),
    ],
)
def test_card_variation_follows_relationship(relationship, variation):
    assert just_because.card_variation_for(relationship) == variation
    assert just_because.select(7, relationship, 2025).card_variation == variation


def test_unknown_relationship_raises():
    with pytest.raises(ConfigurationError):
        just_because.card_variation_for("Neighbor")


def test_dense_calendar_raises_scheduling_conflict():
    # A spacing window this wide excludes every day of the year
    with pytest.raises(SchedulingConflictError) as exc_info:
        just_because.select(5, "Family", 2025, spacing_days=200, max_attempts=10)
    assert exc_info.value.recipient_id == 5
    assert exc_info.value.year == 2025


def test_no_days_left_in_year_raises_scheduling_conflict():
    with pytest.raises(SchedulingConflictError):
        just_because.select(5, "Family", 2025, not_before=date(2026, 1, 10))


def test_exclusions_include_neighbouring_years():
    exclusions = just_because.exclusion_dates(2025, [])
    assert date(2024, 12, 25) in exclusions
    assert date(2026, 1, 1) in exclusions
    assert just_because.is_excluded(date(2025, 1, 5), exclusions, 14)


def test_selection_does_not_depend_on_run_date():
    for recipient_id in (7, 19, 42):
        baseline = just_because.select(recipient_id, "Family", 2025, [BIRTHDAY])
        for days_before in (0, 1, 2, 5, 30, 90):
            not_before = max(date(2025, 1, 1), baseline.date - timedelta(days=days_before))
            again = just_because.select(recipient_id, "Family", 2025, [BIRTHDAY], not_before=not_before)
            assert again.date == baseline.date


def test_consecutive_run_dates_keep_the_same_pick():
    first = just_because.select(7, "Family", 2025, not_before=date(2025, 3, 1))
    for day in range(2, 6):
        not_before = date(2025, 3, day)
        if not_before <= first.date:
            assert just_because.select(7, "Family", 2025, not_before=not_before) == first
