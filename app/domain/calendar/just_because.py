"""
Just-Because Selector

Picks one send date per recipient per cycle. The days of the cycle year are
visited in an order shuffled by a generator seeded from (recipient_id, year), so
re-running selection gives the same answer whatever the run date. Days before
``not_before`` are passed over. Candidates within JUST_BECAUSE_SPACING_DAYS of a
major holiday or of another occasion on file for the recipient are rejected, up
to JUST_BECAUSE_MAX_ATTEMPTS rejections.
"""

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from ...config import JUST_BECAUSE_MAX_ATTEMPTS, JUST_BECAUSE_SPACING_DAYS
from ...shared.exceptions import SchedulingConflictError
from .holidays import MAJOR_HOLIDAYS, resolve
from .recurrence import occurrence_in_year
from .vocabulary import Relationship, parse_relationship

logger = logging.getLogger(__name__)

THINKING_OF_YOU = "thinking_of_you"
ROMANTIC = "romantic"
RECOGNITION = "recognition"

CARD_VARIATIONS = {
    Relationship.FAMILY: THINKING_OF_YOU,
    Relationship.FRIEND: THINKING_OF_YOU,
    Relationship.ROMANTIC: ROMANTIC,
    Relationship.PROFESSIONAL: RECOGNITION,
}

CARD_VARIATION_LABELS = {
    THINKING_OF_YOU: "Thinking of You",
    ROMANTIC: "Romantic",
    RECOGNITION: "Recognition",
}


@dataclass(frozen=True)
class JustBecauseSelection:
    date: date
    card_variation: str


def card_variation_for(relationship: Union[Relationship, str]) -> str:
    return CARD_VARIATIONS[parse_relationship(relationship)]


def exclusion_dates(year: int, existing_dates: Iterable[date]) -> list[date]:
    """
    Dates a Just Because card for ``year`` must stay away from.

    Neighbouring years are included so late-December holidays push back on
    early-January candidates and vice versa.
    """
    years = (year - 1, year, year + 1)
    excluded = [resolve(holiday, y) for holiday in MAJOR_HOLIDAYS for y in years]
    for existing in existing_dates:
        excluded.extend(occurrence_in_year(existing.month, existing.day, y) for y in years)
    return excluded


def is_excluded(candidate: date, exclusions: Iterable[date], spacing_days: int) -> bool:
    return any(abs((candidate - excluded).days) <= spacing_days for excluded in exclusions)


def select(
    recipient_id: int,
    relationship: Union[Relationship, str],
    year: int,
    existing_dates: Iterable[date] = (),
    not_before: Optional[date] = None,
    spacing_days: int = JUST_BECAUSE_SPACING_DAYS,
    max_attempts: int = JUST_BECAUSE_MAX_ATTEMPTS,
) -> JustBecauseSelection:
    """
    Select the Just Because date for ``recipient_id`` in ``year``.

    Args:
        recipient_id: Seeds the generator together with ``year``
        relationship: Determines the card variation
        year: Cycle year the date must fall in
        existing_dates: Dates of the recipient's other occasions (any year)
        not_before: Earliest acceptable date, e.g. today plus the lead time

    Raises:
        SchedulingConflictError: no valid date after ``max_attempts`` draws
    """
    card_variation = card_variation_for(relationship)

    first_day = date(year, 1, 1)
    last_day = date(year, 12, 31)
    earliest = first_day if not_before is None else max(first_day, not_before)

    if earliest > last_day:
        raise SchedulingConflictError(
            f"No days left in {year} for recipient {recipient_id}", recipient_id=recipient_id, year=year
        )

    exclusions = exclusion_dates(year, existing_dates)
    # The candidate order depends only on (recipient_id, year); a later
    # not_before skips early days without changing the order of the rest
    offsets = list(range((last_day - first_day).days + 1))
    random.Random(f"{recipient_id}:{year}").shuffle(offsets)

    attempts = 0
    for offset in offsets:
        candidate = first_day + timedelta(days=offset)
        if candidate < earliest:
            continue
        if not is_excluded(candidate, exclusions, spacing_days):
            return JustBecauseSelection(date=candidate, card_variation=card_variation)
        attempts += 1
        if attempts >= max_attempts:
            break

    logger.error(
        f"❌ No Just Because date for recipient {recipient_id} in {year} after {max_attempts} attempts"
    )
    raise SchedulingConflictError(
        f"Could not find a Just Because date for recipient {recipient_id} in {year}",
        recipient_id=recipient_id,
        year=year,
    )
