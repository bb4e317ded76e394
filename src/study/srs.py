"""Spaced-repetition scheduling helpers for flashcard reviews."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


DEFAULT_EASINESS_FACTOR = 2.5
MIN_EASINESS_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 4
PASSING_QUALITY = 3

_CONFIDENCE_QUALITY = {
    "low": 3,
    "medium": 4,
    # Medium and high currently share a score.
    "high": 4,
}
_FALLBACK_QUALITY = 3


class InvalidQualityError(ValueError):
    """Raised when a review quality falls outside the 0-4 scale."""

    def __init__(self, quality: object) -> None:
        super().__init__(
            f"Quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}."
        )
        self.quality = quality


@dataclass(frozen=True, slots=True)
class SchedulingState:
    """Scheduling data for a single flashcard."""

    easiness: float
    interval_days: int
    repetitions: int
    next_due_at: datetime

    @classmethod
    def initial(cls, now: Optional[datetime] = None) -> SchedulingState:
        """Return the state assigned to a freshly created card."""
        if now is None:
            now = datetime.now(timezone.utc)
        return cls(
            easiness=DEFAULT_EASINESS_FACTOR,
            interval_days=1,
            repetitions=0,
            next_due_at=now,
        )


def round_half_up(value: float) -> int:
    """Round to the nearest integer, sending halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def as_utc(moment: datetime) -> datetime:
    """Express ``moment`` in UTC; naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def map_to_quality(correct: bool, confidence: str = "medium") -> int:
    """Translate a correct/incorrect answer and confidence into a 0-4 quality."""
    if not correct:
        return 0
    return _CONFIDENCE_QUALITY.get(confidence, _FALLBACK_QUALITY)


def is_due(next_due_at: datetime, now: Optional[datetime] = None) -> bool:
    """Return True when the card may be presented at ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)
    return as_utc(next_due_at) <= as_utc(now)


def validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality


def update_schedule(
    state: SchedulingState,
    quality: int,
    *,
    now: Optional[datetime] = None,
) -> SchedulingState:
    """Return the schedule that follows a review of the given quality.

    Uses the SM-2 recurrence on a 0-4 scale. The interval for the third and
    later successful reviews is computed from the interval and easiness held
    *before* this review; the easiness update always uses the prior
    easiness and the input quality, whichever branch the interval took.
    """
    quality = validate_quality(quality)
    if now is None:
        now = datetime.now(timezone.utc)

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = 1
    else:
        repetitions = state.repetitions + 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = max(1, round_half_up(state.interval_days * state.easiness))

    penalty = 5 - quality
    easiness = max(
        MIN_EASINESS_FACTOR,
        state.easiness + (0.1 - penalty * (0.08 + penalty * 0.02)),
    )

    return SchedulingState(
        easiness=easiness,
        interval_days=interval,
        repetitions=repetitions,
        next_due_at=now + timedelta(days=interval),
    )
