"""Spaced-repetition scheduling and review handling."""

from .srs import (
    InvalidQualityError,
    SchedulingState,
    is_due,
    map_to_quality,
    update_schedule,
)

__all__ = [
    "InvalidQualityError",
    "SchedulingState",
    "is_due",
    "map_to_quality",
    "update_schedule",
]
