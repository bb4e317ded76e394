"""Study progress statistics built from review history."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.cards import count_cards, count_due_cards, list_reviews_for_user
from src.study.srs import PASSING_QUALITY, as_utc, round_half_up


DEFAULT_WINDOW_DAYS = 30


@dataclass(slots=True)
class DailyActivity:
    """Review counts for one calendar day."""

    day: date
    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect


@dataclass(slots=True)
class ProgressSummary:
    """Aggregated study metrics for a user."""

    total_cards: int
    due_today: int
    total_reviews: int
    accuracy: int
    streak: int
    activity: List[DailyActivity] = field(default_factory=list)


def _review_day(reviewed_at: datetime) -> date:
    return as_utc(reviewed_at).date()


def summarize_progress(
    reviews: Iterable[tuple[datetime, int]],
    total_cards: int,
    due_cards: int,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> ProgressSummary:
    """Compute accuracy, streak and recent activity from ``(reviewed_at, quality)`` pairs."""
    reviews = list(reviews)
    correct = sum(1 for _, quality in reviews if quality >= PASSING_QUALITY)
    accuracy = round_half_up(correct / len(reviews) * 100) if reviews else 0

    review_days = {_review_day(reviewed_at) for reviewed_at, _ in reviews}
    streak = 0
    cursor = today
    while streak < window_days and cursor in review_days:
        streak += 1
        cursor -= timedelta(days=1)

    window_start = today - timedelta(days=window_days - 1)
    activity: "OrderedDict[date, DailyActivity]" = OrderedDict()
    for reviewed_at, quality in sorted(reviews, key=lambda item: item[0]):
        day = _review_day(reviewed_at)
        if day < window_start:
            continue
        bucket = activity.setdefault(day, DailyActivity(day=day))
        if quality >= PASSING_QUALITY:
            bucket.correct += 1
        else:
            bucket.incorrect += 1

    return ProgressSummary(
        total_cards=total_cards,
        due_today=due_cards,
        total_reviews=len(reviews),
        accuracy=accuracy,
        streak=streak,
        activity=list(activity.values()),
    )


async def load_progress(
    session: AsyncSession,
    user_id: str,
    now: Optional[datetime] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> ProgressSummary:
    """Gather counts and review history for a user and summarise them."""
    if now is None:
        now = datetime.now(timezone.utc)

    total_cards = await count_cards(session, user_id)
    due_cards = await count_due_cards(session, user_id, now=now)
    reviews = await list_reviews_for_user(session, user_id)
    return summarize_progress(
        reviews,
        total_cards=total_cards,
        due_cards=due_cards,
        today=_review_day(now),
        window_days=window_days,
    )
