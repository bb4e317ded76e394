"""Helpers for working with card persistence."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from src.study.srs import SchedulingState, as_utc

from . import Card, CardReview


CARD_TYPES = ("mcq", "short")


def scheduling_state_of(card: Card) -> SchedulingState:
    """Copy the stored scheduling columns of a card into a value object."""
    return SchedulingState(
        easiness=card.easiness_factor,
        interval_days=card.interval,
        repetitions=card.repetition,
        next_due_at=as_utc(card.next_review_at),
    )


async def create_card(
    session: AsyncSession,
    user_id: str,
    prompt: str,
    answer: str,
    card_type: str = "short",
    choices: Optional[Sequence[Any]] = None,
    now: Optional[datetime] = None,
) -> Card:
    """Persist a new card with the initial schedule, due immediately."""
    if card_type not in CARD_TYPES:
        raise ValueError(f"Unsupported card type: {card_type!r}.")

    state = SchedulingState.initial(as_utc(now) if now is not None else None)
    card = Card(
        user_id=user_id,
        card_type=card_type,
        prompt=prompt.strip(),
        answer=answer.strip(),
        choices=list(choices) if choices is not None else None,
        easiness_factor=state.easiness,
        interval=state.interval_days,
        repetition=state.repetitions,
        next_review_at=state.next_due_at,
        version=0,
    )
    session.add(card)
    await session.flush()
    return card


async def get_card_for_user(
    session: AsyncSession, user_id: str, card_id: int
) -> Optional[Card]:
    """Return the card when it exists and belongs to the user."""
    stmt = select(Card).where(Card.id == card_id, Card.user_id == user_id)
    result = await session.execute(stmt)
    return result.scalars().first()


async def list_due_cards(
    session: AsyncSession,
    user_id: str,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> list[Card]:
    """Return the user's cards that are due, earliest due first."""
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)

    stmt = (
        select(Card)
        .where(Card.user_id == user_id, Card.next_review_at <= now)
        .order_by(Card.next_review_at, Card.id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def apply_schedule(
    session: AsyncSession,
    card: Card,
    state: SchedulingState,
    now: Optional[datetime] = None,
) -> bool:
    """Write a new schedule if nobody else has updated the card since it was read.

    The write is conditional on the version the caller loaded; returns False
    when another review won the race and nothing was written.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)
    next_due_at = as_utc(state.next_due_at)

    expected_version = card.version
    stmt = (
        update(Card)
        .where(Card.id == card.id, Card.version == expected_version)
        .values(
            easiness_factor=state.easiness,
            interval=state.interval_days,
            repetition=state.repetitions,
            next_review_at=next_due_at,
            version=expected_version + 1,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:
        return False

    for key, value in (
        ("easiness_factor", state.easiness),
        ("interval", state.interval_days),
        ("repetition", state.repetitions),
        ("next_review_at", next_due_at),
        ("version", expected_version + 1),
        ("updated_at", now),
    ):
        set_committed_value(card, key, value)
    return True


async def record_card_review(
    session: AsyncSession,
    card: Card,
    quality: int,
    now: Optional[datetime] = None,
) -> CardReview:
    """Append a review-history row for the card."""
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)

    review = CardReview(
        card_id=card.id,
        user_id=card.user_id,
        quality=quality,
        reviewed_at=now,
    )
    session.add(review)
    await session.flush()
    return review


async def count_cards(session: AsyncSession, user_id: str) -> int:
    stmt = select(func.count(Card.id)).where(Card.user_id == user_id)
    return int((await session.execute(stmt)).scalar_one())


async def count_due_cards(
    session: AsyncSession, user_id: str, now: Optional[datetime] = None
) -> int:
    if now is None:
        now = datetime.now(timezone.utc)
    now = as_utc(now)
    stmt = select(func.count(Card.id)).where(Card.user_id == user_id, Card.next_review_at <= now)
    return int((await session.execute(stmt)).scalar_one())


async def list_reviews_for_user(
    session: AsyncSession,
    user_id: str,
    since: Optional[datetime] = None,
) -> list[tuple[datetime, int]]:
    """Return ``(reviewed_at, quality)`` pairs for the user, oldest first."""
    stmt = select(CardReview.reviewed_at, CardReview.quality).where(CardReview.user_id == user_id)
    if since is not None:
        stmt = stmt.where(CardReview.reviewed_at >= as_utc(since))
    stmt = stmt.order_by(CardReview.reviewed_at, CardReview.id)
    result = await session.execute(stmt)
    return [(as_utc(reviewed_at), quality) for reviewed_at, quality in result.all()]
