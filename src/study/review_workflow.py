"""Workflow for submitting card reviews and keeping schedules in storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import Card
from src.db.cards import (
    apply_schedule,
    create_card,
    get_card_for_user,
    list_due_cards,
    record_card_review,
    scheduling_state_of,
)
from src.study.progress import DEFAULT_WINDOW_DAYS, ProgressSummary, load_progress
from src.study.srs import SchedulingState, map_to_quality, update_schedule, validate_quality


LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@dataclass(slots=True)
class ReviewSubmissionResult:
    """Result of submitting a single review."""

    handled: bool
    status: str  # "recorded", "not_found", "conflict"
    card_id: int
    quality: int
    state: Optional[SchedulingState] = None
    errors: List[str] = field(default_factory=list)

    @property
    def next_due_at(self) -> Optional[datetime]:
        return self.state.next_due_at if self.state else None

    @property
    def interval_days(self) -> Optional[int]:
        return self.state.interval_days if self.state else None


class ReviewWorkflow:
    """Coordinates quality mapping, scheduling and persistence of reviews."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        progress_window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer.")
        self._session_factory = session_factory
        self._max_attempts = max_attempts
        self._progress_window_days = progress_window_days

    async def add_card(
        self,
        user_id: str,
        prompt: str,
        answer: str,
        card_type: str = "short",
        choices: Optional[Sequence[Any]] = None,
        now: Optional[datetime] = None,
    ) -> Card:
        """Store a new card that is due right away."""
        async with self._session_factory() as session:
            async with session.begin():
                card = await create_card(
                    session,
                    user_id,
                    prompt,
                    answer,
                    card_type=card_type,
                    choices=choices,
                    now=now,
                )
        LOGGER.info("Created card %s for user %s.", card.id, user_id)
        return card

    async def due_cards(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Card]:
        """Return the cards the user should review now, earliest due first."""
        async with self._session_factory() as session:
            return await list_due_cards(session, user_id, now=now, limit=limit)

    async def progress(self, user_id: str, now: Optional[datetime] = None) -> ProgressSummary:
        """Summarise the user's review activity."""
        async with self._session_factory() as session:
            return await load_progress(
                session, user_id, now=now, window_days=self._progress_window_days
            )

    async def submit(
        self,
        user_id: str,
        card_id: int,
        correct: bool,
        confidence: str = "medium",
        now: Optional[datetime] = None,
    ) -> ReviewSubmissionResult:
        """Record a correct/incorrect answer for a card."""
        quality = map_to_quality(correct, confidence)
        return await self.submit_quality(user_id, card_id, quality, now=now)

    async def submit_quality(
        self,
        user_id: str,
        card_id: int,
        quality: int,
        now: Optional[datetime] = None,
    ) -> ReviewSubmissionResult:
        """Record a review with an explicit 0-4 quality."""
        quality = validate_quality(quality)
        if now is None:
            now = datetime.now(timezone.utc)

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = await self._attempt(user_id, card_id, quality, now)
            except Exception:
                LOGGER.exception("Storing review for card %s failed.", card_id)
                raise

            if result is not None:
                return result

            LOGGER.info(
                "Card %s changed while reviewing (attempt %s of %s).",
                card_id,
                attempt,
                self._max_attempts,
            )

        LOGGER.warning("Giving up on review for card %s after %s attempts.", card_id, self._max_attempts)
        return ReviewSubmissionResult(
            handled=False,
            status="conflict",
            card_id=card_id,
            quality=quality,
            errors=["The card was updated by another review. Please try again."],
        )

    async def _attempt(
        self,
        user_id: str,
        card_id: int,
        quality: int,
        now: datetime,
    ) -> Optional[ReviewSubmissionResult]:
        async with self._session_factory() as session:
            async with session.begin():
                card = await get_card_for_user(session, user_id, card_id)
                if card is None:
                    return ReviewSubmissionResult(
                        handled=False,
                        status="not_found",
                        card_id=card_id,
                        quality=quality,
                        errors=["Card not found."],
                    )

                state = update_schedule(scheduling_state_of(card), quality, now=now)
                if not await apply_schedule(session, card, state, now=now):
                    return None

                await record_card_review(session, card, quality, now=now)

        return ReviewSubmissionResult(
            handled=True,
            status="recorded",
            card_id=card_id,
            quality=quality,
            state=state,
        )
