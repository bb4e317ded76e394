from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.db.cards import (
    apply_schedule,
    count_cards,
    count_due_cards,
    create_card,
    get_card_for_user,
    list_due_cards,
    list_reviews_for_user,
    record_card_review,
    scheduling_state_of,
)
from src.study.srs import update_schedule


@pytest.mark.asyncio
async def test_create_card_starts_with_initial_schedule(session_factory) -> None:
    now = datetime.now(timezone.utc)

    async with session_factory() as session:
        async with session.begin():
            card = await create_card(
                session,
                "user-1",
                "  What does SM-2 stand for?  ",
                "SuperMemo 2",
                now=now,
            )

    assert card.id is not None
    assert card.prompt == "What does SM-2 stand for?"
    assert card.card_type == "short"
    assert card.choices is None
    assert card.easiness_factor == 2.5
    assert card.interval == 1
    assert card.repetition == 0
    assert card.version == 0
    assert card.next_review_at == now


@pytest.mark.asyncio
async def test_create_card_rejects_unknown_type(session_factory) -> None:
    async with session_factory() as session:
        with pytest.raises(ValueError):
            await create_card(session, "user-1", "Prompt", "Answer", card_type="essay")


@pytest.mark.asyncio
async def test_get_card_for_user_checks_ownership(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            card = await create_card(
                session,
                "owner",
                "Capital of Greece?",
                "1",
                card_type="mcq",
                choices=["Sparta", "Athens", "Thebes"],
            )

        found = await get_card_for_user(session, "owner", card.id)
        missing = await get_card_for_user(session, "intruder", card.id)

    assert found is not None
    assert found.choices == ["Sparta", "Athens", "Thebes"]
    assert missing is None


@pytest.mark.asyncio
async def test_list_due_cards_orders_by_due_date(session_factory) -> None:
    now = datetime.now(timezone.utc)
    user_id = "user-2"

    async with session_factory() as session:
        async with session.begin():
            later = await create_card(session, user_id, "Later", "a", now=now - timedelta(hours=1))
            earlier = await create_card(session, user_id, "Earlier", "b", now=now - timedelta(days=2))
            await create_card(session, user_id, "Future", "c", now=now + timedelta(days=1))
            await create_card(session, "someone-else", "Other", "d", now=now - timedelta(days=5))

        due = await list_due_cards(session, user_id, now=now)
        limited = await list_due_cards(session, user_id, now=now, limit=1)
        due_count = await count_due_cards(session, user_id, now=now)
        total = await count_cards(session, user_id)

    assert [card.id for card in due] == [earlier.id, later.id]
    assert [card.id for card in limited] == [earlier.id]
    assert due_count == 2
    assert total == 3


@pytest.mark.asyncio
async def test_scheduling_state_of_returns_aware_timestamp(session_factory) -> None:
    now = datetime.now(timezone.utc)

    async with session_factory() as session:
        async with session.begin():
            card = await create_card(session, "user-3", "Prompt", "Answer", now=now)

    async with session_factory() as session:
        stored = await get_card_for_user(session, "user-3", card.id)
        assert stored is not None
        state = scheduling_state_of(stored)

    assert state.next_due_at.tzinfo is not None
    assert state.next_due_at == now
    assert state.easiness == 2.5
    assert state.interval_days == 1
    assert state.repetitions == 0


@pytest.mark.asyncio
async def test_apply_schedule_rejects_stale_version(session_factory) -> None:
    now = datetime.now(timezone.utc)
    user_id = "user-4"

    async with session_factory() as session:
        async with session.begin():
            card = await create_card(session, user_id, "Prompt", "Answer", now=now)

    async with session_factory() as session:
        stale = await get_card_for_user(session, user_id, card.id)
    assert stale is not None
    stale_state = scheduling_state_of(stale)

    async with session_factory() as session:
        async with session.begin():
            fresh = await get_card_for_user(session, user_id, card.id)
            assert fresh is not None
            first = update_schedule(scheduling_state_of(fresh), 4, now=now)
            assert await apply_schedule(session, fresh, first, now=now) is True
            assert fresh.version == 1

    async with session_factory() as session:
        async with session.begin():
            second = update_schedule(stale_state, 0, now=now)
            applied = await apply_schedule(session, stale, second, now=now)

    assert applied is False
    assert stale.version == 0

    async with session_factory() as session:
        stored = await get_card_for_user(session, user_id, card.id)

    assert stored is not None
    assert stored.version == 1
    assert stored.repetition == 1
    assert stored.interval == 1


@pytest.mark.asyncio
async def test_record_card_review_appends_history(session_factory) -> None:
    now = datetime.now(timezone.utc)
    user_id = "user-5"

    async with session_factory() as session:
        async with session.begin():
            card = await create_card(session, user_id, "Prompt", "Answer", now=now)
            await record_card_review(session, card, 4, now=now - timedelta(days=1))
            await record_card_review(session, card, 0, now=now)

        reviews = await list_reviews_for_user(session, user_id)
        recent = await list_reviews_for_user(session, user_id, since=now - timedelta(hours=1))

    assert [quality for _, quality in reviews] == [4, 0]
    assert reviews[0][0].tzinfo is not None
    assert [quality for _, quality in recent] == [0]


@pytest.mark.asyncio
async def test_deleting_card_removes_its_reviews(session_factory) -> None:
    user_id = "user-6"

    async with session_factory() as session:
        async with session.begin():
            card = await create_card(session, user_id, "Prompt", "Answer")
            await record_card_review(session, card, 3)

        async with session.begin():
            await session.delete(card)

        reviews = await list_reviews_for_user(session, user_id)

    assert reviews == []
