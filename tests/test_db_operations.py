"""Tests for database operations."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tarotdesk.db.operations import (
    count_draw_records,
    create_profile,
    drawn_card_from_dict,
    drawn_card_to_dict,
    get_profile,
    list_all_drawn_cards,
    list_draw_records,
    list_profile_stats,
    normalize_timestamp,
    to_utc,
)
from tarotdesk.models.card import DrawnCard
from tarotdesk.models.db import DrawRecordDB
from tarotdesk.services.deck import get_card

START = datetime(2024, 6, 1, 3, 0, tzinfo=UTC)


def make_row(timestamp: datetime, card_id: int = 0, is_reversed: bool = False) -> DrawRecordDB:
    return DrawRecordDB(
        draw_type="single",
        question=None,
        cards=[
            {
                "card_id": card_id,
                "is_reversed": is_reversed,
                "position": "single",
                "drawn_at": timestamp.isoformat(),
            }
        ],
        interpretation={},
        timestamp=timestamp,
        is_special_time=False,
    )


class TestProfileOperations:
    async def test_create_profile(self, session: AsyncSession) -> None:
        profile = await create_profile(session, "user-123", created_at=START)

        assert profile.id is not None
        assert profile.user_id == "user-123"
        assert profile.stats == {}
        assert profile.achievements == []
        assert profile.draws == []

    async def test_get_profile(self, session: AsyncSession) -> None:
        await create_profile(session, "user-123")
        await session.commit()

        profile = await get_profile(session, "user-123")

        assert profile is not None
        assert profile.user_id == "user-123"

    async def test_get_profile_not_found(self, session: AsyncSession) -> None:
        assert await get_profile(session, "nonexistent") is None

    async def test_get_profile_for_update(self, session: AsyncSession) -> None:
        await create_profile(session, "user-123")
        await session.commit()

        profile = await get_profile(session, "user-123", for_update=True)

        assert profile is not None

    async def test_duplicate_profile_rejected(self, session: AsyncSession) -> None:
        await create_profile(session, "user-123")

        with pytest.raises(IntegrityError):
            await create_profile(session, "user-123")


class TestDrawRecordQueries:
    async def test_newest_first_with_limit(self, session: AsyncSession) -> None:
        profile = await create_profile(session, "user-123")
        for minutes, card_id in ((0, 1), (10, 2), (5, 3)):
            profile.draws.append(make_row(START + timedelta(minutes=minutes), card_id))
        await session.commit()

        rows = await list_draw_records(session, "user-123", limit=2)

        assert [row.cards[0]["card_id"] for row in rows] == [2, 3]

    async def test_records_are_scoped_to_user(self, session: AsyncSession) -> None:
        first = await create_profile(session, "user-1")
        second = await create_profile(session, "user-2")
        first.draws.append(make_row(START, 1))
        second.draws.append(make_row(START, 2))
        await session.commit()

        rows = await list_draw_records(session, "user-2", limit=10)

        assert [row.cards[0]["card_id"] for row in rows] == [2]

    async def test_count_is_scoped_to_user(self, session: AsyncSession) -> None:
        first = await create_profile(session, "user-1")
        second = await create_profile(session, "user-2")
        first.draws.extend(make_row(START + timedelta(minutes=i), i) for i in range(3))
        second.draws.append(make_row(START, 9))
        await session.commit()

        assert await count_draw_records(session, "user-1") == 3
        assert await count_draw_records(session, "user-2") == 1
        assert await count_draw_records(session, "nobody") == 0

    async def test_aggregate_reads(self, session: AsyncSession) -> None:
        active = await create_profile(session, "user-1")
        active.stats = {"total_draws": 1}
        active.draws.append(make_row(START, 5, is_reversed=True))
        await create_profile(session, "user-2")
        await session.commit()

        all_stats = await list_profile_stats(session)
        drawn = await list_all_drawn_cards(session)

        assert all_stats == [{"total_draws": 1}]
        assert [(entry["card_id"], entry["is_reversed"]) for entry in drawn] == [(5, True)]


class TestConversions:
    def test_naive_timestamps_are_utc(self) -> None:
        assert normalize_timestamp(datetime(2024, 6, 1, 3, 0)) == START

    def test_to_utc_converts_offsets(self) -> None:
        seoul_noon = datetime(2024, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=9)))

        converted = to_utc(seoul_noon)

        assert converted == START
        assert converted.tzinfo is UTC

    def test_drawn_card_dict(self) -> None:
        drawn = DrawnCard(card=get_card(40), is_reversed=True, position="present", drawn_at=START)

        data = drawn_card_to_dict(drawn)

        assert data == {
            "card_id": 40,
            "is_reversed": True,
            "position": "present",
            "drawn_at": START.isoformat(),
        }
        assert drawn_card_from_dict(data) == drawn

    def test_drawn_card_from_naive_timestamp(self) -> None:
        drawn = drawn_card_from_dict(
            {
                "card_id": 0,
                "is_reversed": False,
                "position": "single",
                "drawn_at": "2024-06-01T03:00:00",
            }
        )

        assert drawn.drawn_at == START
