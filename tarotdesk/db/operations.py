"""
Database operations.

Provides async functions for reading and creating fortune profiles and
their draw history, plus conversions between ORM rows and domain records.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tarotdesk.models.card import DrawnCard
from tarotdesk.models.db import DrawRecordDB, FortuneProfileDB
from tarotdesk.models.reading import DrawRecord, Interpretation
from tarotdesk.services.deck import get_card

# --- Profile Operations ---


async def get_profile(
    session: AsyncSession,
    user_id: str,
    for_update: bool = False,
) -> FortuneProfileDB | None:
    """
    Get a user's profile with its draw history loaded.

    Returns None if the user has never drawn.

    Args:
        for_update: Lock the profile row until the transaction ends
    """
    stmt = (
        select(FortuneProfileDB)
        .where(FortuneProfileDB.user_id == user_id)
        .options(selectinload(FortuneProfileDB.draws))
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_profile(
    session: AsyncSession,
    user_id: str,
    created_at: datetime | None = None,
) -> FortuneProfileDB:
    """
    Create an empty profile for a user.

    Raises IntegrityError if the profile already exists.
    """
    profile = FortuneProfileDB(
        user_id=user_id,
        stats={},
        achievements=[],
        created_at=to_utc(created_at) if created_at else datetime.now(UTC),
        draws=[],
    )
    session.add(profile)
    await session.flush()
    return profile


async def list_draw_records(session: AsyncSession, user_id: str, limit: int) -> list[DrawRecordDB]:
    """Most recent draw rows of a user, newest first."""
    result = await session.execute(
        select(DrawRecordDB)
        .join(FortuneProfileDB, DrawRecordDB.profile_id == FortuneProfileDB.id)
        .where(FortuneProfileDB.user_id == user_id)
        .order_by(DrawRecordDB.timestamp.desc(), DrawRecordDB.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_draw_records(session: AsyncSession, user_id: str) -> int:
    """Number of retained draw rows of a user."""
    result = await session.execute(
        select(func.count(DrawRecordDB.id))
        .join(FortuneProfileDB, DrawRecordDB.profile_id == FortuneProfileDB.id)
        .where(FortuneProfileDB.user_id == user_id)
    )
    return result.scalar_one()


async def list_profile_stats(session: AsyncSession) -> list[dict[str, Any]]:
    """Statistics documents of every profile."""
    result = await session.execute(select(FortuneProfileDB.stats))
    return [stats for stats in result.scalars().all() if stats]


async def list_all_drawn_cards(session: AsyncSession) -> list[dict[str, Any]]:
    """Every stored card entry across all retained draws."""
    result = await session.execute(select(DrawRecordDB.cards))
    return [entry for cards in result.scalars().all() for entry in cards or []]


# --- Conversions ---


def normalize_timestamp(value: datetime) -> datetime:
    """Treat naive datetimes coming back from storage as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def to_utc(value: datetime) -> datetime:
    """Store every instant as UTC; some backends drop the offset."""
    return normalize_timestamp(value).astimezone(UTC)


def drawn_card_to_dict(drawn: DrawnCard) -> dict[str, Any]:
    return {
        "card_id": drawn.card.id,
        "is_reversed": drawn.is_reversed,
        "position": drawn.position,
        "drawn_at": drawn.drawn_at.isoformat(),
    }


def drawn_card_from_dict(data: dict[str, Any]) -> DrawnCard:
    return DrawnCard(
        card=get_card(int(data["card_id"])),
        is_reversed=bool(data["is_reversed"]),
        position=data["position"],
        drawn_at=normalize_timestamp(datetime.fromisoformat(data["drawn_at"])),
    )


def model_to_draw_record_row(record: DrawRecord) -> DrawRecordDB:
    """Convert a domain draw record to a new database row."""
    return DrawRecordDB(
        draw_type=record.draw_type,
        question=record.question,
        cards=[drawn_card_to_dict(drawn) for drawn in record.cards],
        interpretation=record.interpretation.model_dump(mode="json"),
        timestamp=to_utc(record.timestamp),
        is_special_time=record.is_special_time,
    )


def draw_record_to_model(row: DrawRecordDB) -> DrawRecord:
    """Convert a database row to a domain draw record."""
    return DrawRecord(
        draw_type=row.draw_type,
        question=row.question,
        cards=tuple(drawn_card_from_dict(entry) for entry in row.cards),
        interpretation=Interpretation.model_validate(row.interpretation),
        timestamp=normalize_timestamp(row.timestamp),
        is_special_time=bool(row.is_special_time),
    )
