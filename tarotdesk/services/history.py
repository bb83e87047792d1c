"""
History Store: bounded per-user draw history and derived statistics.

One profile row per user carries the statistics document; draws live in a
child table, newest first, trimmed to a fixed cap.

INVARIANTS:
- History is ordered newest first and never holds more than `cap` records
- Eviction removes the oldest records first
- total_draws and per_type_counts are lifetime counters; they keep counting
  after older records are evicted
- Streaks are derived from the local dates of the retained history
- favorite_card is the most frequent card; ties go to the card seen first
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from tarotdesk.config import settings
from tarotdesk.db.operations import (
    count_draw_records,
    create_profile,
    draw_record_to_model,
    get_profile,
    list_draw_records,
    model_to_draw_record_row,
    normalize_timestamp,
    to_utc,
)
from tarotdesk.models.db import FortuneProfileDB
from tarotdesk.models.reading import DrawRecord, FortuneStats
from tarotdesk.models.spread import SpreadType

logger = logging.getLogger(__name__)

# Award order matters: new achievements are reported in this order
ACHIEVEMENTS: tuple[str, ...] = (
    "first_draw",
    "streak_3",
    "streak_7",
    "celtic_initiate",
    "devoted_reader",
)

DEVOTED_READER_DRAWS = 100


def local_dates(timestamps: Iterable[datetime], tz: ZoneInfo) -> list[date]:
    """Unique local dates of the given instants, newest first."""
    return sorted(
        {normalize_timestamp(ts).astimezone(tz).date() for ts in timestamps}, reverse=True
    )


def calculate_streaks(dates_desc: Sequence[date], previous_longest: int = 0) -> tuple[int, int]:
    """
    Compute (current_streak, longest_streak) from unique dates sorted newest first.

    The current streak runs back from the newest date while each step is exactly
    one day. The longest streak never drops below `previous_longest`, so it
    survives eviction of the history that produced it.
    """
    if not dates_desc:
        return 0, previous_longest

    current = 0
    longest_run = 0
    run = 0
    in_current = True
    previous: date | None = None

    for day in dates_desc:
        if previous is not None and previous - day == timedelta(days=1):
            run += 1
        else:
            if previous is not None:
                in_current = False
            run = 1
        if in_current:
            current = run
        longest_run = max(longest_run, run)
        previous = day

    return current, max(previous_longest, longest_run)


def pick_favorite(frequency: dict[int, int]) -> int | None:
    """Most frequent card id; ties go to the first id inserted."""
    favorite: int | None = None
    best = 0
    for card_id, count in frequency.items():
        if count > best:
            favorite, best = card_id, count
    return favorite


def update_stats(
    previous: FortuneStats,
    record: DrawRecord,
    retained: Sequence[DrawRecord],
    tz: ZoneInfo,
) -> FortuneStats:
    """
    Fold a new record into the statistics.

    Args:
        previous: Statistics before this record
        record: The record just added
        retained: Full retained history after the record was added and the
            cap applied, newest first
        tz: Timezone for the local day boundary
    """
    per_type = dict(previous.per_type_counts)
    per_type[record.draw_type] = per_type.get(record.draw_type, 0) + 1

    frequency = dict(previous.per_card_frequency)
    for drawn in record.cards:
        frequency[drawn.card.id] = frequency.get(drawn.card.id, 0) + 1

    dates = local_dates((r.timestamp for r in retained), tz)
    current, longest = calculate_streaks(dates, previous.longest_streak)

    total_cards = sum(len(r.cards) for r in retained)
    reversed_cards = sum(1 for r in retained for drawn in r.cards if drawn.is_reversed)

    return FortuneStats(
        total_draws=previous.total_draws + 1,
        per_type_counts=per_type,
        per_card_frequency=frequency,
        favorite_card=pick_favorite(frequency),
        current_streak=current,
        longest_streak=longest,
        total_days_used=len(dates),
        reversed_ratio=round(reversed_cards / total_cards, 4) if total_cards else 0.0,
    )


def award_achievements(stats: FortuneStats, earned: Sequence[str]) -> list[str]:
    """Achievements newly earned by these stats, in award order."""
    checks = {
        "first_draw": stats.total_draws >= 1,
        "streak_3": stats.current_streak >= 3,
        "streak_7": stats.current_streak >= 7,
        "celtic_initiate": stats.per_type_counts.get(SpreadType.CELTIC.value, 0) >= 1,
        "devoted_reader": stats.total_draws >= DEVOTED_READER_DRAWS,
    }
    return [name for name in ACHIEVEMENTS if checks[name] and name not in earned]


def load_stats(profile: FortuneProfileDB | None) -> FortuneStats:
    if profile is None or not profile.stats:
        return FortuneStats()
    return FortuneStats.model_validate(profile.stats)


class HistoryStore:
    """
    Records draws and maintains per-user statistics.

    Args:
        cap: Maximum retained records per user
        timezone: IANA name of the day boundary used for streaks
    """

    def __init__(self, cap: int | None = None, timezone: str | None = None):
        self.cap = settings.history_cap if cap is None else cap
        if self.cap < 1:
            raise ValueError(f"History cap must be positive, got {self.cap}")
        self.tz = ZoneInfo(timezone or settings.timezone)

    async def record(
        self,
        session: AsyncSession,
        user_id: str,
        record: DrawRecord,
        profile: FortuneProfileDB | None = None,
    ) -> FortuneStats:
        """
        Append a record to the user's history and refresh statistics.

        Creates the profile on first use. Flushes but does not commit; the
        caller owns the transaction.

        Args:
            profile: Already loaded (and locked) profile, if the caller has one
        """
        if profile is None:
            profile = await get_profile(session, user_id)
        if profile is None:
            profile = await create_profile(session, user_id, created_at=record.timestamp)

        profile.draws.insert(0, model_to_draw_record_row(record))

        overflow = len(profile.draws) - self.cap
        if overflow > 0:
            del profile.draws[self.cap :]
            logger.debug(
                "HISTORY_PRUNED",
                extra={"user_id": user_id, "evicted": overflow, "cap": self.cap},
            )

        retained = [draw_record_to_model(row) for row in profile.draws]
        stats = update_stats(load_stats(profile), record, retained, self.tz)

        earned = list(profile.achievements or [])
        new_achievements = award_achievements(stats, earned)

        # Reassign JSON columns so the change is tracked
        profile.stats = stats.model_dump(mode="json")
        profile.achievements = earned + new_achievements
        profile.last_draw_at = to_utc(record.timestamp)

        await session.flush()
        return stats

    async def get_stats(self, session: AsyncSession, user_id: str) -> FortuneStats:
        """Statistics of a user; empty statistics for an unknown user."""
        return load_stats(await get_profile(session, user_id))

    async def get_history(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
    ) -> list[DrawRecord]:
        """Most recent records first, at most `limit`."""
        limit = settings.history_default_limit if limit is None else limit
        if limit <= 0:
            return []
        rows = await list_draw_records(session, user_id, min(limit, self.cap))
        return [draw_record_to_model(row) for row in rows]

    async def count_history(self, session: AsyncSession, user_id: str) -> int:
        """Number of retained records; never more than the cap."""
        return await count_draw_records(session, user_id)
