"""
Fortune Service: orchestration of a draw.

A draw is one unit per user:

    lock -> load profile -> quota -> draw -> interpret -> record + commit

INVARIANTS:
- Two draws for the same user never interleave (per-user asyncio lock in
  process, SELECT ... FOR UPDATE on the profile row across processes)
- Exceeding the quota is an expected outcome, returned as QuotaExceeded
- A draw that cannot be recorded is never presented: storage failures fail
  closed with PersistenceUnavailableError, so no card is shown and no quota
  is consumed
- Loading and committing are each bounded by the persistence timeout
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Any, NoReturn, TypeVar
from weakref import WeakValueDictionary

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tarotdesk.config import MAX_HISTORY_PAGE, MAX_QUESTION_LENGTH, settings
from tarotdesk.db.operations import (
    create_profile,
    get_profile,
    list_all_drawn_cards,
    list_profile_stats,
    normalize_timestamp,
)
from tarotdesk.models.db import FortuneProfileDB
from tarotdesk.models.failure import FailureKind, KnownError, PersistenceUnavailableError
from tarotdesk.models.reading import (
    DrawRecord,
    DrawResult,
    FortuneStats,
    HistoryPage,
    PopularCard,
    QuotaExceeded,
    ShuffleAck,
    UserStats,
)
from tarotdesk.models.spread import SpreadType
from tarotdesk.services.deck import get_card
from tarotdesk.services.drawer import Drawer
from tarotdesk.services.history import HistoryStore, load_stats
from tarotdesk.services.interpretation import InterpretationEngine
from tarotdesk.services.quota import QuotaGuard
from tarotdesk.services.spreads import get_layout

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHUFFLE_MESSAGES: tuple[str, ...] = (
    "The cards have been shuffled. Focus on your question.",
    "The deck is mixed and ready. Take a deep breath.",
    "Energy is flowing through the cards. Draw when you are ready.",
    "The cards are waiting for you. Trust your intuition.",
)


class UserLockRegistry:
    """
    One asyncio.Lock per user id.

    Locks are held weakly: an entry disappears once no coroutine holds or
    waits on it, so idle users cost nothing.
    """

    def __init__(self) -> None:
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def get(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class FortuneService:
    """
    Entry point for draws, history, statistics and the popular card board.

    Collaborators are injectable; defaults come from settings.
    """

    def __init__(
        self,
        drawer: Drawer | None = None,
        quota: QuotaGuard | None = None,
        interpreter: InterpretationEngine | None = None,
        history: HistoryStore | None = None,
        locks: UserLockRegistry | None = None,
        timeout_seconds: float | None = None,
        lucky_hours: list[int] | None = None,
    ):
        self.drawer = drawer or Drawer()
        self.quota = quota or QuotaGuard()
        self.interpreter = interpreter or InterpretationEngine()
        self.history = history or HistoryStore()
        self.locks = locks or UserLockRegistry()
        self.timeout_seconds = (
            settings.persistence_timeout_seconds if timeout_seconds is None else timeout_seconds
        )
        self.lucky_hours = frozenset(settings.lucky_hours if lucky_hours is None else lucky_hours)

    # -------------------------------------------------------------------------
    # Draw
    # -------------------------------------------------------------------------

    async def draw_card(
        self,
        session: AsyncSession,
        user_id: str,
        spread_type: str | SpreadType = SpreadType.SINGLE,
        question: str | None = None,
        now: datetime | None = None,
    ) -> DrawResult | QuotaExceeded:
        """
        Draw a spread for a user.

        Unknown spread types fall back to a single card.

        Returns:
            DrawResult on success, QuotaExceeded when today's draws are used up

        Raises:
            KnownError: If the question is too long
            DeckIntegrityError: If the deck is malformed
            PersistenceUnavailableError: If storage timed out or failed
        """
        if question is not None and len(question) > MAX_QUESTION_LENGTH:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message=f"Questions are limited to {MAX_QUESTION_LENGTH} characters.",
                detail=f"Question length: {len(question)}",
                status_code=422,
            )

        now = now or datetime.now(UTC)
        draw_type = get_layout(spread_type).spread_type.value

        async with self.locks.get(user_id):
            profile = await self._bounded(
                session, "load_profile", get_profile(session, user_id, for_update=True)
            )
            timestamps = [row.timestamp for row in profile.draws] if profile else []

            decision = self.quota.check_and_reserve(user_id, now, timestamps, draw_type)
            if not decision.allowed:
                logger.info(
                    "QUOTA_EXCEEDED",
                    extra={
                        "user_id": user_id,
                        "used_today": decision.used_today,
                        "limit": decision.limit,
                    },
                )
                await self._safe_rollback(session)
                return QuotaExceeded(
                    limit=decision.limit or 0,
                    used_today=decision.used_today,
                    resets_at=self.quota.resets_at(now),
                    reason=decision.reason,
                )

            cards = self.drawer.draw(draw_type, drawn_at=now)
            interpretation = self.interpreter.interpret(cards, draw_type, question)
            record = DrawRecord(
                draw_type=draw_type,
                question=question,
                cards=tuple(cards),
                interpretation=interpretation,
                timestamp=now,
                is_special_time=self.is_special_time(now),
            )

            earned_before = list(profile.achievements or []) if profile else []
            profile = await self._bounded(
                session, "record_draw", self._record(session, user_id, record, profile)
            )
            new_achievements = tuple(
                name for name in profile.achievements if name not in earned_before
            )

        remaining = None if decision.remaining is None else max(0, decision.remaining - 1)

        logger.info(
            "DRAW_COMPLETED",
            extra={
                "user_id": user_id,
                "draw_type": draw_type,
                "card_ids": [drawn.card.id for drawn in cards],
                "remaining_draws": remaining,
                "bypassed": decision.bypassed,
            },
        )

        return DrawResult(
            draw_type=draw_type,
            question=question,
            cards=record.cards,
            interpretation=interpretation,
            remaining_draws=remaining,
            is_special_time=record.is_special_time,
            new_achievements=new_achievements,
        )

    async def _record(
        self,
        session: AsyncSession,
        user_id: str,
        record: DrawRecord,
        profile: FortuneProfileDB | None,
    ) -> FortuneProfileDB:
        if profile is None:
            profile = await create_profile(session, user_id, created_at=record.timestamp)
        await self.history.record(session, user_id, record, profile=profile)
        await session.commit()
        return profile

    def is_special_time(self, now: datetime) -> bool:
        """True when the local hour is one of the lucky hours. Naive values are UTC."""
        return normalize_timestamp(now).astimezone(self.quota.tz).hour in self.lucky_hours

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_history(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
    ) -> list[DrawRecord]:
        """Most recent draws first."""
        limit = settings.history_default_limit if limit is None else limit
        limit = max(0, min(limit, MAX_HISTORY_PAGE))
        return await self._bounded(
            session, "get_history", self.history.get_history(session, user_id, limit)
        )

    async def get_history_page(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
    ) -> HistoryPage:
        """Most recent draws first, with the retained total for paging."""
        records = await self.get_history(session, user_id, limit)
        total = await self._bounded(
            session, "count_history", self.history.count_history(session, user_id)
        )
        return HistoryPage(records=records, total_count=total)

    async def get_stats(
        self,
        session: AsyncSession,
        user_id: str,
        now: datetime | None = None,
    ) -> UserStats:
        """Lifetime statistics plus today's usage."""
        now = now or datetime.now(UTC)
        profile = await self._bounded(session, "get_stats", get_profile(session, user_id))

        timestamps = [row.timestamp for row in profile.draws] if profile else []
        stats = load_stats(profile)

        return UserStats(
            user_id=user_id,
            stats=stats,
            today_draws=self.quota.used_today(timestamps, now),
            remaining_draws=self.quota.remaining_for(user_id, now, timestamps),
            achievements=list(profile.achievements or []) if profile else [],
            created_at=profile.created_at if profile else None,
            last_draw_at=profile.last_draw_at if profile else None,
        )

    def shuffle_deck(self, user_id: str) -> ShuffleAck:
        """
        Acknowledge a shuffle request.

        Cosmetic only: every draw shuffles its own fresh copy of the deck.
        """
        return ShuffleAck(
            user_id=user_id,
            message=self.drawer.rng.choice(SHUFFLE_MESSAGES),
            timestamp=datetime.now(UTC),
        )

    async def get_popular_cards(self, session: AsyncSession, limit: int = 10) -> list[PopularCard]:
        """
        Most drawn cards across all users.

        Counts come from each profile's lifetime card frequency; reversed
        counts come from retained history.
        """
        all_stats, drawn_entries = await self._bounded(
            session, "get_popular_cards", self._popular_inputs(session)
        )

        counts: Counter[int] = Counter()
        for raw in all_stats:
            stats = FortuneStats.model_validate(raw)
            counts.update(stats.per_card_frequency)

        reversed_counts: Counter[int] = Counter(
            int(entry["card_id"]) for entry in drawn_entries if entry.get("is_reversed")
        )

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [
            PopularCard(
                card=get_card(card_id),
                count=count,
                reversed_count=reversed_counts[card_id],
            )
            for card_id, count in ranked[: max(0, limit)]
        ]

    async def _popular_inputs(
        self, session: AsyncSession
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        return await list_profile_stats(session), await list_all_drawn_cards(session)

    # -------------------------------------------------------------------------
    # Persistence guard
    # -------------------------------------------------------------------------

    async def _bounded(self, session: AsyncSession, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a storage operation under the timeout, failing closed."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await awaitable
        except (TimeoutError, SQLAlchemyError) as e:
            await self._fail(session, operation, e)

    async def _fail(self, session: AsyncSession, operation: str, error: Exception) -> NoReturn:
        reason = "timeout" if isinstance(error, TimeoutError) else type(error).__name__
        logger.error(
            "PERSISTENCE_UNAVAILABLE",
            extra={"operation": operation, "reason": reason, "error": str(error)},
        )
        await self._safe_rollback(session)
        raise PersistenceUnavailableError(operation, reason) from error

    async def _safe_rollback(self, session: AsyncSession) -> None:
        """Roll back under the same timeout; a hung rollback invalidates the session."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                await session.rollback()
        except TimeoutError:
            logger.warning("ROLLBACK_FAILED", extra={"reason": "timeout"})
            await self._invalidate(session)
        except SQLAlchemyError as e:
            logger.warning("ROLLBACK_FAILED", extra={"reason": type(e).__name__, "error": str(e)})

    async def _invalidate(self, session: AsyncSession) -> None:
        # Drop the connection instead of returning it to the pool
        try:
            await session.invalidate()
        except SQLAlchemyError as e:
            logger.warning("SESSION_INVALIDATE_FAILED", extra={"error": str(e)})


# =============================================================================
# GLOBAL SERVICE INSTANCE
# =============================================================================

_fortune_service: FortuneService | None = None


def get_fortune_service() -> FortuneService:
    """Get the global fortune service instance."""
    global _fortune_service
    if _fortune_service is None:
        _fortune_service = FortuneService()
    return _fortune_service


def reset_fortune_service() -> None:
    """Reset the global fortune service (for testing)."""
    global _fortune_service
    _fortune_service = None
