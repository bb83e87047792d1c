"""
Quota Guard: daily draw limits.

Usage is never stored as a counter. It is recomputed on every check from the
user's draw timestamps, so there is nothing to reset at midnight and nothing
to drift out of sync with the history.

INVARIANTS:
- "Today" is [local midnight, next local midnight) in ONE configured timezone
- A draw is allowed iff used_today < limit, or the user is a developer
- Developer bypass is logged distinctly from a normal check
- The decision only holds while the caller keeps the per-user lock; the
  quota is consumed when the draw record commits
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from tarotdesk.config import settings
from tarotdesk.models.spread import SpreadType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaDecision:
    """
    Outcome of a quota check.

    `remaining` counts draws left BEFORE the pending draw; None means the
    user is unlimited.
    """

    allowed: bool
    remaining: int | None
    reason: str
    bypassed: bool = False
    used_today: int = 0
    limit: int | None = None


def today_window(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """
    Get the local day containing `now` as an aware [start, end) pair.

    A naive `now` is treated as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local = now.astimezone(tz)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    # Day arithmetic on the local date keeps DST days correct
    next_day = (start + timedelta(days=1)).date()
    end = datetime(next_day.year, next_day.month, next_day.day, tzinfo=tz)
    return start, end


def count_today(timestamps: Iterable[datetime], now: datetime, tz: ZoneInfo) -> int:
    """Count timestamps that fall inside today's window."""
    start, end = today_window(now, tz)
    count = 0
    for timestamp in timestamps:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        if start <= timestamp < end:
            count += 1
    return count


class QuotaGuard:
    """
    Enforces per-user daily draw limits.

    Args:
        daily_limit: Default draws per day
        spread_limits: Per spread type overrides of the daily limit
        developer_ids: User ids that bypass the quota
        timezone: IANA name of the shared day boundary
    """

    def __init__(
        self,
        daily_limit: int | None = None,
        spread_limits: dict[str, int] | None = None,
        developer_ids: Iterable[str] | None = None,
        timezone: str | None = None,
    ):
        self.daily_limit = settings.daily_draw_limit if daily_limit is None else daily_limit
        self.spread_limits = dict(
            settings.spread_daily_limits if spread_limits is None else spread_limits
        )
        self.developer_ids = frozenset(
            settings.developer_id_set if developer_ids is None else developer_ids
        )
        self.tz = ZoneInfo(timezone or settings.timezone)

    def limit_for(self, spread_type: str | SpreadType) -> int:
        key = spread_type.value if isinstance(spread_type, SpreadType) else str(spread_type)
        return self.spread_limits.get(key, self.daily_limit)

    def is_developer(self, user_id: str) -> bool:
        return user_id in self.developer_ids

    def resets_at(self, now: datetime) -> datetime:
        """Start of the next local day."""
        return today_window(now, self.tz)[1]

    def used_today(self, draw_timestamps: Iterable[datetime], now: datetime) -> int:
        return count_today(draw_timestamps, now, self.tz)

    def check_and_reserve(
        self,
        user_id: str,
        now: datetime,
        draw_timestamps: Iterable[datetime],
        spread_type: str | SpreadType = SpreadType.SINGLE,
    ) -> QuotaDecision:
        """
        Decide whether the user may draw now.

        Args:
            user_id: Resolved user identifier
            now: Current instant
            draw_timestamps: Timestamps of the user's recorded draws; empty
                when the user has no profile yet
            spread_type: Requested spread, selects the applicable limit

        Returns:
            QuotaDecision. Never raises for an exhausted quota.
        """
        used = self.used_today(draw_timestamps, now)

        if self.is_developer(user_id):
            logger.info(
                "QUOTA_BYPASS",
                extra={"user_id": user_id, "used_today": used, "spread_type": str(spread_type)},
            )
            return QuotaDecision(
                allowed=True,
                remaining=None,
                reason="developer",
                bypassed=True,
                used_today=used,
            )

        limit = self.limit_for(spread_type)
        remaining = max(0, limit - used)
        allowed = used < limit

        logger.debug(
            "QUOTA_CHECK",
            extra={
                "user_id": user_id,
                "used_today": used,
                "limit": limit,
                "allowed": allowed,
            },
        )

        return QuotaDecision(
            allowed=allowed,
            remaining=remaining,
            reason="ok" if allowed else "daily_limit_reached",
            used_today=used,
            limit=limit,
        )

    def remaining_for(
        self,
        user_id: str,
        now: datetime,
        draw_timestamps: Iterable[datetime],
    ) -> int | None:
        """Draws left today under the default limit; None when unlimited."""
        if self.is_developer(user_id):
            return None
        return max(0, self.daily_limit - self.used_today(draw_timestamps, now))
