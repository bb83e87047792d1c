"""
Reading models: interpretations, draw records and per-user statistics.

Interpretation pieces and statistics are pydantic models because they are
persisted as JSON and returned over the API. Draw records and results are
plain dataclasses that carry catalog cards by value.
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from tarotdesk.models.card import Card, DrawnCard


class CardReading(BaseModel):
    """Meaning of one drawn card in its position."""

    card_id: int
    name: str
    localized_name: str
    position: str
    position_name: str
    is_reversed: bool
    keywords: list[str] = Field(default_factory=list)
    meaning: str
    degraded: bool = Field(
        default=False,
        description="True when the meaning fell back to the generic placeholder",
    )


class AreaReading(BaseModel):
    """Narrative for a group of Celtic Cross positions."""

    area: str
    title: str
    positions: list[str]
    message: str


class SpecialPattern(BaseModel):
    """A notable combination found among the drawn cards."""

    type: str
    message: str
    card_ids: list[int] = Field(default_factory=list)


class SpreadAnalysis(BaseModel):
    """Aggregate counts across one draw."""

    major_count: int = 0
    reversed_count: int = 0
    suits: dict[str, int] = Field(default_factory=dict)
    elements: dict[str, int] = Field(default_factory=dict)
    dominant_suit: str | None = None


class Interpretation(BaseModel):
    """Full multi-layer reading of a spread."""

    spread_type: str
    category: str = "general"
    summary: str
    cards: list[CardReading]
    narrative: list[str] = Field(default_factory=list)
    flow: str | None = Field(default=None, description="Triple spread flow classification")
    areas: list[AreaReading] = Field(default_factory=list)
    synthesis: str | None = None
    outcome_tone: str | None = None
    mood: str | None = None
    mood_message: str | None = None
    mood_advice: str | None = None
    patterns: list[SpecialPattern] = Field(default_factory=list)
    analysis: SpreadAnalysis = Field(default_factory=SpreadAnalysis)
    advice: str


class FortuneStats(BaseModel):
    """
    Longitudinal statistics of one user.

    Counters are lifetime values; streaks are derived from retained history.
    `per_card_frequency` keeps first-encounter order, which breaks ties for
    the favorite card.
    """

    total_draws: int = 0
    per_type_counts: dict[str, int] = Field(default_factory=dict)
    per_card_frequency: dict[int, int] = Field(default_factory=dict)
    favorite_card: int | None = None
    current_streak: int = 0
    longest_streak: int = 0
    total_days_used: int = 0
    reversed_ratio: float = 0.0


@dataclass(frozen=True)
class DrawRecord:
    """One completed draw. Immutable once created."""

    draw_type: str
    question: str | None
    cards: tuple[DrawnCard, ...]
    interpretation: Interpretation
    timestamp: datetime
    is_special_time: bool = False


@dataclass(frozen=True)
class DrawResult:
    """What a successful draw returns to the caller."""

    draw_type: str
    question: str | None
    cards: tuple[DrawnCard, ...]
    interpretation: Interpretation
    remaining_draws: int | None  # None means unlimited (quota bypass)
    is_special_time: bool
    new_achievements: tuple[str, ...] = ()


@dataclass(frozen=True)
class HistoryPage:
    """A page of draw history, newest first."""

    records: list[DrawRecord]
    total_count: int  # retained records, not lifetime draws

    @property
    def has_more(self) -> bool:
        return self.total_count > len(self.records)


@dataclass(frozen=True)
class QuotaExceeded:
    """Returned instead of a DrawResult once today's draws are used up."""

    limit: int
    used_today: int
    resets_at: datetime
    reason: str
    remaining_draws: int = 0


@dataclass(frozen=True)
class UserStats:
    """Statistics view combining lifetime stats with today's quota usage."""

    user_id: str
    stats: FortuneStats
    today_draws: int
    remaining_draws: int | None
    achievements: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    last_draw_at: datetime | None = None


@dataclass(frozen=True)
class PopularCard:
    """A card with how often it was drawn across all users."""

    card: Card
    count: int
    reversed_count: int = 0


@dataclass(frozen=True)
class ShuffleAck:
    """Cosmetic acknowledgement of a shuffle request."""

    user_id: str
    message: str
    timestamp: datetime
