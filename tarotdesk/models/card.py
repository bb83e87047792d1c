from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Arcana(str, Enum):
    """The two tarot card families."""

    MAJOR = "major"
    MINOR = "minor"


class Suit(str, Enum):
    """Minor arcana suits, in deck order."""

    WANDS = "wands"
    CUPS = "cups"
    SWORDS = "swords"
    PENTACLES = "pentacles"


class Court(str, Enum):
    """Court ranks of the minor arcana, in deck order."""

    PAGE = "page"
    KNIGHT = "knight"
    QUEEN = "queen"
    KING = "king"


SUIT_ELEMENTS: dict[Suit, str] = {
    Suit.WANDS: "fire",
    Suit.CUPS: "water",
    Suit.SWORDS: "air",
    Suit.PENTACLES: "earth",
}


@dataclass(frozen=True, slots=True)
class Card:
    """
    An immutable catalog entry.

    Attributes:
        id: Stable identifier (0-21 major, 22-77 minor)
        name: Canonical English name (e.g., "The Fool", "Queen of Cups")
        localized_name: Korean display name
        arcana: Major or minor
        suit: Suit for minor cards, None for major
        rank: Major number 0-21; minor Ace=1 .. Ten=10, Page=11 .. King=14
        court: Court rank for court cards, None otherwise
        keywords: Short keyword set used in readings
    """

    id: int
    name: str
    localized_name: str
    arcana: Arcana
    suit: Suit | None
    rank: int
    court: Court | None = None
    keywords: tuple[str, ...] = ()

    @property
    def is_major(self) -> bool:
        return self.arcana is Arcana.MAJOR

    @property
    def is_court(self) -> bool:
        return self.court is not None

    @property
    def element(self) -> str | None:
        """Classical element of the suit, None for major arcana."""
        return SUIT_ELEMENTS[self.suit] if self.suit is not None else None


@dataclass(frozen=True, slots=True)
class DrawnCard:
    """
    A card as it came out of a spread.

    Created fresh per draw and embedded by value in the draw record.
    """

    card: Card
    is_reversed: bool
    position: str
    drawn_at: datetime

    @property
    def orientation(self) -> str:
        return "reversed" if self.is_reversed else "upright"
