"""
Drawer: sampling without replacement.

Each draw works on its own copy of the deck: shuffle the copy, pop one card
per layout position, then decide orientation. The canonical deck is never
touched, so concurrent draws cannot interfere with each other.

INVARIANTS:
- No card id appears twice within one draw
- Orientation follows the configured ReversalPolicy
- A deck of the wrong size is an integrity violation, never a partial draw
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from tarotdesk.config import settings
from tarotdesk.models.card import Card, DrawnCard
from tarotdesk.models.failure import DeckIntegrityError
from tarotdesk.models.spread import SpreadType
from tarotdesk.services.deck import DECK_SIZE, get_full_deck
from tarotdesk.services.spreads import get_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReversalPolicy:
    """
    Per-category probability that a card comes out reversed.

    With `minor_enabled=False` every minor card (pip or court) is upright.
    """

    major: float = 0.30
    court: float = 0.25
    minor: float = 0.20
    minor_enabled: bool = True

    def __post_init__(self) -> None:
        for name in ("major", "court", "minor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} reversal probability must be within 0-1, got {value}")

    @classmethod
    def from_settings(cls) -> "ReversalPolicy":
        return cls(
            major=settings.major_reversal_probability,
            court=settings.court_reversal_probability,
            minor=settings.minor_reversal_probability,
            minor_enabled=settings.minor_reversals_enabled,
        )

    def probability_for(self, card: Card) -> float:
        if card.is_major:
            return self.major
        if not self.minor_enabled:
            return 0.0
        return self.court if card.is_court else self.minor


class Drawer:
    """
    Draws cards for a spread.

    Args:
        rng: Source of randomness. Pass a seeded `random.Random` for
            reproducible draws.
        policy: Reversal probabilities
        deck_source: Supplies a fresh full deck per draw
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        policy: ReversalPolicy | None = None,
        deck_source: Callable[[], list[Card]] = get_full_deck,
    ):
        self.rng = rng or random.Random()
        self.policy = policy or ReversalPolicy.from_settings()
        self._deck_source = deck_source

    def draw(
        self,
        spread_type: str | SpreadType,
        drawn_at: datetime | None = None,
    ) -> list[DrawnCard]:
        """
        Draw one card per position of the spread's layout.

        Raises:
            DeckIntegrityError: If the working deck is malformed
        """
        layout = get_layout(spread_type)
        drawn_at = drawn_at or datetime.now(UTC)

        working = self._deck_source()
        self._verify(working, needed=len(layout))

        # Fisher-Yates over the private copy
        self.rng.shuffle(working)

        drawn: list[DrawnCard] = []
        for position in layout.positions:
            card = working.pop()
            drawn.append(
                DrawnCard(
                    card=card,
                    is_reversed=self.rng.random() < self.policy.probability_for(card),
                    position=position.key,
                    drawn_at=drawn_at,
                )
            )

        return drawn

    def _verify(self, working: list[Card], needed: int) -> None:
        reason: str | None = None
        if len(working) != DECK_SIZE:
            reason = f"deck has {len(working)} cards, expected {DECK_SIZE}"
        elif len({card.id for card in working}) != len(working):
            reason = "deck contains duplicate card ids"
        elif needed > len(working):
            reason = f"layout needs {needed} cards, deck has {len(working)}"

        if reason is not None:
            logger.error(
                "DECK_INTEGRITY_VIOLATION",
                extra={"reason": reason, "deck_size": len(working), "needed": needed},
            )
            raise DeckIntegrityError(reason)
