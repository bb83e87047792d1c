from dataclasses import dataclass
from enum import Enum


class SpreadType(str, Enum):
    """Supported spread layouts."""

    SINGLE = "single"
    TRIPLE = "triple"
    CELTIC = "celtic"


@dataclass(frozen=True, slots=True)
class PositionSpec:
    """
    One slot of a spread.

    Attributes:
        key: Stable slot key stored with each drawn card
        display_name: Human-readable slot name
        description: What the slot speaks to, used in narration
        area: Semantic group the slot belongs to (Celtic Cross only)
    """

    key: str
    display_name: str
    description: str
    area: str | None = None


@dataclass(frozen=True, slots=True)
class SpreadLayout:
    """An ordered list of positions; its length is the number of cards drawn."""

    spread_type: SpreadType
    positions: tuple[PositionSpec, ...]

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(position.key for position in self.positions)

    def position(self, key: str) -> PositionSpec | None:
        """Look up a position by key."""
        for position in self.positions:
            if position.key == key:
                return position
        return None
