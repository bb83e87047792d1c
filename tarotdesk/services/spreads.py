"""
Spread Planner: named layouts and their positions.

Every layout is a constant. Unknown spread types fall back to the single
card layout; callers that must reject unknown types check
`is_supported_spread()` first.
"""

import logging

from tarotdesk.models.spread import PositionSpec, SpreadLayout, SpreadType

logger = logging.getLogger(__name__)

# Celtic Cross area keys
AREA_CENTER = "center"
AREA_TIMELINE = "timeline"
AREA_INTERNAL = "internal"
AREA_EXTERNAL = "external"
AREA_OUTCOME = "outcome"

AREA_TITLES: dict[str, str] = {
    AREA_CENTER: "The heart of the matter",
    AREA_TIMELINE: "The flow of time",
    AREA_INTERNAL: "Your inner world",
    AREA_EXTERNAL: "The world around you",
    AREA_OUTCOME: "Where it leads",
}

SINGLE_LAYOUT = SpreadLayout(
    spread_type=SpreadType.SINGLE,
    positions=(
        PositionSpec("single", "Today's card", "The message of the day"),
    ),
)

TRIPLE_LAYOUT = SpreadLayout(
    spread_type=SpreadType.TRIPLE,
    positions=(
        PositionSpec("past", "Past", "What shaped the situation"),
        PositionSpec("present", "Present", "Where things stand now"),
        PositionSpec("future", "Future", "Where things are heading"),
    ),
)

CELTIC_LAYOUT = SpreadLayout(
    spread_type=SpreadType.CELTIC,
    positions=(
        PositionSpec("present", "Present", "Your current situation", AREA_CENTER),
        PositionSpec("challenge", "Challenge", "The obstacle crossing you", AREA_CENTER),
        PositionSpec("foundation", "Foundation", "The root of the matter", AREA_TIMELINE),
        PositionSpec("recent_past", "Recent past", "What is passing away", AREA_TIMELINE),
        PositionSpec("crown", "Crown", "Your goal or best outcome", AREA_TIMELINE),
        PositionSpec("near_future", "Near future", "What is coming soon", AREA_TIMELINE),
        PositionSpec("approach", "Your approach", "Your attitude and stance", AREA_INTERNAL),
        PositionSpec("environment", "Environment", "People and forces around you", AREA_EXTERNAL),
        PositionSpec("hopes_fears", "Hopes and fears", "What you hope and dread", AREA_INTERNAL),
        PositionSpec("outcome", "Outcome", "The likely final result", AREA_OUTCOME),
    ),
)

_LAYOUTS: dict[SpreadType, SpreadLayout] = {
    SpreadType.SINGLE: SINGLE_LAYOUT,
    SpreadType.TRIPLE: TRIPLE_LAYOUT,
    SpreadType.CELTIC: CELTIC_LAYOUT,
}


def is_supported_spread(spread_type: str | SpreadType) -> bool:
    """Check whether a spread type name has a layout."""
    try:
        SpreadType(spread_type)
    except ValueError:
        return False
    return True


def get_layout(spread_type: str | SpreadType) -> SpreadLayout:
    """
    Get the layout for a spread type.

    Unknown types fall back to the single card layout.
    """
    try:
        return _LAYOUTS[SpreadType(spread_type)]
    except ValueError:
        logger.debug(
            "SPREAD_FALLBACK",
            extra={"requested": str(spread_type), "used": SpreadType.SINGLE.value},
        )
        return SINGLE_LAYOUT


def positions_in_area(layout: SpreadLayout, area: str) -> tuple[PositionSpec, ...]:
    """Positions of a layout that belong to one area, in layout order."""
    return tuple(position for position in layout.positions if position.area == area)
