"""Tests for spread layouts."""

from tarotdesk.models.spread import SpreadType
from tarotdesk.services.spreads import (
    AREA_CENTER,
    AREA_INTERNAL,
    CELTIC_LAYOUT,
    get_layout,
    is_supported_spread,
    positions_in_area,
)


class TestLayouts:
    def test_layout_sizes(self) -> None:
        assert len(get_layout("single")) == 1
        assert len(get_layout("triple")) == 3
        assert len(get_layout("celtic")) == 10

    def test_triple_keys(self) -> None:
        assert get_layout(SpreadType.TRIPLE).keys == ("past", "present", "future")

    def test_celtic_keys_in_order(self) -> None:
        assert get_layout("celtic").keys == (
            "present",
            "challenge",
            "foundation",
            "recent_past",
            "crown",
            "near_future",
            "approach",
            "environment",
            "hopes_fears",
            "outcome",
        )

    def test_keys_are_unique(self) -> None:
        for spread_type in SpreadType:
            keys = get_layout(spread_type).keys
            assert len(keys) == len(set(keys))

    def test_every_celtic_position_has_an_area(self) -> None:
        assert all(position.area for position in CELTIC_LAYOUT.positions)

    def test_positions_in_area(self) -> None:
        center = [position.key for position in positions_in_area(CELTIC_LAYOUT, AREA_CENTER)]
        internal = [position.key for position in positions_in_area(CELTIC_LAYOUT, AREA_INTERNAL)]

        assert center == ["present", "challenge"]
        assert internal == ["approach", "hopes_fears"]

    def test_position_lookup(self) -> None:
        position = CELTIC_LAYOUT.position("outcome")

        assert position is not None
        assert position.display_name == "Outcome"
        assert CELTIC_LAYOUT.position("missing") is None


class TestUnknownSpread:
    def test_unknown_type_falls_back_to_single(self) -> None:
        layout = get_layout("pentagram")

        assert layout.spread_type is SpreadType.SINGLE
        assert len(layout) == 1

    def test_supported_check(self) -> None:
        assert is_supported_spread("celtic")
        assert is_supported_spread(SpreadType.TRIPLE)
        assert not is_supported_spread("pentagram")
