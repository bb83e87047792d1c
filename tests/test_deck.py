"""Tests for the static 78-card deck registry."""

import pytest

from tarotdesk.models.card import Arcana, Court, Suit
from tarotdesk.services.deck import (
    DECK_SIZE,
    TAROT_DECK,
    find_card_by_name,
    get_card,
    get_full_deck,
    minor_card_id,
)
from tarotdesk.services.meanings import CARD_MEANINGS


class TestDeckShape:
    def test_deck_has_78_cards(self) -> None:
        assert len(TAROT_DECK) == DECK_SIZE == 78

    def test_ids_are_contiguous_and_unique(self) -> None:
        assert [card.id for card in TAROT_DECK] == list(range(78))

    def test_22_major_and_56_minor(self) -> None:
        majors = [card for card in TAROT_DECK if card.arcana is Arcana.MAJOR]
        minors = [card for card in TAROT_DECK if card.arcana is Arcana.MINOR]

        assert len(majors) == 22
        assert len(minors) == 56
        assert all(card.suit is None for card in majors)

    def test_each_suit_has_14_cards_with_four_courts(self) -> None:
        for suit in Suit:
            cards = [card for card in TAROT_DECK if card.suit is suit]
            assert len(cards) == 14
            assert [card.court for card in cards if card.is_court] == list(Court)

    def test_major_order_is_canonical(self) -> None:
        assert get_card(0).name == "The Fool"
        assert get_card(13).name == "Death"
        assert get_card(21).name == "The World"

    def test_every_card_has_a_meaning(self) -> None:
        assert set(CARD_MEANINGS) == {card.id for card in TAROT_DECK}


class TestMinorIds:
    def test_first_minor_is_ace_of_wands(self) -> None:
        assert minor_card_id(Suit.WANDS, 1) == 22
        assert get_card(22).name == "Ace of Wands"

    def test_last_minor_is_king_of_pentacles(self) -> None:
        assert minor_card_id(Suit.PENTACLES, 14) == 77
        assert get_card(77).name == "King of Pentacles"

    def test_court_names(self) -> None:
        queen = get_card(minor_card_id(Suit.SWORDS, 13))

        assert queen.name == "Queen of Swords"
        assert queen.localized_name == "검의 퀸"
        assert queen.court is Court.QUEEN
        assert queen.element == "air"

    @pytest.mark.parametrize("rank", [0, 15])
    def test_rank_out_of_range_rejected(self, rank: int) -> None:
        with pytest.raises(ValueError):
            minor_card_id(Suit.CUPS, rank)


class TestDeckAccess:
    def test_full_deck_is_a_fresh_list(self) -> None:
        first = get_full_deck()
        first.pop()
        first.reverse()

        second = get_full_deck()

        assert len(second) == 78
        assert second[0].id == 0
        assert second is not first

    def test_cards_are_immutable(self) -> None:
        card = get_card(0)
        with pytest.raises(AttributeError):
            card.name = "Someone Else"  # type: ignore[misc]

    def test_unknown_id_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            get_card(78)
        with pytest.raises(KeyError):
            get_card(-1)

    def test_find_by_name_is_case_insensitive(self) -> None:
        card = find_card_by_name("  the tower ")

        assert card is not None
        assert card.id == 16

    def test_find_by_unknown_name(self) -> None:
        assert find_card_by_name("The Joker") is None
