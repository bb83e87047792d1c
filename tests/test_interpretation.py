"""Tests for the interpretation engine."""

import logging
import re
from datetime import UTC, datetime

import pytest

from tarotdesk.models.card import DrawnCard, Suit
from tarotdesk.services import meanings
from tarotdesk.services.deck import get_card, minor_card_id
from tarotdesk.services.interpretation import InterpretationEngine, detect_question_category
from tarotdesk.services.meanings import GENERIC_PLACEHOLDER, get_meaning
from tarotdesk.services.spreads import get_layout

MOMENT = datetime(2024, 6, 1, 1, 0, tzinfo=UTC)


def spread(spread_type: str, *cards: tuple[int, bool]) -> list[DrawnCard]:
    """Build drawn cards for a layout from (card id, reversed) pairs."""
    keys = get_layout(spread_type).keys
    return [
        DrawnCard(card=get_card(card_id), is_reversed=rev, position=key, drawn_at=MOMENT)
        for key, (card_id, rev) in zip(keys, cards, strict=True)
    ]


@pytest.fixture
def engine() -> InterpretationEngine:
    return InterpretationEngine()


class TestQuestionCategory:
    @pytest.mark.parametrize(
        ("question", "category"),
        [
            ("Will my relationship last?", "love"),
            ("연애운이 궁금해요", "love"),
            ("Should I ask for a promotion?", "career"),
            ("이직해도 될까요", "career"),
            ("Is this a good time to invest?", "money"),
            ("건강은 어떨까요", "health"),
            ("What does the day hold?", "general"),
            (None, "general"),
            ("", "general"),
        ],
    )
    def test_detects_category(self, question: str | None, category: str) -> None:
        assert detect_question_category(question) == category


class TestMeaningLookup:
    def test_generic_meaning_by_orientation(self) -> None:
        assert get_meaning(0, False) != get_meaning(0, True)

    def test_category_override_wins(self) -> None:
        generic = get_meaning(6, False)
        love = get_meaning(6, False, "love")

        assert love != generic
        assert "love" in love

    def test_override_only_for_listed_cards(self) -> None:
        assert get_meaning(1, False, "love") == get_meaning(1, False)

    def test_missing_meaning_degrades(
        self,
        engine: InterpretationEngine,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.delitem(meanings.CARD_MEANINGS, 5)

        with caplog.at_level(logging.WARNING):
            result = engine.interpret(spread("single", (5, False)), "single")

        assert result.cards[0].meaning == GENERIC_PLACEHOLDER
        assert result.cards[0].degraded is True
        assert "INTERPRETATION_LOOKUP_MISS" in [r.getMessage() for r in caplog.records]


class TestSingleSpread:
    def test_major_commentary(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(spread("single", (0, False)), "single")

        assert result.spread_type == "single"
        assert result.summary == "Today's card is The Fool."
        assert "major arcana" in result.narrative[0]
        assert result.cards[0].position == "single"

    def test_minor_commentary_mentions_suit_and_number(self, engine: InterpretationEngine) -> None:
        card_id = minor_card_id(Suit.CUPS, 3)
        result = engine.interpret(spread("single", (card_id, True)), "single")

        assert "cups" in result.narrative[0]
        assert "number 3" in result.narrative[0]
        assert result.summary.endswith("(reversed).")

    def test_court_commentary(self, engine: InterpretationEngine) -> None:
        card_id = minor_card_id(Suit.SWORDS, 12)
        result = engine.interpret(spread("single", (card_id, False)), "single")

        assert "court card" in result.narrative[0]


class TestTripleFlow:
    def test_two_reversed_is_challenging(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (17, True), (19, True), (21, False))

        assert engine.classify_flow(cards) == "challenging"

    def test_death_is_transformative(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, False), (13, False), (3, False))

        assert engine.classify_flow(cards) == "transformative"

    def test_eight_of_cups_is_transformative(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, False), (minor_card_id(Suit.CUPS, 8), False), (3, False))

        assert engine.classify_flow(cards) == "transformative"

    def test_devil_is_challenging(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (15, False), (1, False), (3, False))

        assert engine.classify_flow(cards) == "challenging"

    def test_no_reversals_is_positive(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, False), (2, False), (3, False))

        assert engine.classify_flow(cards) == "positive"

    def test_bright_future_despite_one_reversal(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, True), (2, False), (19, False))

        assert engine.classify_flow(cards) == "positive"

    def test_otherwise_stable(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, True), (2, False), (3, False))

        assert engine.classify_flow(cards) == "stable"

    def test_reversed_future_is_not_positive(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, False), (2, False), (19, True))

        assert engine.classify_flow(cards) == "stable"

    def test_interpretation_has_narrative_and_flow(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(spread("triple", (1, False), (2, False), (3, False)), "triple")

        assert result.flow == "positive"
        assert len(result.narrative) == 4
        assert "The Magician" in result.narrative[0]
        assert result.summary.startswith("A positive flow")


class TestCelticCross:
    def celtic(
        self,
        outcome: tuple[int, bool],
        approach: tuple[int, bool] = (1, False),
        present: tuple[int, bool] = (2, False),
    ):
        return spread(
            "celtic",
            present,
            (4, False),
            (5, False),
            (minor_card_id(Suit.WANDS, 2), False),
            (minor_card_id(Suit.WANDS, 3), False),
            (minor_card_id(Suit.CUPS, 6), False),
            approach,
            (minor_card_id(Suit.SWORDS, 4), False),
            (minor_card_id(Suit.PENTACLES, 7), False),
            outcome,
        )

    def test_all_areas_present(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(self.celtic((19, False)), "celtic")

        areas = {area.area: area.positions for area in result.areas}
        assert areas == {
            "center": ["present", "challenge"],
            "timeline": ["foundation", "recent_past", "crown", "near_future"],
            "internal": ["approach", "hopes_fears"],
            "external": ["environment"],
            "outcome": ["outcome"],
        }

    def test_synthesis_anchors_on_approach_and_outcome(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(self.celtic((19, False), approach=(8, False)), "celtic")

        assert result.synthesis is not None
        assert "Strength" in result.synthesis
        assert "The Sun" in result.synthesis

    @pytest.mark.parametrize(
        ("outcome", "tone"),
        [
            ((19, False), "positive"),
            ((19, True), "challenging"),
            ((16, False), "challenging"),
            ((minor_card_id(Suit.WANDS, 7), False), "neutral"),
        ],
    )
    def test_outcome_tone(
        self, engine: InterpretationEngine, outcome: tuple[int, bool], tone: str
    ) -> None:
        result = engine.interpret(self.celtic(outcome), "celtic")

        assert result.outcome_tone == tone

    def test_center_emphasises_major_present_card(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(self.celtic((19, False)), "celtic")

        center = next(area for area in result.areas if area.area == "center")
        assert "turning point" in center.message
        assert "message of The High Priestess" in center.message
        assert "great mountain" in center.message
        assert center.message.index("turning point") < center.message.index("great mountain")

    def test_center_emphasises_suit_of_minor_present_card(
        self, engine: InterpretationEngine
    ) -> None:
        present = (minor_card_id(Suit.CUPS, 12), False)

        result = engine.interpret(self.celtic((19, False), present=present), "celtic")

        center = next(area for area in result.areas if area.area == "center")
        assert "Listen to your heart." in center.message
        assert "turning point" not in center.message


class TestPatterns:
    def test_combination_found_in_any_order(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (21, False), (5, False), (0, False))

        types = [pattern.type for pattern in engine.detect_patterns(cards)]

        assert "new_cycle" in types

    def test_same_rank_pair(self, engine: InterpretationEngine) -> None:
        cards = spread(
            "triple",
            (minor_card_id(Suit.WANDS, 1), False),
            (minor_card_id(Suit.SWORDS, 1), False),
            (5, False),
        )

        types = [pattern.type for pattern in engine.detect_patterns(cards)]

        assert "multiple_aces" in types

    def test_all_major(self, engine: InterpretationEngine) -> None:
        cards = spread("triple", (1, False), (2, False), (3, False))

        assert "all_major" in [p.type for p in engine.detect_patterns(cards)]

    def test_all_same_suit(self, engine: InterpretationEngine) -> None:
        cards = spread(
            "triple",
            (minor_card_id(Suit.CUPS, 2), False),
            (minor_card_id(Suit.CUPS, 5), False),
            (minor_card_id(Suit.CUPS, 9), False),
        )

        assert "all_same_suit" in [p.type for p in engine.detect_patterns(cards)]

    def test_many_reversed_above_sixty_percent(self, engine: InterpretationEngine) -> None:
        two_of_three = spread("triple", (1, True), (2, True), (3, False))
        one_of_three = spread("triple", (1, True), (2, False), (3, False))

        assert "many_reversed" in [p.type for p in engine.detect_patterns(two_of_three)]
        assert "many_reversed" not in [p.type for p in engine.detect_patterns(one_of_three)]

    def test_single_card_has_no_spread_wide_pattern(self, engine: InterpretationEngine) -> None:
        assert engine.detect_patterns(spread("single", (0, True))) == []

    def test_mood_needs_half_the_cards(self, engine: InterpretationEngine) -> None:
        hopeful = spread("triple", (17, False), (19, False), (5, False))
        mixed = spread("triple", (17, False), (5, False), (6, False))

        assert engine.detect_mood(hopeful) == "hopeful"
        assert engine.detect_mood(mixed) is None

    def test_mood_message_accompanies_mood(self, engine: InterpretationEngine) -> None:
        hopeful = spread("triple", (17, False), (19, False), (5, False))
        mixed = spread("triple", (17, False), (5, False), (6, False))

        assert engine.interpret(hopeful, "triple").mood_message
        assert engine.interpret(mixed, "triple").mood_message is None

    def test_mood_advice_accompanies_mood(self, engine: InterpretationEngine) -> None:
        hopeful = spread("triple", (17, False), (19, False), (5, False))
        mixed = spread("triple", (17, False), (5, False), (6, False))

        assert "positive energy" in engine.interpret(hopeful, "triple").mood_advice
        assert engine.interpret(mixed, "triple").mood_advice is None


class TestAnalysisAndAdvice:
    def test_analysis_counts(self, engine: InterpretationEngine) -> None:
        cards = spread(
            "triple",
            (minor_card_id(Suit.CUPS, 2), True),
            (minor_card_id(Suit.CUPS, 5), False),
            (0, False),
        )

        analysis = engine.analyze(cards)

        assert analysis.major_count == 1
        assert analysis.reversed_count == 1
        assert analysis.suits == {"cups": 2}
        assert analysis.elements == {"water": 2}
        assert analysis.dominant_suit == "cups"

    def test_advice_is_one_to_three_sentences(self, engine: InterpretationEngine) -> None:
        for cards in (
            spread("single", (0, False)),
            spread("triple", (1, True), (minor_card_id(Suit.CUPS, 2), False), (3, False)),
        ):
            advice = engine.interpret(cards, "triple" if len(cards) == 3 else "single").advice
            sentences = [s for s in re.split(r"(?<=[.!?])\s+", advice) if s]
            assert 1 <= len(sentences) <= 3

    def test_advice_mentions_reversals(self, engine: InterpretationEngine) -> None:
        result = engine.interpret(spread("single", (0, True)), "single", "Will I find love?")

        assert "Reversed cards" in result.advice
        assert result.category == "love"
