"""
Interpretation Engine: from drawn cards to a multi-layer reading.

Layers, in order:
1. Question category (keyword match)
2. Per-card meaning for the position and orientation
3. Spread narrative (single commentary, triple flow, Celtic areas)
4. Special patterns and overall mood
5. Aggregate analysis
6. Advice (one to three sentences)

A missing meaning never fails a draw: the card degrades to a placeholder
and the miss is logged.
"""

import logging
import math
from collections import Counter
from collections.abc import Sequence
from itertools import combinations

from tarotdesk.models.card import DrawnCard, Suit
from tarotdesk.models.failure import InterpretationLookupMiss
from tarotdesk.models.reading import (
    AreaReading,
    CardReading,
    Interpretation,
    SpecialPattern,
    SpreadAnalysis,
)
from tarotdesk.models.spread import SpreadLayout, SpreadType
from tarotdesk.services.deck import minor_card_id
from tarotdesk.services.meanings import (
    ARCANA_DESCRIPTIONS,
    COURT_PERSONALITIES,
    GENERIC_PLACEHOLDER,
    NUMBER_ENERGIES,
    QUESTION_CATEGORY_NAMES,
    QUESTION_KEYWORDS,
    SUIT_DESCRIPTIONS,
    get_meaning,
)
from tarotdesk.services.spreads import (
    AREA_CENTER,
    AREA_EXTERNAL,
    AREA_INTERNAL,
    AREA_OUTCOME,
    AREA_TIMELINE,
    AREA_TITLES,
    get_layout,
    positions_in_area,
)

logger = logging.getLogger(__name__)

# Major arcana ids
FOOL, MAGICIAN, HIGH_PRIESTESS, EMPRESS, EMPEROR = 0, 1, 2, 3, 4
LOVERS, WHEEL, DEATH, DEVIL, TOWER = 6, 10, 13, 15, 16
STAR, SUN, JUDGEMENT, WORLD = 17, 19, 20, 21

ACE_OF_CUPS = minor_card_id(Suit.CUPS, 1)
TWO_OF_CUPS = minor_card_id(Suit.CUPS, 2)
THREE_OF_CUPS = minor_card_id(Suit.CUPS, 3)
FIVE_OF_CUPS = minor_card_id(Suit.CUPS, 5)
EIGHT_OF_CUPS = minor_card_id(Suit.CUPS, 8)
TEN_OF_CUPS = minor_card_id(Suit.CUPS, 10)
THREE_OF_SWORDS = minor_card_id(Suit.SWORDS, 3)
TEN_OF_SWORDS = minor_card_id(Suit.SWORDS, 10)
FOUR_OF_WANDS = minor_card_id(Suit.WANDS, 4)
SIX_OF_WANDS = minor_card_id(Suit.WANDS, 6)
ACE_OF_PENTACLES = minor_card_id(Suit.PENTACLES, 1)
TEN_OF_PENTACLES = minor_card_id(Suit.PENTACLES, 10)

TRANSFORMATIVE_CARDS = frozenset({DEATH, JUDGEMENT, WHEEL, TOWER, EIGHT_OF_CUPS})
CHALLENGING_CARDS = frozenset({TOWER, DEVIL, THREE_OF_SWORDS, TEN_OF_SWORDS, FIVE_OF_CUPS})
POSITIVE_CARDS = frozenset(
    {SUN, STAR, WORLD, ACE_OF_CUPS, TEN_OF_CUPS, ACE_OF_PENTACLES, SIX_OF_WANDS}
)

# Checked in order; the first mood holding at least half the cards wins
MOOD_CARDS: dict[str, frozenset[int]] = {
    "hopeful": frozenset({STAR, SUN, ACE_OF_CUPS, THREE_OF_CUPS}),
    "challenging": frozenset({TOWER, FIVE_OF_CUPS, THREE_OF_SWORDS, TEN_OF_SWORDS}),
    "transformative": frozenset({DEATH, TOWER, JUDGEMENT, EIGHT_OF_CUPS}),
    "stable": frozenset({EMPEROR, FOUR_OF_WANDS, TEN_OF_PENTACLES, TWO_OF_CUPS}),
}

MOOD_MESSAGES: dict[str, str] = {
    "hopeful": "A light of hope shines through. Positive energy surrounds you.",
    "challenging": "This is a trying time, and it prepares you for something better.",
    "transformative": "A wave of change is coming. Release the old and welcome the new.",
    "stable": "A time of stability and harmony. Enjoy the calm while preparing ahead.",
}

MOOD_ADVICE: dict[str, str] = {
    "hopeful": "Hold on to this positive energy and keep moving toward your dream.",
    "challenging": "Treat the hardship as a chance to grow, and wait for the dawn that is coming.",
    "transformative": "Do not fear the change. Accept it with courage.",
    "stable": "Strengthen your foundations and deepen your relationships.",
}

COMBINATIONS: dict[frozenset[int], tuple[str, str]] = {
    frozenset({FOOL, WORLD}): (
        "new_cycle",
        "One cycle closes and a completely new beginning approaches.",
    ),
    frozenset({MAGICIAN, HIGH_PRIESTESS}): (
        "conscious_harmony",
        "Conscious and unconscious in harmony. Powerful creativity is released.",
    ),
    frozenset({EMPEROR, EMPRESS}): (
        "authority_abundance",
        "Authority meets abundance. Steady growth and prosperity are likely.",
    ),
    frozenset({DEATH, TOWER}): (
        "radical_change",
        "Sudden, fundamental change. A clean break with the past is needed.",
    ),
    frozenset({STAR, SUN}): (
        "hope_realized",
        "A very positive pairing. Hope is becoming reality.",
    ),
    frozenset({LOVERS, TWO_OF_CUPS}): (
        "deep_partnership",
        "Deep love and true partnership. A soulmate connection is possible.",
    ),
    frozenset({TOWER, FIVE_OF_CUPS}): (
        "unexpected_loss",
        "An unexpected loss, which clears the way for a better future.",
    ),
    frozenset({WORLD, TEN_OF_PENTACLES}): (
        "complete_abundance",
        "Material and spiritual completion. Abundance on every front.",
    ),
}

SAME_RANK_PATTERNS: dict[int, tuple[str, str]] = {
    1: ("multiple_aces", "A powerful new start. Opportunities arrive in several areas at once."),
    4: ("multiple_fours", "Stability bordering on stagnation. Keep what works but allow change."),
    10: ("multiple_tens", "A great cycle completes. Get ready for the next stage."),
}

ALL_SAME_SUIT_MESSAGES: dict[Suit, str] = {
    Suit.WANDS: "The fire of passion and creativity burns bright. Now is the time to act.",
    Suit.CUPS: "You are immersed in emotion. Trust your intuition and lead with love.",
    Suit.SWORDS: "Clear thinking and the pursuit of truth are needed. Analyse calmly.",
    Suit.PENTACLES: "Material stability and practicality matter now. Make concrete plans.",
}

ALL_MAJOR_MESSAGE = (
    "The universe is sending you an important message. You stand at a major turning point."
)
MANY_REVERSED_MESSAGE = (
    "Many cards are reversed. Energy is blocked or turned inward; slow down and reflect."
)
MANY_REVERSED_RATIO = 0.6

FLOW_MESSAGES: dict[str, str] = {
    "positive": "You are using the lessons of the past well, and a bright future awaits.",
    "challenging": (
        "Past difficulties still weigh on the present. Overcome them and a better "
        "future opens."
    ),
    "transformative": "This is a time of great change. Let go of the past and embrace what comes.",
    "stable": "You are in a steady current. Today's effort leads to tomorrow's success.",
}

TRIPLE_TEMPLATES: dict[str, tuple[str, ...]] = {
    "past": (
        "{card} in the past planted the seed of the present situation.",
        "The experience of {card} helped you grow.",
        "Remember the lesson of {card} behind you.",
    ),
    "present": (
        "The energy of {card} is strongly at work right now.",
        "Face the reality that {card} reveals.",
        "Now is the time for the wisdom of {card}.",
    ),
    "future": (
        "Ahead, {card} will bear fruit.",
        "Prepare for the future that {card} suggests.",
        "The opportunity of {card} is coming.",
    ),
}

AREA_SYNTHESIS: dict[str, str] = {
    AREA_CENTER: "Your situation and its challenge are intertwined; a balanced view is needed.",
    AREA_TIMELINE: "A clear line runs from past to future. Time is on your side.",
    AREA_INTERNAL: "Inner growth and self-awareness are the key. Trust yourself.",
    AREA_EXTERNAL: "Harmony with your surroundings matters. You are not alone.",
    AREA_OUTCOME: "",
}

# Keyed by "major" or the suit of the present card
PRESENT_EMPHASIS: dict[str, str] = {
    "major": "You stand at an important turning point in life. Listen to the message of {card}.",
    Suit.WANDS.value: "The situation calls for passion and creativity. Act with energy.",
    Suit.CUPS.value: "Emotions are at the heart of the matter. Listen to your heart.",
    Suit.SWORDS.value: "Clear thinking and decisiveness are needed. Face the truth.",
    Suit.PENTACLES.value: "A realistic, practical approach is needed. Build solid foundations.",
}

OUTCOME_TONE_MESSAGES: dict[str, str] = {
    "positive": "Your efforts bear fruit and you reach the result you hope for.",
    "neutral": "The result may differ from what you expect, and it is an experience you need.",
    "challenging": "Difficulty lies ahead, and you will come out of it stronger.",
}

SUIT_ADVICE: dict[Suit, str] = {
    Suit.WANDS: "Follow your passion and take the first step.",
    Suit.CUPS: "Listen to your heart and tend to your relationships.",
    Suit.SWORDS: "Think clearly and speak honestly.",
    Suit.PENTACLES: "Stay practical and build on solid ground.",
}

MAJOR_ADVICE = "Pay attention to the larger lesson unfolding in your life."
REVERSED_CAVEAT = "Reversed cards ask you to look inward before pushing ahead."

CATEGORY_CLOSINGS: dict[str, str] = {
    "love": "Be honest about what your heart wants.",
    "career": "Steady effort at work will be noticed.",
    "money": "Review your budget before any big decision.",
    "health": "Rest well and listen to your body.",
    "general": "Listen closely to the message of the cards.",
}


def detect_question_category(question: str | None) -> str:
    """
    Classify a question into love, career, money, health or general.

    Matches are case-insensitive substring checks against English and Korean
    keywords.
    """
    if not question:
        return "general"

    text = question.lower()
    for category, keywords in QUESTION_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return category
    return "general"


def _display(drawn: DrawnCard) -> str:
    suffix = " (reversed)" if drawn.is_reversed else ""
    return f"{drawn.card.name}{suffix}"


class InterpretationEngine:
    """Builds an Interpretation for a completed draw."""

    def interpret(
        self,
        cards: Sequence[DrawnCard],
        spread_type: str | SpreadType,
        question: str | None = None,
    ) -> Interpretation:
        layout = get_layout(spread_type)
        category = detect_question_category(question)

        readings = [self._read_card(drawn, layout, category) for drawn in cards]
        by_position = {drawn.position: drawn for drawn in cards}
        analysis = self.analyze(cards)

        narrative: list[str] = []
        flow: str | None = None
        areas: list[AreaReading] = []
        synthesis: str | None = None
        outcome_tone: str | None = None

        if layout.spread_type is SpreadType.TRIPLE:
            narrative = self._triple_narrative(cards)
            flow = self.classify_flow(cards)
            narrative.append(FLOW_MESSAGES[flow])
        elif layout.spread_type is SpreadType.CELTIC:
            areas = self._celtic_areas(layout, by_position, readings)
            outcome_tone = self.outcome_tone(by_position.get("outcome"))
            synthesis = self._celtic_synthesis(by_position, outcome_tone)
        else:
            narrative = [self._single_commentary(drawn) for drawn in cards]

        mood = self.detect_mood(cards)
        patterns = self.detect_patterns(cards)

        return Interpretation(
            spread_type=layout.spread_type.value,
            category=category,
            summary=self._summary(cards, layout, category, flow, outcome_tone),
            cards=readings,
            narrative=narrative,
            flow=flow,
            areas=areas,
            synthesis=synthesis,
            outcome_tone=outcome_tone,
            mood=mood,
            mood_message=MOOD_MESSAGES[mood] if mood else None,
            mood_advice=MOOD_ADVICE[mood] if mood else None,
            patterns=patterns,
            analysis=analysis,
            advice=self.advice(analysis, category),
        )

    # -------------------------------------------------------------------------
    # Per-card layer
    # -------------------------------------------------------------------------

    def _read_card(self, drawn: DrawnCard, layout: SpreadLayout, category: str) -> CardReading:
        card = drawn.card
        position = layout.position(drawn.position)
        degraded = False

        try:
            meaning = get_meaning(card.id, drawn.is_reversed, category)
        except InterpretationLookupMiss as e:
            logger.warning(
                "INTERPRETATION_LOOKUP_MISS",
                extra={"card_id": e.card_id, "orientation": e.orientation},
            )
            meaning = GENERIC_PLACEHOLDER
            degraded = True

        return CardReading(
            card_id=card.id,
            name=card.name,
            localized_name=card.localized_name,
            position=drawn.position,
            position_name=position.display_name if position else drawn.position,
            is_reversed=drawn.is_reversed,
            keywords=list(card.keywords),
            meaning=meaning,
            degraded=degraded,
        )

    # -------------------------------------------------------------------------
    # Spread layer
    # -------------------------------------------------------------------------

    def _single_commentary(self, drawn: DrawnCard) -> str:
        card = drawn.card
        if card.is_major:
            return ARCANA_DESCRIPTIONS["major"]

        parts = [ARCANA_DESCRIPTIONS["minor"]]
        if card.suit is not None:
            parts.append(f"The {card.suit.value} carry {SUIT_DESCRIPTIONS[card.suit]}.")
        if card.court is not None:
            parts.append(f"This court card points to {COURT_PERSONALITIES[card.court]}.")
        elif card.rank in NUMBER_ENERGIES:
            parts.append(f"The number {card.rank} speaks of {NUMBER_ENERGIES[card.rank]}.")
        return " ".join(parts)

    def _triple_narrative(self, cards: Sequence[DrawnCard]) -> list[str]:
        lines = []
        for drawn in cards:
            templates = TRIPLE_TEMPLATES.get(drawn.position)
            if not templates:
                continue
            # Deterministic per card so the same draw always reads the same
            template = templates[drawn.card.id % len(templates)]
            lines.append(template.format(card=_display(drawn)))
        return lines

    def classify_flow(self, cards: Sequence[DrawnCard]) -> str:
        """
        Classify a past-present-future draw.

        Rules, first match wins:
        1. Two or more reversed cards: challenging
        2. Any card of change (Death, Judgement, Wheel, Tower, Eight of Cups):
           transformative
        3. Any hard card (Tower, Devil, Three/Ten of Swords, Five of Cups):
           challenging
        4. Upright future that is a bright card, or no reversals at all: positive
        5. Otherwise: stable
        """
        ids = {drawn.card.id for drawn in cards}
        reversed_count = sum(1 for drawn in cards if drawn.is_reversed)
        future = next((drawn for drawn in cards if drawn.position == "future"), None)

        if reversed_count >= 2:
            return "challenging"
        if ids & TRANSFORMATIVE_CARDS:
            return "transformative"
        if ids & CHALLENGING_CARDS:
            return "challenging"
        if future is not None and not future.is_reversed:
            if future.card.id in POSITIVE_CARDS or reversed_count == 0:
                return "positive"
        return "stable"

    def _celtic_areas(
        self,
        layout: SpreadLayout,
        by_position: dict[str, DrawnCard],
        readings: Sequence[CardReading],
    ) -> list[AreaReading]:
        meanings = {reading.position: reading.meaning for reading in readings}
        areas = []

        for area in (AREA_CENTER, AREA_TIMELINE, AREA_INTERNAL, AREA_EXTERNAL, AREA_OUTCOME):
            area_positions = [
                position
                for position in positions_in_area(layout, area)
                if position.key in by_position
            ]
            if not area_positions:
                continue

            sentences = [
                f"{position.display_name}, {_display(by_position[position.key])}: "
                f"{meanings[position.key]}"
                for position in area_positions
            ]
            if area == AREA_CENTER:
                sentences.extend(self._center_emphasis(by_position))
            if AREA_SYNTHESIS[area]:
                sentences.append(AREA_SYNTHESIS[area])

            areas.append(
                AreaReading(
                    area=area,
                    title=AREA_TITLES[area],
                    positions=[position.key for position in area_positions],
                    message=" ".join(sentences),
                )
            )
        return areas

    def _center_emphasis(self, by_position: dict[str, DrawnCard]) -> list[str]:
        emphasis = []
        present = by_position.get("present")
        if present is not None:
            if present.card.is_major:
                emphasis.append(PRESENT_EMPHASIS["major"].format(card=present.card.name))
            elif present.card.suit is not None:
                emphasis.append(PRESENT_EMPHASIS[present.card.suit.value])

        challenge = by_position.get("challenge")
        if challenge is None:
            return emphasis
        if challenge.is_reversed:
            emphasis.append(
                "The block may lie within you or in your approach; try a new perspective."
            )
        elif challenge.card.is_major:
            emphasis.append("There is a great mountain to climb, and it is a chance to grow.")
        return emphasis

    def outcome_tone(self, outcome: DrawnCard | None) -> str | None:
        """positive, neutral or challenging tone of the Celtic outcome card."""
        if outcome is None:
            return None
        if outcome.is_reversed or outcome.card.id in CHALLENGING_CARDS:
            return "challenging"
        if outcome.card.id in POSITIVE_CARDS or outcome.card.is_major:
            return "positive"
        return "neutral"

    def _celtic_synthesis(self, by_position: dict[str, DrawnCard], tone: str | None) -> str:
        approach = by_position.get("approach")
        outcome = by_position.get("outcome")
        parts = []
        if approach is not None and outcome is not None:
            parts.append(
                f"If you proceed with the attitude of {_display(approach)}, "
                f"the path leads toward {_display(outcome)}."
            )
        if tone is not None:
            parts.append(OUTCOME_TONE_MESSAGES[tone])
        return " ".join(parts)

    # -------------------------------------------------------------------------
    # Pattern layer
    # -------------------------------------------------------------------------

    def detect_mood(self, cards: Sequence[DrawnCard]) -> str | None:
        """First mood that holds at least half of the cards, if any."""
        if not cards:
            return None
        needed = math.ceil(len(cards) / 2)
        for mood, mood_cards in MOOD_CARDS.items():
            if sum(1 for drawn in cards if drawn.card.id in mood_cards) >= needed:
                return mood
        return None

    def detect_patterns(self, cards: Sequence[DrawnCard]) -> list[SpecialPattern]:
        patterns: list[SpecialPattern] = []

        for first, second in combinations(cards, 2):
            combination = COMBINATIONS.get(frozenset({first.card.id, second.card.id}))
            if combination is not None:
                kind, message = combination
                patterns.append(
                    SpecialPattern(
                        type=kind,
                        message=message,
                        card_ids=sorted([first.card.id, second.card.id]),
                    )
                )

        pips = [
            drawn.card for drawn in cards if not drawn.card.is_major and not drawn.card.is_court
        ]
        for rank, (kind, message) in SAME_RANK_PATTERNS.items():
            matching = [card.id for card in pips if card.rank == rank]
            if len(matching) >= 2:
                patterns.append(SpecialPattern(type=kind, message=message, card_ids=matching))

        # Spread-wide patterns need more than one card to mean anything
        if len(cards) < 2:
            return patterns

        all_ids = [drawn.card.id for drawn in cards]
        if all(drawn.card.is_major for drawn in cards):
            patterns.append(
                SpecialPattern(type="all_major", message=ALL_MAJOR_MESSAGE, card_ids=all_ids)
            )

        first_suit = cards[0].card.suit
        if first_suit is not None and all(drawn.card.suit is first_suit for drawn in cards):
            patterns.append(
                SpecialPattern(
                    type="all_same_suit",
                    message=ALL_SAME_SUIT_MESSAGES[first_suit],
                    card_ids=all_ids,
                )
            )

        reversed_ids = [drawn.card.id for drawn in cards if drawn.is_reversed]
        if len(reversed_ids) > len(cards) * MANY_REVERSED_RATIO:
            patterns.append(
                SpecialPattern(
                    type="many_reversed",
                    message=MANY_REVERSED_MESSAGE,
                    card_ids=reversed_ids,
                )
            )

        return patterns

    # -------------------------------------------------------------------------
    # Analysis and advice
    # -------------------------------------------------------------------------

    def analyze(self, cards: Sequence[DrawnCard]) -> SpreadAnalysis:
        suits: Counter[str] = Counter()
        elements: Counter[str] = Counter()
        for drawn in cards:
            if drawn.card.suit is not None:
                suits[drawn.card.suit.value] += 1
            element = drawn.card.element
            if element is not None:
                elements[element] += 1

        dominant_suit = suits.most_common(1)[0][0] if suits else None

        return SpreadAnalysis(
            major_count=sum(1 for drawn in cards if drawn.card.is_major),
            reversed_count=sum(1 for drawn in cards if drawn.is_reversed),
            suits=dict(suits),
            elements=dict(elements),
            dominant_suit=dominant_suit,
        )

    def advice(self, analysis: SpreadAnalysis, category: str) -> str:
        """One to three sentences of advice."""
        sentences = []
        if analysis.dominant_suit is not None:
            sentences.append(SUIT_ADVICE[Suit(analysis.dominant_suit)])
        else:
            sentences.append(MAJOR_ADVICE)
        if analysis.reversed_count > 0:
            sentences.append(REVERSED_CAVEAT)
        sentences.append(CATEGORY_CLOSINGS.get(category, CATEGORY_CLOSINGS["general"]))
        return " ".join(sentences)

    def _summary(
        self,
        cards: Sequence[DrawnCard],
        layout: SpreadLayout,
        category: str,
        flow: str | None,
        outcome_tone: str | None,
    ) -> str:
        if layout.spread_type is SpreadType.SINGLE and cards:
            return f"Today's card is {_display(cards[0])}."
        topic = QUESTION_CATEGORY_NAMES.get(category, QUESTION_CATEGORY_NAMES["general"])
        if flow is not None:
            return f"A {flow} flow for {topic}."
        if outcome_tone is not None:
            return f"A Celtic Cross on {topic} with a {outcome_tone} outcome."
        return f"A reading of {len(cards)} cards on {topic}."
