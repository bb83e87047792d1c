"""
Card meanings keyed by stable card id.

Generic upright/reversed meanings cover every card. Question categories add
overrides for a handful of cards where a love, career, money or health
question deserves a more specific answer. Display names never act as keys.
"""

from dataclasses import dataclass

from tarotdesk.models.card import Court, Suit
from tarotdesk.models.failure import InterpretationLookupMiss
from tarotdesk.services.deck import minor_card_id

GENERIC_PLACEHOLDER = "This card carries a quiet, mysterious message. Sit with it for a while."


@dataclass(frozen=True, slots=True)
class CardMeaning:
    """Upright and reversed meaning of one card."""

    upright: str
    reversed: str

    def for_orientation(self, is_reversed: bool) -> str:
        return self.reversed if is_reversed else self.upright


_MAJOR_MEANINGS: tuple[CardMeaning, ...] = (
    CardMeaning(
        "A new journey begins. Step forward with an open heart; an unexpected adventure awaits.",
        "Beware of recklessness. This is a time for careful judgement before you leap.",
    ),
    CardMeaning(
        "You have every tool you need. Focus your will and turn ideas into reality.",
        "Talent may be wasted or misdirected. Reconnect with your true purpose.",
    ),
    CardMeaning(
        "Listen to your inner voice. Intuition will show you the right path.",
        "Balance feeling and logic. A hidden truth is waiting to be noticed.",
    ),
    CardMeaning(
        "Creative energy is abundant. Expect a rich harvest from what you nurture.",
        "Take care of yourself first. Watch for dependence or jealousy.",
    ),
    CardMeaning(
        "Structure and steady leadership bring success. Act with responsibility.",
        "Rigid thinking or a domineering attitude holds you back. Stay flexible.",
    ),
    CardMeaning(
        "Answers lie in tradition and trusted guidance. A mentor may appear.",
        "Step outside convention. Think for yourself and question old rules.",
    ),
    CardMeaning(
        "An important choice arrives. Love and harmony will guide you.",
        "An imbalance in a relationship or a hasty choice needs another look.",
    ),
    CardMeaning(
        "Determination carries you forward. Take the reins and claim the win.",
        "Scattered energy stalls progress. Regain control before pushing on.",
    ),
    CardMeaning(
        "Gentle courage overcomes the obstacle. Patience is your real strength.",
        "Self-doubt drains you. Rebuild confidence one small step at a time.",
    ),
    CardMeaning(
        "Step back and reflect. The answer is found in quiet solitude.",
        "Isolation has gone too far. Reach out and let others in.",
    ),
    CardMeaning(
        "The wheel turns in your favour. Ride the change with an open mind.",
        "A run of bad luck. Accept what you cannot control and prepare for the next turn.",
    ),
    CardMeaning(
        "Fairness prevails. Honest action brings a balanced result.",
        "Something is unfair or unresolved. Own your part and seek the truth.",
    ),
    CardMeaning(
        "Pause and see things from a new angle. Surrender brings insight.",
        "Stalling out of fear. Decide, and let go of what no longer serves you.",
    ),
    CardMeaning(
        "An ending clears space for transformation. Let the old chapter close.",
        "Resisting necessary change keeps you stuck. Loosen your grip.",
    ),
    CardMeaning(
        "Moderation and patience blend opposites into something whole.",
        "Excess or haste upsets the balance. Slow down and realign.",
    ),
    CardMeaning(
        "Notice what binds you: a habit, a desire, an attachment.",
        "Chains are loosening. You are ready to break free.",
    ),
    CardMeaning(
        "Sudden upheaval tears down what was unstable. Truth comes to light.",
        "You sense change coming and hold it back. Facing it now will hurt less.",
    ),
    CardMeaning(
        "Hope returns. Healing and inspiration light the way ahead.",
        "Discouragement clouds your view. Rekindle faith in yourself.",
    ),
    CardMeaning(
        "Things are not what they seem. Move carefully through uncertainty.",
        "Confusion is lifting. Fears lose their hold as the truth emerges.",
    ),
    CardMeaning(
        "Joy, success and vitality. Everything is illuminated.",
        "The light is dimmed for now. Reconnect with what makes you happy.",
    ),
    CardMeaning(
        "A calling to rise and begin again. Reflect and answer it.",
        "Harsh self-judgement holds you back. Forgive and move forward.",
    ),
    CardMeaning(
        "A cycle completes. Celebrate what you have achieved.",
        "Something is left unfinished. Tie up loose ends before moving on.",
    ),
)

# Indexed by rank - 1 (Ace .. King)
_MINOR_MEANINGS: dict[Suit, tuple[CardMeaning, ...]] = {
    Suit.WANDS: (
        CardMeaning("Creative energy and a new opportunity arrive. Start with passion.",
                    "Delays or a creative block slow your start."),
        CardMeaning("Time to plan and see the bigger picture.",
                    "Fear of the unknown or lack of planning keeps you in place."),
        CardMeaning("Your efforts begin to pay off; larger opportunities lie ahead.",
                    "Plans meet delays or unexpected obstacles."),
        CardMeaning("A moment to celebrate stability and shared joy.",
                    "Tension at home or a celebration postponed."),
        CardMeaning("Healthy competition sharpens you, though tempers may flare.",
                    "Avoiding conflict only lets it grow."),
        CardMeaning("Recognition and victory after hard work.",
                    "Success is delayed or ego gets in the way."),
        CardMeaning("Hold your ground; your position is worth defending.",
                    "You feel overwhelmed and tempted to give up."),
        CardMeaning("Events move fast. Act swiftly while momentum is with you.",
                    "Haste creates confusion, or things stall unexpectedly."),
        CardMeaning("You are nearly there. Persist a little longer.",
                    "Exhaustion and defensiveness; ask for help."),
        CardMeaning("You carry a heavy load. Delegate what you can.",
                    "Burnout looms. Put something down."),
        CardMeaning("Exciting news or a spark of curiosity invites exploration.",
                    "Scattered enthusiasm without direction."),
        CardMeaning("Bold, passionate action pushes things forward.",
                    "Impulsiveness leads to careless mistakes."),
        CardMeaning("Warm confidence draws people toward you.",
                    "Jealousy or insecurity dims your fire."),
        CardMeaning("Visionary leadership. Inspire others with your plan.",
                    "Impatience or overbearing control alienates allies."),
    ),
    Suit.CUPS: (
        CardMeaning("A new emotional beginning: love, compassion, creativity.",
                    "Emotions are blocked or held back."),
        CardMeaning("A deep connection or partnership forms.",
                    "Imbalance or misunderstanding between two people."),
        CardMeaning("Friendship and celebration lift your spirits.",
                    "Overindulgence or a rift within a group."),
        CardMeaning("Look again at what is being offered to you.",
                    "Stepping out of apathy toward new interest."),
        CardMeaning("Grief over what was lost; something still remains.",
                    "Acceptance arrives and you begin to move on."),
        CardMeaning("Sweet memories and innocence bring comfort.",
                    "Living in the past keeps you from the present."),
        CardMeaning("Many options, some of them illusions. Choose with care.",
                    "Clarity returns and the real choice becomes obvious."),
        CardMeaning("Walking away from what no longer fulfils you.",
                    "Fear of leaving keeps you in a stale situation."),
        CardMeaning("Wishes come true; enjoy your contentment.",
                    "Satisfaction feels hollow; look deeper for what you want."),
        CardMeaning("Lasting happiness and harmony at home.",
                    "Family tension or unmet expectations."),
        CardMeaning("A tender message or creative idea arrives.",
                    "Emotional immaturity or a blocked creative impulse."),
        CardMeaning("A romantic offer or following your heart.",
                    "Moodiness or unrealistic expectations."),
        CardMeaning("Compassion and emotional security support those around you.",
                    "Emotional dependence or neglecting your own needs."),
        CardMeaning("Calm emotional mastery and generous diplomacy.",
                    "Suppressed feelings or emotional manipulation."),
    ),
    Suit.SWORDS: (
        CardMeaning("A breakthrough of clarity. The truth cuts through confusion.",
                    "Clouded thinking or a misused idea."),
        CardMeaning("A difficult choice you have been avoiding.",
                    "Information overload; the stalemate breaks."),
        CardMeaning("Heartbreak or painful truth; healing starts by feeling it.",
                    "Recovery begins and old pain is released."),
        CardMeaning("Rest and recover before the next step.",
                    "Restlessness after too long a pause."),
        CardMeaning("A conflict won at a cost. Is it worth it?",
                    "Making amends after a fight."),
        CardMeaning("Moving on toward calmer waters.",
                    "Unfinished business keeps you from leaving."),
        CardMeaning("Act strategically, but beware of deception.",
                    "A secret comes out or a plan is revealed."),
        CardMeaning("You feel trapped, yet the limits are partly self-made.",
                    "New perspective frees you from restriction."),
        CardMeaning("Worry keeps you awake. Share your fears.",
                    "The worst is over; anxiety eases."),
        CardMeaning("A painful ending. From rock bottom, the only way is up.",
                    "Slow recovery and resisting an inevitable end."),
        CardMeaning("Curious and alert, you gather new ideas.",
                    "Gossip or talk without action."),
        CardMeaning("Charging ahead with ambition and speed.",
                    "Rushing in without a plan."),
        CardMeaning("Clear judgement and honest independence.",
                    "Coldness or bitterness clouds your view."),
        CardMeaning("Intellectual authority and truthful decisions.",
                    "Manipulation or abuse of power."),
    ),
    Suit.PENTACLES: (
        CardMeaning("A new financial or material opportunity appears.",
                    "A missed chance or poor planning with resources."),
        CardMeaning("Juggling priorities with flexibility.",
                    "Overcommitment throws you off balance."),
        CardMeaning("Teamwork and craft build something solid.",
                    "Poor collaboration or a lack of effort."),
        CardMeaning("Security through saving and control.",
                    "Holding on too tightly, or overspending."),
        CardMeaning("Hard times and feeling left out in the cold.",
                    "Recovery from financial loss begins."),
        CardMeaning("Generosity flows in both directions.",
                    "Strings attached to giving, or debts."),
        CardMeaning("Patience; your investment needs time to grow.",
                    "Impatience with slow results."),
        CardMeaning("Diligent practice builds mastery.",
                    "Perfectionism or a lack of focus."),
        CardMeaning("Self-sufficiency and well-earned comfort.",
                    "Overworking or financial setbacks."),
        CardMeaning("Lasting wealth, legacy and family security.",
                    "Family disputes over money or inheritance."),
        CardMeaning("A new study or opportunity to build skill.",
                    "Lack of progress or procrastination."),
        CardMeaning("Steady, reliable hard work pays off.",
                    "Boredom or feeling stuck in a routine."),
        CardMeaning("Practical care creates comfort for yourself and others.",
                    "Self-neglect while caring for everyone else."),
        CardMeaning("Abundance and security through discipline.",
                    "Greed or an obsession with status."),
    ),
}


def _build_meanings() -> dict[int, CardMeaning]:
    meanings: dict[int, CardMeaning] = dict(enumerate(_MAJOR_MEANINGS))
    for suit, entries in _MINOR_MEANINGS.items():
        for offset, meaning in enumerate(entries):
            meanings[minor_card_id(suit, offset + 1)] = meaning
    return meanings


CARD_MEANINGS: dict[int, CardMeaning] = _build_meanings()


# =============================================================================
# QUESTION CATEGORIES
# =============================================================================

QUESTION_CATEGORY_NAMES: dict[str, str] = {
    "love": "love and relationships",
    "career": "work and career",
    "money": "money and finances",
    "health": "health and wellbeing",
    "general": "your path in general",
}

# Checked in order; the first category with a matching keyword wins
QUESTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "love": (
        "love", "relationship", "crush", "partner", "dating", "breakup", "marriage",
        "사랑", "연애", "관계", "짝사랑", "이별", "재회", "결혼",
    ),
    "career": (
        "job", "work", "career", "promotion", "boss", "business", "interview",
        "직장", "일", "승진", "이직", "사업", "경력",
    ),
    "money": (
        "money", "finance", "invest", "debt", "income", "salary", "savings",
        "돈", "재산", "투자", "부채", "수입", "지출",
    ),
    "health": (
        "health", "illness", "sick", "recovery", "exercise", "diet", "sleep",
        "건강", "병", "치료", "회복", "운동", "다이어트",
    ),
}

# Category-specific (card id -> meaning) overrides
CATEGORY_OVERRIDES: dict[str, dict[int, CardMeaning]] = {
    "love": {
        0: CardMeaning(
            "A new love may begin. Approach it with a pure heart.",
            "Do not rush to conclusions. Take time to know the other person.",
        ),
        6: CardMeaning(
            "A fated meeting or a decisive choice in love. Follow your true feelings.",
            "Resolve the imbalance or clash of values in the relationship.",
        ),
        17: CardMeaning(
            "A hopeful future together. Trust your partner and move forward.",
            "Recover from disappointment and rebuild your self-worth first.",
        ),
        minor_card_id(Suit.CUPS, 2): CardMeaning(
            "A mutual bond deepens into real partnership.",
            "Mixed signals; talk openly before assuming the worst.",
        ),
    },
    "career": {
        4: CardMeaning(
            "Time to lead. A structured plan gets you to your goal.",
            "Watch for rigid office culture or friction with an authoritarian boss.",
        ),
        minor_card_id(Suit.PENTACLES, 8): CardMeaning(
            "A good period to deepen expertise. Steady effort bears fruit.",
            "Beware burnout. Work and life need a better balance.",
        ),
    },
    "money": {
        minor_card_id(Suit.PENTACLES, 1): CardMeaning(
            "A new source of income or investment chance appears. Review it carefully.",
            "Expected gains may be delayed. Keep a close eye on your budget.",
        ),
        minor_card_id(Suit.PENTACLES, 10): CardMeaning(
            "Long-term financial stability is within reach, shared with family.",
            "Beware of family disputes over property or inheritance.",
        ),
    },
    "health": {
        8: CardMeaning(
            "Inner strength supports recovery. A positive mindset matters.",
            "Low stamina or weakened immunity. Rest properly.",
        ),
        19: CardMeaning(
            "Energy returns and health improves. Outdoor activity helps.",
            "Beware burnout from overwork and stress.",
        ),
    },
    "general": {},
}


def get_meaning(card_id: int, is_reversed: bool, category: str = "general") -> str:
    """
    Resolve the meaning of a card for a question category.

    A category override wins over the generic meaning.

    Raises:
        InterpretationLookupMiss: If no meaning exists for this card
    """
    override = CATEGORY_OVERRIDES.get(category, {}).get(card_id)
    if override is not None:
        return override.for_orientation(is_reversed)

    meaning = CARD_MEANINGS.get(card_id)
    text = meaning.for_orientation(is_reversed) if meaning is not None else ""
    if not text:
        raise InterpretationLookupMiss(card_id, "reversed" if is_reversed else "upright")
    return text


# =============================================================================
# DESCRIPTIVE TEXT
# =============================================================================

ARCANA_DESCRIPTIONS: dict[str, str] = {
    "major": "A major arcana card speaks of a turning point and a deeper life lesson.",
    "minor": "A minor arcana card speaks of everyday matters and practical advice.",
}

SUIT_DESCRIPTIONS: dict[Suit, str] = {
    Suit.WANDS: "the energy of passion, creativity, action and inspiration",
    Suit.CUPS: "the energy of emotion, love, intuition and relationships",
    Suit.SWORDS: "the energy of thought, communication, conflict and truth",
    Suit.PENTACLES: "the energy of material matters, health, work and practicality",
}

NUMBER_ENERGIES: dict[int, str] = {
    1: "new beginnings and pure potential",
    2: "balance, partnership and choice",
    3: "creation, growth and cooperation",
    4: "stability, structure and foundations",
    5: "change, challenge and instability",
    6: "harmony, responsibility and achievement",
    7: "reflection, assessment and patience",
    8: "mastery, power and movement",
    9: "near completion, attainment and solitude",
    10: "completion, the end of a cycle and a fresh start",
}

COURT_PERSONALITIES: dict[Court, str] = {
    Court.PAGE: "a curious, eager beginner and a bearer of news",
    Court.KNIGHT: "an active, adventurous seeker who drives change",
    Court.QUEEN: "a mature, intuitive nurturer with emotional wisdom",
    Court.KING: "an experienced, authoritative leader and master of the craft",
}
