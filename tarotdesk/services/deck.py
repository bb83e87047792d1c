"""
Deck Registry: the static 78-card catalog.

The canonical deck is an immutable tuple of frozen Card values built once at
import time. Callers that need to shuffle get their own list copy from
`get_full_deck()`; nothing in this module is ever mutated.

ID SCHEME:
- Major arcana: 0-21 in canonical order
- Minor arcana: 22 + suit_index * 14 + (rank - 1)
  (suits ordered wands, cups, swords, pentacles; Ace=1 .. Ten=10,
  Page=11, Knight=12, Queen=13, King=14)

Ids are therefore contiguous, and `get_card()` is a tuple index.
"""

from tarotdesk.models.card import Arcana, Card, Court, Suit

DECK_SIZE = 78
MAJOR_COUNT = 22
CARDS_PER_SUIT = 14

# (name, korean name, keywords)
_MAJOR_ARCANA: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("The Fool", "바보", ("new beginnings", "innocence", "adventure", "free spirit")),
    ("The Magician", "마법사", ("willpower", "creation", "focus", "manifestation")),
    ("The High Priestess", "여교황", ("intuition", "inner wisdom", "mystery", "subconscious")),
    ("The Empress", "황후", ("abundance", "creativity", "nurturing", "nature")),
    ("The Emperor", "황제", ("authority", "stability", "structure", "leadership")),
    ("The Hierophant", "교황", ("tradition", "guidance", "learning", "belief")),
    ("The Lovers", "연인", ("love", "choice", "harmony", "relationship")),
    ("The Chariot", "전차", ("determination", "victory", "control", "momentum")),
    ("Strength", "힘", ("courage", "patience", "inner strength", "compassion")),
    ("The Hermit", "은둔자", ("introspection", "solitude", "guidance", "search")),
    ("Wheel of Fortune", "운명의 수레바퀴", ("cycles", "fate", "turning point", "luck")),
    ("Justice", "정의", ("fairness", "truth", "cause and effect", "balance")),
    ("The Hanged Man", "매달린 사람", ("surrender", "pause", "new perspective", "letting go")),
    ("Death", "죽음", ("endings", "transformation", "transition", "release")),
    ("Temperance", "절제", ("moderation", "balance", "patience", "purpose")),
    ("The Devil", "악마", ("attachment", "temptation", "bondage", "materialism")),
    ("The Tower", "탑", ("sudden change", "upheaval", "revelation", "awakening")),
    ("The Star", "별", ("hope", "renewal", "inspiration", "serenity")),
    ("The Moon", "달", ("illusion", "fear", "dreams", "the unconscious")),
    ("The Sun", "태양", ("joy", "success", "vitality", "clarity")),
    ("Judgement", "심판", ("rebirth", "calling", "reckoning", "absolution")),
    ("The World", "세계", ("completion", "fulfilment", "integration", "travel")),
)

_SUIT_KOREAN: dict[Suit, str] = {
    Suit.WANDS: "완드",
    Suit.CUPS: "컵",
    Suit.SWORDS: "검",
    Suit.PENTACLES: "펜타클",
}

_RANK_NAMES: dict[int, str] = {
    1: "Ace",
    2: "Two",
    3: "Three",
    4: "Four",
    5: "Five",
    6: "Six",
    7: "Seven",
    8: "Eight",
    9: "Nine",
    10: "Ten",
}

_COURTS: tuple[tuple[Court, str], ...] = (
    (Court.PAGE, "페이지"),
    (Court.KNIGHT, "나이트"),
    (Court.QUEEN, "퀸"),
    (Court.KING, "킹"),
)

# Keywords per suit, indexed by rank - 1 (Ace .. King)
_MINOR_KEYWORDS: dict[Suit, tuple[tuple[str, ...], ...]] = {
    Suit.WANDS: (
        ("inspiration", "new venture", "potential"),
        ("planning", "decisions", "future vision"),
        ("expansion", "foresight", "progress"),
        ("celebration", "home", "harmony"),
        ("competition", "conflict", "tension"),
        ("victory", "recognition", "confidence"),
        ("defence", "perseverance", "standing firm"),
        ("speed", "movement", "swift action"),
        ("resilience", "persistence", "last stand"),
        ("burden", "responsibility", "overload"),
        ("enthusiasm", "exploration", "news"),
        ("energy", "passion", "impulsiveness"),
        ("warmth", "determination", "vibrancy"),
        ("vision", "leadership", "boldness"),
    ),
    Suit.CUPS: (
        ("new love", "emotional opening", "compassion"),
        ("partnership", "mutual attraction", "union"),
        ("friendship", "community", "celebration"),
        ("apathy", "contemplation", "reevaluation"),
        ("loss", "grief", "regret"),
        ("nostalgia", "childhood", "innocence"),
        ("choices", "illusion", "wishful thinking"),
        ("walking away", "disillusion", "seeking meaning"),
        ("contentment", "wishes fulfilled", "satisfaction"),
        ("harmony", "family", "lasting happiness"),
        ("creative message", "intuition", "curiosity"),
        ("romance", "charm", "following the heart"),
        ("empathy", "emotional security", "calm"),
        ("emotional balance", "diplomacy", "generosity"),
    ),
    Suit.SWORDS: (
        ("clarity", "breakthrough", "truth"),
        ("stalemate", "difficult choice", "avoidance"),
        ("heartbreak", "sorrow", "painful truth"),
        ("rest", "recovery", "contemplation"),
        ("conflict", "defeat", "winning at a cost"),
        ("transition", "moving on", "calmer waters"),
        ("strategy", "deception", "stealth"),
        ("restriction", "self-imposed limits", "feeling trapped"),
        ("anxiety", "worry", "sleeplessness"),
        ("painful ending", "rock bottom", "release"),
        ("curiosity", "vigilance", "new ideas"),
        ("ambition", "haste", "directness"),
        ("independence", "clear judgement", "honesty"),
        ("intellect", "authority", "truthfulness"),
    ),
    Suit.PENTACLES: (
        ("opportunity", "prosperity", "manifestation"),
        ("balance", "adaptability", "priorities"),
        ("teamwork", "craft", "collaboration"),
        ("security", "saving", "control"),
        ("hardship", "insecurity", "isolation"),
        ("generosity", "sharing", "charity"),
        ("patience", "long-term view", "investment"),
        ("diligence", "skill", "mastery"),
        ("self-sufficiency", "luxury", "reward"),
        ("legacy", "family wealth", "long-term success"),
        ("ambition", "study", "new opportunity"),
        ("routine", "hard work", "reliability"),
        ("practicality", "nurturing", "comfort"),
        ("abundance", "security", "discipline"),
    ),
}

SUIT_ORDER: tuple[Suit, ...] = (Suit.WANDS, Suit.CUPS, Suit.SWORDS, Suit.PENTACLES)


def minor_card_id(suit: Suit, rank: int) -> int:
    """
    Derive the id of a minor arcana card.

    Args:
        suit: The card's suit
        rank: Ace=1 .. Ten=10, Page=11, Knight=12, Queen=13, King=14

    Raises:
        ValueError: If rank is outside 1-14
    """
    if not 1 <= rank <= CARDS_PER_SUIT:
        raise ValueError(f"Minor arcana rank must be 1-{CARDS_PER_SUIT}, got {rank}")
    return MAJOR_COUNT + SUIT_ORDER.index(suit) * CARDS_PER_SUIT + (rank - 1)


def _build_deck() -> tuple[Card, ...]:
    cards: list[Card] = [
        Card(
            id=number,
            name=name,
            localized_name=korean,
            arcana=Arcana.MAJOR,
            suit=None,
            rank=number,
            keywords=keywords,
        )
        for number, (name, korean, keywords) in enumerate(_MAJOR_ARCANA)
    ]

    for suit in SUIT_ORDER:
        suit_title = suit.value.capitalize()
        suit_korean = _SUIT_KOREAN[suit]
        keywords = _MINOR_KEYWORDS[suit]

        for rank in range(1, 11):
            rank_korean = "에이스" if rank == 1 else str(rank)
            cards.append(
                Card(
                    id=minor_card_id(suit, rank),
                    name=f"{_RANK_NAMES[rank]} of {suit_title}",
                    localized_name=f"{suit_korean}의 {rank_korean}",
                    arcana=Arcana.MINOR,
                    suit=suit,
                    rank=rank,
                    keywords=keywords[rank - 1],
                )
            )

        for offset, (court, court_korean) in enumerate(_COURTS):
            rank = 11 + offset
            cards.append(
                Card(
                    id=minor_card_id(suit, rank),
                    name=f"{court.value.capitalize()} of {suit_title}",
                    localized_name=f"{suit_korean}의 {court_korean}",
                    arcana=Arcana.MINOR,
                    suit=suit,
                    rank=rank,
                    court=court,
                    keywords=keywords[rank - 1],
                )
            )

    return tuple(cards)


# Canonical catalog, ordered by id
TAROT_DECK: tuple[Card, ...] = _build_deck()

_CARDS_BY_NAME: dict[str, Card] = {card.name.lower(): card for card in TAROT_DECK}


def get_full_deck() -> list[Card]:
    """
    Get a fresh snapshot of the full deck.

    Returns a new list on every call so callers can shuffle and pop freely.
    The Card values themselves are frozen.
    """
    return list(TAROT_DECK)


def get_card(card_id: int) -> Card:
    """
    Look up a card by its stable id.

    Raises:
        KeyError: If no card has this id
    """
    if not 0 <= card_id < len(TAROT_DECK):
        raise KeyError(card_id)
    return TAROT_DECK[card_id]


def find_card_by_name(name: str) -> Card | None:
    """Case-insensitive lookup by canonical name. For display and tests only."""
    return _CARDS_BY_NAME.get(name.strip().lower())
