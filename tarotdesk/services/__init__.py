"""
TarotDesk services.

Storage-free building blocks of a reading. HistoryStore and FortuneService
depend on the database layer and are imported from their own modules.
"""

from tarotdesk.services.deck import (
    DECK_SIZE,
    TAROT_DECK,
    find_card_by_name,
    get_card,
    get_full_deck,
    minor_card_id,
)
from tarotdesk.services.drawer import Drawer, ReversalPolicy
from tarotdesk.services.interpretation import InterpretationEngine, detect_question_category
from tarotdesk.services.meanings import CARD_MEANINGS, CardMeaning, get_meaning
from tarotdesk.services.quota import QuotaDecision, QuotaGuard, count_today, today_window
from tarotdesk.services.spreads import get_layout, is_supported_spread

__all__ = [
    # Deck registry
    "DECK_SIZE",
    "TAROT_DECK",
    "find_card_by_name",
    "get_card",
    "get_full_deck",
    "minor_card_id",
    # Meanings
    "CARD_MEANINGS",
    "CardMeaning",
    "get_meaning",
    # Spreads
    "get_layout",
    "is_supported_spread",
    # Drawing
    "Drawer",
    "ReversalPolicy",
    # Quota
    "QuotaDecision",
    "QuotaGuard",
    "count_today",
    "today_window",
    # Interpretation
    "InterpretationEngine",
    "detect_question_category",
]
