from tarotdesk.models.card import Arcana, Card, Court, DrawnCard, Suit
from tarotdesk.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    DeckIntegrityError,
    FailureDetail,
    FailureKind,
    InterpretationLookupMiss,
    KnownError,
    OutcomeType,
    PersistenceUnavailableError,
    create_refusal,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from tarotdesk.models.reading import (
    AreaReading,
    CardReading,
    DrawRecord,
    DrawResult,
    FortuneStats,
    HistoryPage,
    Interpretation,
    PopularCard,
    QuotaExceeded,
    ShuffleAck,
    SpecialPattern,
    SpreadAnalysis,
    UserStats,
)
from tarotdesk.models.spread import PositionSpec, SpreadLayout, SpreadType

__all__ = [
    "ApiResponse",
    "Arcana",
    "AreaReading",
    "Card",
    "CardReading",
    "Court",
    "DeckIntegrityError",
    "DrawRecord",
    "DrawResult",
    "DrawnCard",
    "FailureDetail",
    "FailureKind",
    "FortuneStats",
    "HistoryPage",
    "Interpretation",
    "InterpretationLookupMiss",
    "KnownError",
    "OutcomeType",
    "PersistenceUnavailableError",
    "PopularCard",
    "PositionSpec",
    "QuotaExceeded",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ShuffleAck",
    "SpecialPattern",
    "SpreadAnalysis",
    "SpreadLayout",
    "SpreadType",
    "Suit",
    "UserStats",
    "create_refusal",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
