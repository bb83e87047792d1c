"""
Failure Envelope: Unified Response Classification.

Every fortune endpoint communicates its outcome through the same envelope,
so the chat layer never has to guess whether a draw happened.

INVARIANT: No raw 500 errors may reach the chat layer.

Response types:
- Success: The operation completed
- Refusal: The system chose not to proceed (quota reached)
- KnownFailure: The system knows why it failed (storage unavailable)
- UnknownFailure: The system does not know why it failed

AUTHORITY BOUNDARY:
All user-visible responses MUST pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Expected refusals
    QUOTA_EXCEEDED = "quota_exceeded"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Internal errors
    DECK_INTEGRITY = "deck_integrity"
    INVARIANT_VIOLATION = "invariant_violation"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    Every response is classified into one of four outcome types.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set only by finalize_response
    _finalized: bool = PrivateAttr(default=False)


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    `message`, `detail` and `suggestion` are user-facing. Anything that must
    stay internal goes into `internal_detail`, which is logged but never
    rendered.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
        internal_detail: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        self.internal_detail = internal_detail
        super().__init__(message)

    def to_response(self) -> "ApiResponse[Any]":
        """Convert to a finalized ApiResponse."""
        response: ApiResponse[Any] = ApiResponse(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            ),
        )
        return finalize_response(response)


class DeckIntegrityError(KnownError):
    """
    Internal invariant violation: wrong deck size, duplicate card, or a
    layout that needs more cards than the deck holds.

    Fatal for the request. The user only ever sees the generic message.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            kind=FailureKind.DECK_INTEGRITY,
            message="The cards could not be prepared. Please try again later.",
            suggestion="If this persists, please report the issue.",
            status_code=500,
            internal_detail=reason,
        )


class PersistenceUnavailableError(KnownError):
    """
    Storage timed out or the connection was lost.

    A draw that hits this error is never presented as successful, because an
    unrecorded draw would silently bypass the daily quota.
    """

    def __init__(self, operation: str, reason: str | None = None):
        self.operation = operation
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message="Your reading could not be saved, so no cards were drawn.",
            suggestion="Please try again in a moment.",
            status_code=503,
            internal_detail=f"{operation}: {reason}" if reason else operation,
        )


class InterpretationLookupMiss(LookupError):
    """
    A meaning record was missing for a drawn card.

    Recoverable: the interpretation degrades to a generic message.
    """

    def __init__(self, card_id: int, orientation: str):
        self.card_id = card_id
        self.orientation = orientation
        super().__init__(f"No {orientation} meaning for card {card_id}")


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

# Standard messages, fixed and predictable.

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "The cards will not be drawn for this request.",
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try again in a moment."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "Please wait until the limit resets.",
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed. Only the exception type is exposed.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=type(exception).__name__,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_refusal(
    kind: FailureKind,
    message: str,
    detail: str | None = None,
    suggestion: str | None = None,
) -> ApiResponse[Any]:
    """
    Create a refusal response.

    Use when the system chose not to proceed, e.g. the daily quota is used up.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.REFUSAL,
        failure=FailureDetail(
            kind=kind,
            message=message,
            detail=detail,
            suggestion=suggestion or STANDARD_SUGGESTIONS[OutcomeType.REFUSAL],
        ),
    )

    return finalize_response(response)


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
