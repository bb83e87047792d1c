"""
Tests for the failure envelope.

INVARIANT: Every user-visible response passes through finalize_response(),
and internal failure detail never reaches the envelope.
"""

import pytest

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


class TestFinalizeResponse:
    def test_success_response_is_finalized(self) -> None:
        response = ApiResponse(outcome=OutcomeType.SUCCESS, data={"key": "value"})
        finalized = finalize_response(response)

        assert is_finalized(finalized)
        assert finalized.outcome == OutcomeType.SUCCESS

    def test_unfinalized_response_not_marked(self) -> None:
        """Responses that bypass the boundary are detectable."""
        response = ApiResponse(outcome=OutcomeType.SUCCESS, data={"key": "value"})

        assert not is_finalized(response)

    def test_fresh_response_never_inherits_the_mark(self) -> None:
        """A new response reusing a discarded one's memory is still unmarked."""
        for _ in range(50):
            finalize_response(ApiResponse(outcome=OutcomeType.SUCCESS, data={"key": "value"}))
            fresh = ApiResponse(outcome=OutcomeType.SUCCESS, data={"key": "value"})

            assert not is_finalized(fresh)

    def test_mark_is_not_serialized(self) -> None:
        response = finalize_response(ApiResponse(outcome=OutcomeType.SUCCESS, data={}))

        assert set(response.model_dump()) == {"outcome", "data", "failure"}

    def test_success_with_failure_raises(self) -> None:
        response = ApiResponse(
            outcome=OutcomeType.SUCCESS,
            data={"key": "value"},
            failure=FailureDetail(kind=FailureKind.UNKNOWN, message="oops"),
        )

        with pytest.raises(ValueError, match="must not have failure"):
            finalize_response(response)

    def test_failure_without_details_raises(self) -> None:
        response = ApiResponse(outcome=OutcomeType.KNOWN_FAILURE, failure=None)

        with pytest.raises(ValueError, match="must have failure details"):
            finalize_response(response)


class TestFactories:
    def test_create_success(self) -> None:
        response = create_success({"cards": []})

        assert is_finalized(response)
        assert response.data == {"cards": []}

    def test_refusal_gets_standard_suggestion(self) -> None:
        response = create_refusal(FailureKind.QUOTA_EXCEEDED, "Daily limit of 3 draws reached")

        assert is_finalized(response)
        assert response.outcome == OutcomeType.REFUSAL
        assert response.failure is not None
        assert response.failure.suggestion == STANDARD_SUGGESTIONS[OutcomeType.REFUSAL]

    def test_unknown_failure_detail_is_type_only(self) -> None:
        response = create_unknown_failure(ValueError("sensitive message that should not leak"))

        assert is_finalized(response)
        assert response.failure is not None
        assert response.failure.message == STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE]
        assert response.failure.detail == "ValueError"


class TestKnownErrors:
    def test_to_response_is_known_failure(self) -> None:
        error = KnownError(
            kind=FailureKind.INVALID_INPUT,
            message="Question is too long",
            status_code=422,
        )

        response = error.to_response()

        assert is_finalized(response)
        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind is FailureKind.INVALID_INPUT

    def test_persistence_error_hides_internal_detail(self) -> None:
        error = PersistenceUnavailableError("record_draw", "timeout")

        response = error.to_response()

        assert error.status_code == 503
        assert error.internal_detail == "record_draw: timeout"
        assert response.failure is not None
        assert "timeout" not in response.model_dump_json()

    def test_persistence_error_without_reason(self) -> None:
        assert PersistenceUnavailableError("load_profile").internal_detail == "load_profile"

    def test_deck_integrity_error_is_fatal(self) -> None:
        error = DeckIntegrityError("duplicate card 12")

        response = error.to_response()

        assert error.status_code == 500
        assert error.kind is FailureKind.DECK_INTEGRITY
        assert "duplicate" not in response.model_dump_json()

    def test_lookup_miss_is_not_a_known_error(self) -> None:
        miss = InterpretationLookupMiss(3, "reversed")

        assert isinstance(miss, LookupError)
        assert not isinstance(miss, KnownError)
        assert "card 3" in str(miss)
