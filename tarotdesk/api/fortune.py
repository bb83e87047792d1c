"""
Fortune API endpoints.

Draws, history, statistics, the cosmetic shuffle and the popular card board.
Every response body is an ApiResponse envelope.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tarotdesk.config import MAX_HISTORY_PAGE, MAX_QUESTION_LENGTH, settings
from tarotdesk.db.database import get_session
from tarotdesk.models.card import DrawnCard
from tarotdesk.models.failure import ApiResponse, FailureKind, create_refusal, create_success
from tarotdesk.models.reading import DrawRecord, FortuneStats, Interpretation, QuotaExceeded
from tarotdesk.models.spread import SpreadType
from tarotdesk.services.fortune import FortuneService, get_fortune_service

router = APIRouter(prefix="/fortune", tags=["fortune"])

FortuneServiceDep = Annotated[FortuneService, Depends(get_fortune_service)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]


class DrawRequest(BaseModel):
    """Request model for a draw."""

    type: SpreadType = Field(
        default=SpreadType.SINGLE,
        description="Spread layout: single, triple or celtic",
    )
    question: str | None = Field(
        default=None,
        max_length=MAX_QUESTION_LENGTH,
        description="Optional question that focuses the reading",
        examples=["How will my new job go?"],
    )


class DrawnCardResponse(BaseModel):
    """A drawn card in its position."""

    card_id: int
    name: str
    localized_name: str
    arcana: str
    suit: str | None = None
    position: str
    is_reversed: bool
    drawn_at: datetime


class DrawResponse(BaseModel):
    """Response model for a successful draw."""

    user_id: str
    type: str
    question: str | None = None
    cards: list[DrawnCardResponse]
    interpretation: Interpretation
    remaining_draws: int | None = Field(
        default=None,
        description="Draws left today; null means unlimited",
    )
    is_special_time: bool = False
    new_achievements: list[str] = Field(default_factory=list)


class HistoryEntryResponse(BaseModel):
    """One past draw."""

    type: str
    question: str | None = None
    cards: list[DrawnCardResponse]
    summary: str
    timestamp: datetime
    is_special_time: bool = False


class HistoryResponse(BaseModel):
    """Response model for draw history, newest first."""

    user_id: str
    records: list[HistoryEntryResponse] = Field(default_factory=list)
    count: int = Field(default=0, description="Records on this page")
    total_count: int = Field(default=0, description="Retained records for the user")
    has_more: bool = False


class StatsResponse(BaseModel):
    """Response model for user statistics."""

    user_id: str
    stats: FortuneStats
    today_draws: int = 0
    remaining_draws: int | None = None
    achievements: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    last_draw_at: datetime | None = None


class ShuffleResponse(BaseModel):
    """Response model for a shuffle acknowledgement."""

    user_id: str
    message: str
    timestamp: datetime


class PopularCardResponse(BaseModel):
    """A card on the popular board."""

    card_id: int
    name: str
    localized_name: str
    count: int
    reversed_count: int = 0


class PopularResponse(BaseModel):
    """Response model for the popular card board."""

    cards: list[PopularCardResponse] = Field(default_factory=list)


def _card_response(drawn: DrawnCard) -> DrawnCardResponse:
    return DrawnCardResponse(
        card_id=drawn.card.id,
        name=drawn.card.name,
        localized_name=drawn.card.localized_name,
        arcana=drawn.card.arcana.value,
        suit=drawn.card.suit.value if drawn.card.suit else None,
        position=drawn.position,
        is_reversed=drawn.is_reversed,
        drawn_at=drawn.drawn_at,
    )


def _history_entry(record: DrawRecord) -> HistoryEntryResponse:
    return HistoryEntryResponse(
        type=record.draw_type,
        question=record.question,
        cards=[_card_response(drawn) for drawn in record.cards],
        summary=record.interpretation.summary,
        timestamp=record.timestamp,
        is_special_time=record.is_special_time,
    )


def _quota_refusal(outcome: QuotaExceeded) -> JSONResponse:
    refusal = create_refusal(
        kind=FailureKind.QUOTA_EXCEEDED,
        message=f"You have used all {outcome.limit} draws for today.",
        detail=f"Draws today: {outcome.used_today}/{outcome.limit}",
        suggestion=f"Your draws reset at {outcome.resets_at.isoformat()}.",
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=refusal.model_dump(mode="json"),
    )


@router.get("/popular", response_model=ApiResponse[PopularResponse])
async def get_popular_cards(
    session: SessionDep,
    service: FortuneServiceDep,
    limit: Annotated[int, Query(ge=1, le=78)] = 10,
) -> ApiResponse[PopularResponse]:
    """Most drawn cards across all users."""
    popular = await service.get_popular_cards(session, limit)
    return create_success(
        PopularResponse(
            cards=[
                PopularCardResponse(
                    card_id=entry.card.id,
                    name=entry.card.name,
                    localized_name=entry.card.localized_name,
                    count=entry.count,
                    reversed_count=entry.reversed_count,
                )
                for entry in popular
            ]
        )
    )


@router.post(
    "/{user_id}/draw",
    response_model=ApiResponse[DrawResponse],
    responses={429: {"model": ApiResponse[Any]}, 503: {"model": ApiResponse[Any]}},
)
async def draw(
    user_id: str,
    request: DrawRequest,
    session: SessionDep,
    service: FortuneServiceDep,
) -> ApiResponse[DrawResponse] | JSONResponse:
    """
    Draw a spread.

    Returns a refusal with HTTP 429 once today's draws are used up.
    A draw that could not be saved is never returned (HTTP 503).
    """
    result = await service.draw_card(session, user_id, request.type, request.question)

    if isinstance(result, QuotaExceeded):
        return _quota_refusal(result)

    return create_success(
        DrawResponse(
            user_id=user_id,
            type=result.draw_type,
            question=result.question,
            cards=[_card_response(drawn) for drawn in result.cards],
            interpretation=result.interpretation,
            remaining_draws=result.remaining_draws,
            is_special_time=result.is_special_time,
            new_achievements=list(result.new_achievements),
        )
    )


@router.get("/{user_id}/history", response_model=ApiResponse[HistoryResponse])
async def get_history(
    user_id: str,
    session: SessionDep,
    service: FortuneServiceDep,
    limit: Annotated[int, Query(ge=1, le=MAX_HISTORY_PAGE)] = settings.history_default_limit,
) -> ApiResponse[HistoryResponse]:
    """A user's draws, newest first."""
    page = await service.get_history_page(session, user_id, limit)
    return create_success(
        HistoryResponse(
            user_id=user_id,
            records=[_history_entry(record) for record in page.records],
            count=len(page.records),
            total_count=page.total_count,
            has_more=page.has_more,
        )
    )


@router.get("/{user_id}/stats", response_model=ApiResponse[StatsResponse])
async def get_stats(
    user_id: str,
    session: SessionDep,
    service: FortuneServiceDep,
) -> ApiResponse[StatsResponse]:
    """
    A user's statistics.

    Users who never drew get empty statistics rather than a 404.
    """
    user_stats = await service.get_stats(session, user_id)
    return create_success(
        StatsResponse(
            user_id=user_stats.user_id,
            stats=user_stats.stats,
            today_draws=user_stats.today_draws,
            remaining_draws=user_stats.remaining_draws,
            achievements=user_stats.achievements,
            created_at=user_stats.created_at,
            last_draw_at=user_stats.last_draw_at,
        )
    )


@router.post("/{user_id}/shuffle", response_model=ApiResponse[ShuffleResponse])
async def shuffle(user_id: str, service: FortuneServiceDep) -> ApiResponse[ShuffleResponse]:
    """Acknowledge a shuffle. Draws always shuffle a fresh deck anyway."""
    ack = service.shuffle_deck(user_id)
    return create_success(
        ShuffleResponse(user_id=ack.user_id, message=ack.message, timestamp=ack.timestamp)
    )
