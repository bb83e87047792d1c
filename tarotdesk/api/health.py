"""
Health check endpoints.

Liveness reports the process and deck; readiness checks the database.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tarotdesk.db.database import get_session
from tarotdesk.services.deck import DECK_SIZE, TAROT_DECK

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    deck_size: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running and the deck is intact.
    Does not check the database.
    """
    deck_ok = len(TAROT_DECK) == DECK_SIZE
    return HealthResponse(status="healthy" if deck_ok else "degraded", deck_size=len(TAROT_DECK))


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database is unavailable; draws would fail closed.
    """
    try:
        await session.execute(text("SELECT 1"))
        return HealthResponse(status="ready", database="connected")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("READINESS_CHECK_FAILED", extra={"error": str(e)})
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")
