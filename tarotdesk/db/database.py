"""
Async engine and request-scoped sessions.

Checking out a pooled connection is bounded by the same timeout as the
storage calls of a draw, so an exhausted pool fails closed too.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tarotdesk.config import settings
from tarotdesk.models.db import Base


def _engine_options() -> dict[str, object]:
    options: dict[str, object] = {"echo": settings.debug, "pool_pre_ping": True}
    # SQLite uses a pool without checkout timeouts
    if not settings.database_url.startswith("sqlite"):
        options["pool_timeout"] = settings.persistence_timeout_seconds
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

# Draw results are read after commit, so nothing may expire
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Commits when the endpoint returns. A draw commits on its own before
    returning, so this final commit is a no-op for it.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the fortune tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
