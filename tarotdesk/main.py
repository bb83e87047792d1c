import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tarotdesk.api import fortune_router, health_router
from tarotdesk.config import settings
from tarotdesk.db.database import init_db
from tarotdesk.models.failure import KnownError, create_unknown_failure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("tarotdesk"),
    lifespan=lifespan,
)

app.include_router(fortune_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Render a known failure through the envelope; internal detail is only logged."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "KNOWN_ERROR",
        extra={
            "path": request.url.path,
            "kind": exc.kind.value,
            "status_code": exc.status_code,
            "internal_detail": exc.internal_detail,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last line of defence: no raw 500 reaches the caller."""
    logger.exception("UNKNOWN_ERROR", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )
