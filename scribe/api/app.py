"""
FastAPI application for the scribe service.

Wires settings, storage, the token codec and the content service onto
app.state, and maps the error taxonomy to HTTP responses.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scribe import __version__
from scribe.api.routes import router as content_router
from scribe.auth import auth_router
from scribe.auth.jwt import SigningConfig, TokenCodec
from scribe.config import Settings, get_settings
from scribe.core.errors import ScribeError
from scribe.services.content import ContentService
from scribe.storage import StorageProvider, create_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Scribe API starting in {settings.environment} mode")

    yield

    logger.info("Scribe API shutting down")


# =============================================================================
# Error Handlers
# =============================================================================


async def handle_scribe_error(request: Request, exc: ScribeError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to get_settings()
        storage: Defaults to whatever settings.database_url selects
    """
    settings = settings or get_settings()
    settings.check()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Scribe API",
        description="Blog posts and comments behind token authentication",
        version=__version__,
        lifespan=lifespan,
    )

    storage = storage or create_storage(settings)
    app.state.settings = settings
    app.state.storage = storage
    app.state.codec = TokenCodec(SigningConfig.from_settings(settings))
    app.state.content_service = ContentService(storage.content)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request and enforce the per-request deadline."""
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                call_next(request),
                timeout=settings.request_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{request.method} {request.url.path} exceeded "
                f"{settings.request_timeout_seconds}s deadline"
            )
            response = JSONResponse(status_code=504, content={"detail": "Request timed out"})

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response

    app.add_exception_handler(ScribeError, handle_scribe_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router)
    app.include_router(content_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app
