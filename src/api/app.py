"""FastAPI application factory for the rock paper scissors frame."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from src.api.render import render
from src.api.routes import router
from src.core.config import Settings, get_settings
from src.core.exceptions import VerificationError
from src.core.logging_config import configure_logging
from src.db.database import build_session_factory
from src.db.memory_repository import InMemoryMatchRepository
from src.db.repository import MatchRepository
from src.db.sql_repository import SQLMatchRepository
from src.services.session_service import SessionService
from src.services.sweeper import MatchSweeper
from src.services.verification import ActionVerifier, NeynarClient

logger = logging.getLogger(__name__)


def build_repository(settings: Settings) -> MatchRepository:
    if settings.match_backend == "sql":
        return SQLMatchRepository(build_session_factory(settings.database_url))
    return InMemoryMatchRepository()


def build_verifier(settings: Settings) -> ActionVerifier:
    if not settings.neynar_api_key:
        logger.warning("NEYNAR_API_KEY is not set: every callback will fail verification")
    client = NeynarClient(
        api_key=settings.neynar_api_key,
        base_url=settings.neynar_api_url,
        timeout=settings.verify_timeout_seconds,
    )
    return ActionVerifier(client)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(VerificationError)
    async def _verification_error(request: Request, exc: VerificationError) -> HTMLResponse:
        service: SessionService = request.app.state.service
        return HTMLResponse(content=render(service.error(str(exc))), status_code=401)

    @app.exception_handler(Exception)
    async def _generic(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        service: SessionService = request.app.state.service
        return HTMLResponse(content=render(service.error("Something went wrong")), status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[MatchRepository] = None,
    verifier: Optional[ActionVerifier] = None,
    service: Optional[SessionService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without arguments everything is built from the environment. Tests pass their own repository/verifier
    (or a complete service); the expiry sweeper only runs inside the lifespan context.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if service is None:
        service = SessionService(repository or build_repository(settings), settings)
    verifier = verifier or build_verifier(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        sweeper: MatchSweeper | None = None
        if settings.match_ttl_seconds > 0:
            sweeper = MatchSweeper(service, settings.sweep_interval_seconds)
            sweeper.start()
        app.state.sweeper = sweeper
        yield
        if sweeper is not None:
            sweeper.stop()

    app = FastAPI(title="Rock Paper Scissors Frame", lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service
    app.state.verifier = verifier

    _register_exception_handlers(app)
    app.include_router(router)

    logger.info(
        "Frame app ready at %s (match store: %s)", settings.base_url, settings.match_backend
    )
    return app
