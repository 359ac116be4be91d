"""FastAPI app factory: wiring, request logging, health endpoint and API routes."""
from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .api import router as api_router
from .api.errors import register_exception_handlers
from .api.middleware import RequestLogMiddleware
from .config import Settings, load_settings
from .domain.credentials import CredentialVerifier, StaticCredentialVerifier
from .domain.tokens import Clock, TokenAuthenticator, TokenIssuer, utcnow
from .logging_conf import get_logger, setup_logging
from .service.control_service import ControlService
from .storage.commands import CommandStore, InMemoryCommandStore, SqlCommandStore
from .storage.database import Database
from .storage.status import InMemoryStatusRepository, SqlStatusRepository, StatusRepository

# Configure logging before anything else.
setup_logging()
logger = get_logger("app")


def create_app(
    settings: Settings | None = None,
    *,
    commands: CommandStore | None = None,
    status: StatusRepository | None = None,
    verifier: CredentialVerifier | None = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Build the app with explicit collaborators.

    Stores default to SQLAlchemy-backed ones when settings.database_url is
    set and to in-memory ones otherwise.
    """
    settings = settings or load_settings()
    logging.getLogger().setLevel(settings.log_level)

    database: Database | None = None
    if settings.database_url and (commands is None or status is None):
        database = Database(settings.database_url)
        database.init_db()
    if commands is None:
        commands = SqlCommandStore(database) if database else InMemoryCommandStore()
    if status is None:
        status = SqlStatusRepository(database) if database else InMemoryStatusRepository()

    service = ControlService(
        verifier=verifier or StaticCredentialVerifier(settings.username, settings.password),
        issuer=TokenIssuer(
            settings.signing_key,
            ttl=timedelta(hours=settings.token_ttl_hours),
            clock=clock,
        ),
        authenticator=TokenAuthenticator(settings.signing_key, clock=clock),
        commands=commands,
        status=status,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "startup",
            extra={"event": "startup", "store": "sql" if database else "memory"},
        )
        yield
        logger.info("shutdown", extra={"event": "shutdown"})
        if database is not None:
            database.dispose()

    app = FastAPI(
        title="Robot Control API",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.add_middleware(RequestLogMiddleware)
    register_exception_handlers(app)

    @app.get("/health", summary="Liveness check")
    async def health() -> JSONResponse:
        logger.info("health.check", extra={"event": "health_check"})
        return JSONResponse(content="API is healthy")

    app.include_router(api_router)

    return app


def run() -> None:
    """Console entrypoint: serve `app` with uvicorn."""
    import uvicorn

    uvicorn.run(
        "robot_api.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


# ASGI entrypoint for uvicorn: `uvicorn robot_api.main:app --port 8000`
app = create_app()
