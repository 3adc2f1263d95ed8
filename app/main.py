"""FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.routes import health, rewards
from config import Settings, get_settings
from db.connection import get_session_factory, init_database
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.sync import DatabaseLedgerSync

logger: logging.Logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> tuple[RewardLedgerService, DatabaseLedgerSync]:
    """Construct the process-wide ledger service and its database producer."""
    session_factory = get_session_factory()
    service: RewardLedgerService = RewardLedgerService(
        session_factory,
        consensus=settings.consensus,
        debug=settings.debug,
    )
    sync: DatabaseLedgerSync = DatabaseLedgerSync(
        service, session_factory, interval=settings.sync.interval
    )
    return service, sync


def create_app(service: RewardLedgerService | None = None) -> FastAPI:
    """App factory. Passing ``service`` skips database setup and the sync thread."""

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        if service is not None:
            app.state.ledger_service = service
            yield
            return

        settings: Settings = get_settings()
        logger.info("DB: %s", settings.database.db_info_for_logging())
        init_database()

        svc, sync = build_service(settings)
        app.state.ledger_service = svc
        if settings.sync.enabled:
            sync.start()
        else:
            logger.warning("Ledger sync disabled; queries will report NotSynced")
        try:
            yield
        finally:
            sync.stop()

    app: FastAPI = FastAPI(
        title="Reward Ledger Query Service",
        version="0.1.0",
        lifespan=_lifespan,
    )

    @app.exception_handler(Exception)
    async def _on_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc), "type": type(exc).__name__},
        )

    app.include_router(health.router)
    app.include_router(rewards.router)

    return app


app: FastAPI = create_app()


def start() -> None:
    """Entry point for rewardledger-api."""
    project_root: Path = Path(__file__).resolve().parent.parent
    os.chdir(project_root)

    for candidate in (project_root / ".env", project_root.parent / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)

    reload: bool = os.environ.get("REWARDS_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=reload,
    )
