"""Health endpoints."""

import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_ledger_service
from app.schemas.common import HealthResponse, LedgerStatusResponse
from rewardledger.services.ledger import RewardLedgerService

logger: logging.Logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ledger", response_model=LedgerStatusResponse)
def ledger_status(service: RewardLedgerService = Depends(get_ledger_service)) -> dict[str, object]:
    """Diagnostic view; answers even while unsynced or busy."""
    status: dict[str, object] = service.status()
    if not status["synced"]:
        logger.warning("Ledger not synced: current round %s", status["current_round"])
    return status
