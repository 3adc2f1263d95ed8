"""FastAPI dependencies: ledger service and auth."""

from fastapi import Depends, Header, HTTPException, Request

from config import get_settings
from rewardledger.services.dispatcher import QueryDispatcher
from rewardledger.services.ledger import RewardLedgerService


def get_ledger_service(request: Request) -> RewardLedgerService:
    """The process-wide service created in the app lifespan."""
    return request.app.state.ledger_service


def get_dispatcher(
    service: RewardLedgerService = Depends(get_ledger_service),
) -> QueryDispatcher:
    return QueryDispatcher(service)


def get_api_key(x_api_key: str = Header(default="")) -> str:
    """Validate API key on the RPC endpoint."""
    expected: str | None = get_settings().api_key
    if not expected:
        return ""  # auth disabled when no key configured
    if x_api_key != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return x_api_key
