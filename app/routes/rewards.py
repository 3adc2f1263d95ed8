"""Reward ledger endpoints: thin routes, logic in the dispatcher."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import get_api_key, get_dispatcher
from app.schemas.common import ErrorResponse, RpcRequest
from app.schemas.rewards import (
    CheckResponse,
    CurrentRoundResponse,
    HistoryRoundResponse,
    PayoutResponse,
    SnapshotResponse,
    TermRewardResponse,
)
from rewardledger.services.dispatcher import QueryDispatcher
from rewardledger.services.schemas import QueryError, QueryResult

router: APIRouter = APIRouter(prefix="/api", tags=["rewards"])

_ERRORS: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

RETRY_AFTER_SECONDS: str = "1"


def error_response(error: QueryError) -> JSONResponse:
    headers: dict[str, str] = {}
    if error.kind.retryable:
        headers["Retry-After"] = RETRY_AFTER_SECONDS
    return JSONResponse(
        status_code=error.kind.http_status,
        content={"error": error.to_dict()},
        headers=headers,
    )


def _respond(result: QueryResult) -> object:
    if result.error is not None:
        return error_response(result.error)
    return result.value


@router.get("/rewards/current", response_model=CurrentRoundResponse, responses=_ERRORS)
def current_round(dispatcher: QueryDispatcher = Depends(get_dispatcher)) -> object:
    return _respond(dispatcher.dispatch("current"))


@router.get("/rewards/history", response_model=list[HistoryRoundResponse], responses=_ERRORS)
def round_history(dispatcher: QueryDispatcher = Depends(get_dispatcher)) -> object:
    return _respond(dispatcher.dispatch("history"))


@router.get(
    "/rewards/payouts/{round_number}",
    response_model=list[PayoutResponse],
    responses=_ERRORS,
)
def round_payouts(
    round_number: str, dispatcher: QueryDispatcher = Depends(get_dispatcher)
) -> object:
    return _respond(dispatcher.dispatch("payouts", [round_number]))


@router.get(
    "/rewards/snapshot/{round_number}",
    response_model=list[SnapshotResponse],
    responses=_ERRORS,
)
def round_snapshot(
    round_number: str, dispatcher: QueryDispatcher = Depends(get_dispatcher)
) -> object:
    return _respond(dispatcher.dispatch("snapshot", [round_number]))


@router.get("/rewards/check/{address}", response_model=CheckResponse, responses=_ERRORS)
def check_address(address: str, dispatcher: QueryDispatcher = Depends(get_dispatcher)) -> object:
    return _respond(dispatcher.dispatch("check", [address]))


@router.get("/termrewards", response_model=list[TermRewardResponse], responses=_ERRORS)
def term_rewards(dispatcher: QueryDispatcher = Depends(get_dispatcher)) -> object:
    return _respond(dispatcher.list_term_rewards())


@router.post("/rpc")
def rpc(
    body: RpcRequest,
    dispatcher: QueryDispatcher = Depends(get_dispatcher),
    _key: str = Depends(get_api_key),
) -> dict[str, object]:
    """JSON-RPC style entry: ``{"method": "smartrewards", "params": ["current"]}``."""
    result: QueryResult = dispatcher.call(body.method, body.params)
    if result.error is not None:
        return {"result": None, "error": result.error.to_dict()}
    return {"result": result.value, "error": None}
