"""Common/shared schemas."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    kind: str
    code: int
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class RpcRequest(BaseModel):
    method: str
    params: list[str] = []


class HealthResponse(BaseModel):
    status: str


class LedgerStatusResponse(BaseModel):
    synced: bool
    current_round: int
    tip_height: int
    sealed_rounds: int
    entries: int
    term_entries: int
    busy: list[str]
