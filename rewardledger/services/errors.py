"""Shared exception hierarchy for reward ledger queries.

Every failure a query can hit maps to exactly one ``ErrorKind``. Stores and
guards raise the typed exceptions below; the dispatcher converts them into a
failed ``QueryResult`` before anything leaves the service layer.
"""

from enum import Enum

# JSON-RPC compatible codes
RPC_INVALID_PARAMETER = -8
RPC_DATABASE_ERROR = -20
RPC_METHOD_NOT_FOUND = -32601


class ErrorKind(str, Enum):
    NOT_SYNCED = "NotSynced"
    BUSY = "Busy"
    NO_ACTIVE_ROUND = "NoActiveRound"
    NO_HISTORY = "NoHistory"
    INVALID_PARAMETER = "InvalidParameter"
    INVALID_ADDRESS = "InvalidAddress"
    ADDRESS_NOT_FOUND = "AddressNotFound"
    STORAGE_UNAVAILABLE = "StorageUnavailable"
    UNKNOWN_COMMAND = "UnknownCommand"

    @property
    def rpc_code(self) -> int:
        return _RPC_CODES[self]

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.BUSY, ErrorKind.NOT_SYNCED)


_RPC_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_SYNCED: RPC_DATABASE_ERROR,
    ErrorKind.BUSY: RPC_DATABASE_ERROR,
    ErrorKind.NO_ACTIVE_ROUND: RPC_DATABASE_ERROR,
    ErrorKind.NO_HISTORY: RPC_DATABASE_ERROR,
    ErrorKind.INVALID_PARAMETER: RPC_INVALID_PARAMETER,
    ErrorKind.INVALID_ADDRESS: RPC_INVALID_PARAMETER,
    ErrorKind.ADDRESS_NOT_FOUND: RPC_DATABASE_ERROR,
    ErrorKind.STORAGE_UNAVAILABLE: RPC_DATABASE_ERROR,
    ErrorKind.UNKNOWN_COMMAND: RPC_METHOD_NOT_FOUND,
}

_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_SYNCED: 503,
    ErrorKind.BUSY: 503,
    ErrorKind.NO_ACTIVE_ROUND: 404,
    ErrorKind.NO_HISTORY: 404,
    ErrorKind.INVALID_PARAMETER: 400,
    ErrorKind.INVALID_ADDRESS: 400,
    ErrorKind.ADDRESS_NOT_FOUND: 404,
    ErrorKind.STORAGE_UNAVAILABLE: 500,
    ErrorKind.UNKNOWN_COMMAND: 400,
}


class RewardLedgerError(Exception):
    """Base exception for reward ledger query errors."""

    kind: ErrorKind = ErrorKind.STORAGE_UNAVAILABLE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message


# ── Ledger state ──────────────────────────────────────────────────────────────


class NotSyncedError(RewardLedgerError):
    """Ledger is not caught up with the network."""

    kind = ErrorKind.NOT_SYNCED


class BusyError(RewardLedgerError):
    """A store guard is held elsewhere; retry later."""

    kind = ErrorKind.BUSY


class NoActiveRoundError(RewardLedgerError):
    kind = ErrorKind.NO_ACTIVE_ROUND


class NoHistoryError(RewardLedgerError):
    kind = ErrorKind.NO_HISTORY


class StorageUnavailableError(RewardLedgerError):
    """Persisted round data could not be fetched."""

    kind = ErrorKind.STORAGE_UNAVAILABLE


# ── Arguments ─────────────────────────────────────────────────────────────────


class InvalidParameterError(RewardLedgerError):
    kind = ErrorKind.INVALID_PARAMETER


class InvalidRoundError(InvalidParameterError):
    """Round number outside [1, current - 1]."""


class InvalidAddressError(RewardLedgerError):
    kind = ErrorKind.INVALID_ADDRESS


class AddressNotFoundError(RewardLedgerError):
    kind = ErrorKind.ADDRESS_NOT_FOUND


class UnknownCommandError(RewardLedgerError):
    kind = ErrorKind.UNKNOWN_COMMAND
