"""Result type returned by the query dispatcher."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from rewardledger.services.errors import ErrorKind, RewardLedgerError

T = TypeVar("T")


@dataclass(frozen=True)
class QueryError:
    kind: ErrorKind
    message: str

    @property
    def code(self) -> int:
        return self.kind.rpc_code

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind.value, "code": self.code, "message": self.message}


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Either a value or a typed error, never both."""

    value: T | None = None
    error: QueryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "QueryResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "QueryResult[T]":
        return cls(error=QueryError(kind, message))

    @classmethod
    def from_exception(cls, exc: RewardLedgerError) -> "QueryResult[T]":
        return cls.failure(exc.kind, exc.message)
