"""Shared dataclasses for reward ledger services."""

from rewardledger.services.schemas.ledger import (
    LedgerEntry,
    PayoutSchedule,
    ResultEntry,
    Round,
    TermEntry,
)
from rewardledger.services.schemas.results import QueryError, QueryResult

__all__ = [
    # Ledger schemas
    "LedgerEntry",
    "PayoutSchedule",
    "ResultEntry",
    "Round",
    "TermEntry",
    # Result schemas
    "QueryError",
    "QueryResult",
]
