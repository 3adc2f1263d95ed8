"""Enumeration types for the reward ledger."""

from enum import Enum, IntEnum


class TermTier(IntEnum):
    """Lock duration class of a term deposit, in years."""

    ONE_YEAR = 1
    TWO_YEARS = 2
    THREE_YEARS = 3


class LedgerStore(str, Enum):
    """Guarded stores of the reward ledger."""

    DATABASE = "database"
    ROUNDS = "rounds"
    ENTRIES = "entries"
    TERMS = "terms"


class QueryCommand(str, Enum):
    """Commands understood by the smartrewards dispatcher."""

    CURRENT = "current"
    HISTORY = "history"
    PAYOUTS = "payouts"
    SNAPSHOT = "snapshot"
    CHECK = "check"
