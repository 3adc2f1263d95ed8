"""Eligibility evaluation with round-versioned rules.

Which rule applies is decided by the round being evaluated, not by the entry:
rounds before the configured upgrade round keep the legacy verdict even though
stored entries look the same on both sides of the boundary.
"""

from dataclasses import dataclass
from typing import Protocol

from rewardledger.services.schemas import LedgerEntry


class EligibilityRule(Protocol):
    name: str

    def is_eligible(self, entry: LedgerEntry) -> bool: ...


@dataclass(frozen=True)
class LegacyBalanceRule:
    """Any positive eligible balance qualifies."""

    name: str = "legacy"

    def is_eligible(self, entry: LedgerEntry) -> bool:
        return entry.eligible_balance > 0


@dataclass(frozen=True)
class CompositeRule:
    """Balance, activation and node-operator exclusion together."""

    name: str = "composite"

    def is_eligible(self, entry: LedgerEntry) -> bool:
        return entry.is_eligible()


LEGACY_RULE: EligibilityRule = LegacyBalanceRule()
COMPOSITE_RULE: EligibilityRule = CompositeRule()


def select_rule(round_number: int, first_composite_round: int) -> EligibilityRule:
    if round_number < first_composite_round:
        return LEGACY_RULE
    return COMPOSITE_RULE


def is_eligible(entry: LedgerEntry, round_number: int, first_composite_round: int) -> bool:
    return select_rule(round_number, first_composite_round).is_eligible(entry)
