"""Ledger value types.

All instances are frozen: the stores hand these out as immutable snapshots,
so a result can cross the concurrency boundary without copying.
"""

from dataclasses import dataclass

from db.enums import TermTier


@dataclass(frozen=True, slots=True)
class PayoutSchedule:
    first_block: int
    total_blocks: int
    last_block: int
    total_payees: int
    block_payees: int
    last_block_payees: int
    block_interval: int


@dataclass(frozen=True, slots=True)
class Round:
    number: int = 0
    start_block_height: int = 0
    start_block_time: int = 0
    end_block_height: int = 0
    end_block_time: int = 0
    eligible_entries: int = 0
    eligible_balance: int = 0
    disqualified_entries: int = 0
    disqualified_balance: int = 0
    reward_budget: int = 0
    percent_rate: float = 0.0
    payee_count: int = 0
    block_payees: int = 0
    block_interval: int = 0

    @property
    def is_active(self) -> bool:
        return self.number > 0

    @property
    def has_payouts(self) -> bool:
        return self.payee_count > 0

    def violations(self) -> list[str]:
        """Invariant violations that forbid sealing this round."""
        errors: list[str] = []
        if self.eligible_entries < self.disqualified_entries:
            errors.append(
                f"round {self.number}: eligible_entries {self.eligible_entries}"
                f" < disqualified_entries {self.disqualified_entries}"
            )
        if self.eligible_balance < self.disqualified_balance:
            errors.append(
                f"round {self.number}: eligible_balance {self.eligible_balance}"
                f" < disqualified_balance {self.disqualified_balance}"
            )
        if self.has_payouts and self.block_payees <= 0:
            errors.append(f"round {self.number}: payees without block_payees")
        return errors

    def payout_schedule(self, payout_delay: int) -> PayoutSchedule | None:
        if not self.has_payouts:
            return None
        total_blocks: int = -(-self.payee_count // self.block_payees)
        first_block: int = self.end_block_height + payout_delay
        return PayoutSchedule(
            first_block=first_block,
            total_blocks=total_blocks,
            last_block=first_block + (total_blocks - 1) * self.block_interval,
            total_payees=self.payee_count,
            block_payees=self.block_payees,
            last_block_payees=self.payee_count % self.block_payees,
            block_interval=self.block_interval,
        )


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    address: str
    balance: int = 0
    eligible_balance: int = 0
    is_node_operator: bool = False
    activated: bool = False

    def is_eligible(self) -> bool:
        """Composite rule: activated, holding an eligible balance, not an operator."""
        return self.activated and self.eligible_balance > 0 and not self.is_node_operator


@dataclass(frozen=True, slots=True)
class ResultEntry:
    address: str
    amount: int


@dataclass(frozen=True, slots=True)
class TermEntry:
    tx_hash: str
    address: str
    balance: int
    tier: TermTier
    annual_percent: float
    expires: int

    @property
    def level(self) -> int:
        return int(self.tier)
