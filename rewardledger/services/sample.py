"""Sample reward ledger for local testing.

Idempotent: skips seeding if any round already exists.
Run: rewardledger seed
"""

from sqlalchemy.orm import Session

from db.enums import TermTier
from db.models import RewardEntries, RewardResults, RewardRounds, TermRewardEntries
from rewardledger.repositories import (
    LedgerStateRepository,
    RewardEntryRepository,
    RewardResultRepository,
    RewardRoundRepository,
    TermRewardRepository,
)
from rewardledger.services._helpers import now_ts

COIN = 100_000_000
ROUND_BLOCKS = 47_000
ROUND_SECONDS = 30 * 24 * 3600
BASE_BLOCK = 300_000
BASE_TIME = 1_500_000_000

ADDRESSES = [
    "SQZ8qLjWJYmbAnN5cpUeFs5Ea3bpCtjvyp",
    "SSb2bDcz4n4EJ7qnWmb7VkC7pPxtMYTz5G",
    "SZ4pQpuMHvCMAWDHNsTTqvJUm4RXkSmdTo",
    "SNMUrzrqUwBYxZZkjpHvP4C8ED6ZbDEWTr",
]
NODE_OPERATOR = ADDRESSES[3]


def _round(number: int, current: bool = False) -> RewardRounds:
    start_height = BASE_BLOCK + (number - 1) * ROUND_BLOCKS
    start_time = BASE_TIME + (number - 1) * ROUND_SECONDS
    paid = not current
    return RewardRounds(
        number=number,
        is_current=current,
        start_block_height=start_height,
        start_block_time=start_time,
        end_block_height=start_height + ROUND_BLOCKS - 1,
        end_block_time=start_time + ROUND_SECONDS - 1,
        eligible_entries=len(ADDRESSES),
        eligible_balance=sum(_balances(number)),
        disqualified_entries=1,
        disqualified_balance=_balances(number)[3],
        reward_budget=500_000 * COIN,
        percent_rate=0.0125,
        payee_count=len(ADDRESSES) - 1 if paid else 0,
        block_payees=2 if paid else 0,
        block_interval=2 if paid else 0,
    )


def _balances(number: int) -> list[int]:
    return [(1_000 + 250 * i + 10 * number) * COIN for i in range(len(ADDRESSES))]


def sample_tip_height(current_round: int) -> int:
    """Chain tip the sample producer reports: a little way into the current round."""
    return BASE_BLOCK + (current_round - 1) * ROUND_BLOCKS + 1_000


def _results(number: int) -> list[RewardResults]:
    return [
        RewardResults(
            round_number=number,
            address=address,
            balance=balance,
            reward=0 if address == NODE_OPERATOR else balance // 80,
        )
        for address, balance in zip(ADDRESSES, _balances(number))
    ]


def seed_sample_ledger(session: Session, current_round: int = 5) -> bool:
    """Insert sealed rounds 1..current-1, their results, and the current scan."""
    rounds = RewardRoundRepository(session)
    if rounds.count():
        return False

    rounds.add_all([_round(n, current=n == current_round) for n in range(1, current_round + 1)])

    results = RewardResultRepository(session)
    for number in range(1, current_round):
        results.add_all(_results(number))

    RewardEntryRepository(session).add_all(
        [
            RewardEntries(
                address=address,
                balance=balance,
                eligible_balance=balance if i != 2 else 0,
                is_node_operator=address == NODE_OPERATOR,
                activated=i != 1,
            )
            for i, (address, balance) in enumerate(zip(ADDRESSES, _balances(current_round)))
        ]
    )

    now = now_ts()
    TermRewardRepository(session).add_all(
        [
            TermRewardEntries(
                tx_hash=f"{i + 1:064x}",
                address=ADDRESSES[i],
                balance=(10_000 * (i + 1)) * COIN,
                tier=int(tier),
                annual_percent=None,
                expires=now + int(tier) * 365 * 24 * 3600,
            )
            for i, tier in enumerate(TermTier)
        ]
    )
    LedgerStateRepository(session).report(
        synced=True, tip_height=sample_tip_height(current_round), now=now
    )
    return True
