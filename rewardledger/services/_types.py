"""Typed dicts for dispatcher return values.

Keeps command results explicit about their shape instead of returning bare dicts.
Key names follow the smartrewards RPC output.
"""

import sys

if sys.version_info >= (3, 12):
    from typing import TypedDict
else:
    from typing_extensions import TypedDict


class CurrentRoundDict(TypedDict):
    rewards_cycle: int
    start_blockheight: int
    start_blocktime: int
    end_blockheight: int
    end_blocktime: int
    eligible_addresses: int
    eligible_smart: str
    disqualified_addresses: int
    disqualified_smart: str
    estimated_rewards: str
    estimated_percent: float


class PayoutScheduleDict(TypedDict):
    firstBlock: int
    totalBlocks: int
    lastBlock: int
    totalPayees: int
    blockPayees: int
    lastBlockPayees: int
    blockInterval: int


class HistoryRoundDict(TypedDict):
    rewards_cycle: int
    start_blockheight: int
    start_blocktime: int
    end_blockheight: int
    end_blocktime: int
    eligible_addresses: int
    eligible_smart: str
    disqualified_addresses: int
    disqualified_smart: str
    rewards: str
    percent: float
    payouts: PayoutScheduleDict | dict[str, str]


class PayoutDict(TypedDict):
    address: str
    reward: str


class SnapshotDict(TypedDict):
    address: str
    balance: str


class CheckDict(TypedDict):
    address: str
    balance: str
    balance_eligible: str
    is_smartnode: bool
    activated: bool
    eligible: bool


class TermRewardDict(TypedDict):
    address: str
    tx_hash: str
    balance: str
    level: int
    percent: float
    expires: int


QueryValue = (
    CurrentRoundDict
    | list[HistoryRoundDict]
    | list[PayoutDict]
    | list[SnapshotDict]
    | CheckDict
    | list[TermRewardDict]
)
