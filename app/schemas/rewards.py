"""Reward ledger response schemas. Keys match the smartrewards RPC output."""

from pydantic import BaseModel


class CurrentRoundResponse(BaseModel):
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


class PayoutScheduleResponse(BaseModel):
    firstBlock: int
    totalBlocks: int
    lastBlock: int
    totalPayees: int
    blockPayees: int
    lastBlockPayees: int
    blockInterval: int


class HistoryRoundResponse(BaseModel):
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
    payouts: PayoutScheduleResponse | dict[str, str]


class PayoutResponse(BaseModel):
    address: str
    reward: str


class SnapshotResponse(BaseModel):
    address: str
    balance: str


class CheckResponse(BaseModel):
    address: str
    balance: str
    balance_eligible: str
    is_smartnode: bool
    activated: bool
    eligible: bool


class TermRewardResponse(BaseModel):
    address: str
    tx_hash: str
    balance: str
    level: int
    percent: float
    expires: int
