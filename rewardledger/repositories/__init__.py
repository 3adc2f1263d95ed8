"""Repository layer for data access."""

from rewardledger.repositories.base import BaseRepository
from rewardledger.repositories.entries import RewardEntryRepository, TermRewardRepository
from rewardledger.repositories.rounds import RewardResultRepository, RewardRoundRepository
from rewardledger.repositories.state import LedgerStateRepository

__all__ = [
    "BaseRepository",
    "LedgerStateRepository",
    "RewardEntryRepository",
    "RewardResultRepository",
    "RewardRoundRepository",
    "TermRewardRepository",
]
