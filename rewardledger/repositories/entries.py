"""Repositories for current-round ledger entries and term deposits."""

from typing import Sequence

from sqlalchemy import select

from db.models import RewardEntries, TermRewardEntries
from rewardledger.repositories.base import BaseRepository


class RewardEntryRepository(BaseRepository[RewardEntries]):
    """Repository for RewardEntries operations."""

    model = RewardEntries

    def get_all(self) -> Sequence[RewardEntries]:
        stmt = select(RewardEntries).order_by(RewardEntries.address)
        return self.session.scalars(stmt).all()


class TermRewardRepository(BaseRepository[TermRewardEntries]):
    """Repository for TermRewardEntries operations."""

    model = TermRewardEntries

    def get_active(self, now: int) -> Sequence[TermRewardEntries]:
        """Term deposits that have not reached their expiry time."""
        stmt = (
            select(TermRewardEntries)
            .where(TermRewardEntries.expires > now)
            .order_by(TermRewardEntries.tx_hash)
        )
        return self.session.scalars(stmt).all()
