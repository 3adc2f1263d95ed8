"""Repositories for reward rounds and their per-address results."""

from typing import Optional, Sequence

from sqlalchemy import and_, select

from db.models import RewardResults, RewardRounds
from rewardledger.repositories.base import BaseRepository


class RewardRoundRepository(BaseRepository[RewardRounds]):
    """Repository for RewardRounds operations."""

    model = RewardRounds

    def get_current(self) -> Optional[RewardRounds]:
        """The single round still under construction, if any."""
        stmt = (
            select(RewardRounds)
            .where(RewardRounds.is_current.is_(True))
            .order_by(RewardRounds.number.desc())
            .limit(1)
        )
        return self.session.scalar(stmt)

    def get_sealed(self) -> Sequence[RewardRounds]:
        """All finished rounds, oldest first."""
        stmt = (
            select(RewardRounds)
            .where(RewardRounds.is_current.is_(False))
            .order_by(RewardRounds.number)
        )
        return self.session.scalars(stmt).all()


class RewardResultRepository(BaseRepository[RewardResults]):
    """Repository for RewardResults operations.

    Rows come back in insertion (id) order so repeated reads of a sealed
    round are identical.
    """

    model = RewardResults

    def get_snapshot(self, round_number: int) -> Sequence[RewardResults]:
        """Every address with its balance at the end of ``round_number``."""
        stmt = (
            select(RewardResults)
            .where(RewardResults.round_number == round_number)
            .order_by(RewardResults.id)
        )
        return self.session.scalars(stmt).all()

    def get_payouts(self, round_number: int) -> Sequence[RewardResults]:
        """Addresses that were actually paid for ``round_number``."""
        stmt = (
            select(RewardResults)
            .where(
                and_(
                    RewardResults.round_number == round_number,
                    RewardResults.reward > 0,
                )
            )
            .order_by(RewardResults.id)
        )
        return self.session.scalars(stmt).all()
