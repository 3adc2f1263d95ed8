"""SQLAlchemy ORM models for the persisted side of the reward ledger.

The background producer writes these tables; the query service only reads them.
"""

from sqlalchemy import BigInteger, ForeignKey, Index, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=convention)


class RewardRounds(Base):
    __tablename__ = "reward_rounds"

    number: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    is_current: Mapped[bool] = mapped_column(nullable=False, default=False)
    start_block_height: Mapped[int] = mapped_column(nullable=False, default=0)
    start_block_time: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    end_block_height: Mapped[int] = mapped_column(nullable=False, default=0)
    end_block_time: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    eligible_entries: Mapped[int] = mapped_column(nullable=False, default=0)
    eligible_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    disqualified_entries: Mapped[int] = mapped_column(nullable=False, default=0)
    disqualified_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    reward_budget: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    percent_rate: Mapped[float] = mapped_column(nullable=False, default=0.0)
    payee_count: Mapped[int] = mapped_column(nullable=False, default=0)
    block_payees: Mapped[int] = mapped_column(nullable=False, default=0)
    block_interval: Mapped[int] = mapped_column(nullable=False, default=0)


class RewardResults(Base):
    __tablename__ = "reward_results"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_number: Mapped[int] = mapped_column(
        ForeignKey("reward_rounds.number"), nullable=False
    )
    address: Mapped[str] = mapped_column(nullable=False)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    reward: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    __table_args__ = (Index("ix_reward_results_round_id", "round_number", "id"),)


class RewardEntries(Base):
    __tablename__ = "reward_entries"

    address: Mapped[str] = mapped_column(primary_key=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    eligible_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_node_operator: Mapped[bool] = mapped_column(nullable=False, default=False)
    activated: Mapped[bool] = mapped_column(nullable=False, default=False)


class TermRewardEntries(Base):
    __tablename__ = "term_reward_entries"

    tx_hash: Mapped[str] = mapped_column(primary_key=True)
    address: Mapped[str] = mapped_column(nullable=False)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tier: Mapped[int] = mapped_column(nullable=False)
    annual_percent: Mapped[float | None] = mapped_column()
    expires: Mapped[int] = mapped_column(BigInteger, nullable=False)


class LedgerState(Base):
    """Single row the producer keeps current with its own sync status."""

    __tablename__ = "ledger_state"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False, default=1)
    synced: Mapped[bool] = mapped_column(nullable=False, default=False)
    tip_height: Mapped[int] = mapped_column(nullable=False, default=0)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
