"""Tests for the ledger repositories against the sample ledger."""

from sqlalchemy.orm import Session

from db.models import RewardResults
from rewardledger.repositories import (
    LedgerStateRepository,
    RewardEntryRepository,
    RewardResultRepository,
    RewardRoundRepository,
    TermRewardRepository,
)
from rewardledger.services.sample import ADDRESSES, NODE_OPERATOR, seed_sample_ledger


class TestRewardRoundRepository:
    def test_current_and_sealed(self, session: Session) -> None:
        seed_sample_ledger(session)
        repo = RewardRoundRepository(session)
        current = repo.get_current()
        assert current is not None
        assert current.number == 5
        assert [r.number for r in repo.get_sealed()] == [1, 2, 3, 4]
        assert repo.count() == 5

    def test_empty(self, session: Session) -> None:
        repo = RewardRoundRepository(session)
        assert repo.get_current() is None
        assert repo.get_sealed() == []


class TestRewardResultRepository:
    def test_snapshot_keeps_insertion_order(self, session: Session) -> None:
        seed_sample_ledger(session)
        # insert a late row with an address that sorts first
        RewardResultRepository(session).add_all(
            [RewardResults(round_number=1, address="SAAA", balance=1, reward=1)]
        )
        rows = RewardResultRepository(session).get_snapshot(1)
        assert [r.address for r in rows] == ADDRESSES + ["SAAA"]

    def test_payouts_only_paid(self, session: Session) -> None:
        seed_sample_ledger(session)
        rows = RewardResultRepository(session).get_payouts(2)
        assert NODE_OPERATOR not in [r.address for r in rows]
        assert all(r.reward > 0 for r in rows)

    def test_unknown_round(self, session: Session) -> None:
        seed_sample_ledger(session)
        assert RewardResultRepository(session).get_snapshot(99) == []


class TestEntryRepositories:
    def test_entries_sorted_by_address(self, session: Session) -> None:
        seed_sample_ledger(session)
        rows = RewardEntryRepository(session).get_all()
        assert [r.address for r in rows] == sorted(ADDRESSES)

    def test_active_terms(self, session: Session) -> None:
        seed_sample_ledger(session)
        repo = TermRewardRepository(session)
        assert len(repo.get_active(0)) == 3
        assert repo.get_active(2**40) == []
        assert repo.count() == 3

    def test_seed_is_idempotent(self, session: Session) -> None:
        assert seed_sample_ledger(session) is True
        assert seed_sample_ledger(session) is False
        assert RewardRoundRepository(session).count() == 5


class TestLedgerStateRepository:
    def test_absent_until_reported(self, session: Session) -> None:
        assert LedgerStateRepository(session).get() is None

    def test_report_upserts_single_row(self, session: Session) -> None:
        repo = LedgerStateRepository(session)
        repo.report(synced=False, tip_height=10, now=100)
        repo.report(synced=True, tip_height=11, now=101)
        state = repo.get()
        assert state is not None
        assert state.synced is True
        assert state.tip_height == 11
        assert state.updated_at == 101
        assert repo.count() == 1

    def test_sample_ledger_reports_synced(self, session: Session) -> None:
        seed_sample_ledger(session)
        state = LedgerStateRepository(session).get()
        assert state is not None
        assert state.synced is True
