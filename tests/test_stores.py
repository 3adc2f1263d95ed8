"""Tests for the round history store, ledger entry store and term registry."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.enums import TermTier
from rewardledger.services.entries import LedgerEntryStore
from rewardledger.services.errors import (
    ErrorKind,
    InvalidRoundError,
    StorageUnavailableError,
)
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.rounds import RoundHistoryStore
from rewardledger.services.sample import ADDRESSES, COIN, NODE_OPERATOR
from rewardledger.services.schemas import LedgerEntry, ResultEntry, Round, TermEntry
from rewardledger.services.terms import TermDepositRegistry, parse_tier, tier_percent


class TestRoundInvariants:
    def test_valid_round(self) -> None:
        r = Round(number=1, eligible_entries=5, disqualified_entries=5, eligible_balance=10)
        assert r.violations() == []

    def test_more_disqualified_entries_than_eligible(self) -> None:
        r = Round(number=1, eligible_entries=1, disqualified_entries=2)
        assert len(r.violations()) == 1

    def test_more_disqualified_balance_than_eligible(self) -> None:
        r = Round(number=1, eligible_balance=1, disqualified_balance=2)
        assert "disqualified_balance" in r.violations()[0]

    def test_no_payees_no_schedule(self) -> None:
        assert Round(number=1, end_block_height=100).payout_schedule(200) is None

    def test_payout_schedule(self) -> None:
        r = Round(
            number=1, end_block_height=1000, payee_count=5, block_payees=2, block_interval=3
        )
        schedule = r.payout_schedule(200)
        assert schedule is not None
        assert schedule.first_block == 1200
        assert schedule.total_blocks == 3
        assert schedule.last_block == 1206
        assert schedule.last_block_payees == 1

    def test_payout_schedule_exact_multiple(self) -> None:
        r = Round(number=1, end_block_height=0, payee_count=4, block_payees=2, block_interval=1)
        schedule = r.payout_schedule(10)
        assert schedule is not None
        assert schedule.total_blocks == 2
        assert schedule.last_block_payees == 0


class TestRoundHistoryStore:
    def test_empty_store(self, session_factory: sessionmaker[Session]) -> None:
        store = RoundHistoryStore(session_factory)
        assert store.get_current_round().number == 0
        assert store.get_all_rounds() == {}

    def test_seal_keeps_rounds_ordered(self, session_factory: sessionmaker[Session]) -> None:
        store = RoundHistoryStore(session_factory)
        store.seal_round(Round(number=2))
        store.seal_round(Round(number=1))
        assert list(store.get_all_rounds()) == [1, 2]

    def test_seal_rejects_invariant_violation(self, session_factory: sessionmaker[Session]) -> None:
        store = RoundHistoryStore(session_factory)
        with pytest.raises(ValueError):
            store.seal_round(Round(number=1, eligible_entries=0, disqualified_entries=1))
        assert store.get_all_rounds() == {}

    def test_seal_rejects_round_zero(self, session_factory: sessionmaker[Session]) -> None:
        with pytest.raises(ValueError):
            RoundHistoryStore(session_factory).seal_round(Round(number=0))

    def test_replace_rejects_history_at_or_after_current(
        self, session_factory: sessionmaker[Session]
    ) -> None:
        store = RoundHistoryStore(session_factory)
        with pytest.raises(ValueError):
            store.replace(Round(number=3), [Round(number=1), Round(number=3)])
        assert store.get_current_round().number == 0
        assert store.get_all_rounds() == {}

    def test_all_rounds_is_a_copy(self, session_factory: sessionmaker[Session]) -> None:
        store = RoundHistoryStore(session_factory)
        store.seal_round(Round(number=1))
        store.get_all_rounds().clear()
        assert 1 in store.get_all_rounds()

    def test_snapshot_in_insertion_order(self, seeded_service: RewardLedgerService) -> None:
        results: list[ResultEntry] = seeded_service.rounds.get_results_for_round(1)
        assert [r.address for r in results] == ADDRESSES
        assert results[0].amount == 1_010 * COIN

    def test_payouts_exclude_unpaid(self, seeded_service: RewardLedgerService) -> None:
        payouts: list[ResultEntry] = seeded_service.rounds.get_payouts_for_round(2)
        assert NODE_OPERATOR not in [p.address for p in payouts]
        assert len(payouts) == len(ADDRESSES) - 1
        assert all(p.amount > 0 for p in payouts)

    def test_repeated_reads_identical(self, seeded_service: RewardLedgerService) -> None:
        rounds: RoundHistoryStore = seeded_service.rounds
        for number in (1, 4):
            assert rounds.get_results_for_round(number) == rounds.get_results_for_round(number)
            assert rounds.get_payouts_for_round(number) == rounds.get_payouts_for_round(number)

    @pytest.mark.parametrize("number", [0, -1, 5, 6])
    def test_out_of_range(self, seeded_service: RewardLedgerService, number: int) -> None:
        with pytest.raises(InvalidRoundError) as exc_info:
            seeded_service.rounds.get_results_for_round(number)
        assert exc_info.value.kind is ErrorKind.INVALID_PARAMETER
        assert "1 - 4" in exc_info.value.message

    def test_storage_failure_surfaces(self) -> None:
        # no tables created: every read fails inside SQLAlchemy
        eng = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        store = RoundHistoryStore(sessionmaker(bind=eng))
        store.set_current_round(Round(number=3))
        with pytest.raises(StorageUnavailableError):
            store.get_payouts_for_round(1)
        eng.dispose()


class TestLedgerEntryStore:
    def test_unknown_is_none(self) -> None:
        assert LedgerEntryStore().lookup("Sx") is None

    def test_zero_balance_is_found(self) -> None:
        store = LedgerEntryStore()
        store.upsert(LedgerEntry(address="Sx"))
        entry = store.lookup("Sx")
        assert entry is not None
        assert entry.balance == 0

    def test_replace_and_remove(self) -> None:
        store = LedgerEntryStore()
        store.upsert(LedgerEntry(address="Sa"))
        store.replace([LedgerEntry(address="Sb"), LedgerEntry(address="Sc")])
        assert store.lookup("Sa") is None
        store.remove("Sb")
        assert len(store) == 1


class TestTermDepositRegistry:
    def _entry(self, tx: str, expires: int) -> TermEntry:
        return TermEntry(
            tx_hash=tx,
            address="Sa",
            balance=1,
            tier=TermTier.ONE_YEAR,
            annual_percent=0.2,
            expires=expires,
        )

    def test_list_all_returns_every_entry(self) -> None:
        registry = TermDepositRegistry()
        registry.add(self._entry("b", 10))
        registry.add(self._entry("a", 20))
        assert set(registry.list_all()) == {"a", "b"}

    def test_replace_drops_previous_entries(self) -> None:
        registry = TermDepositRegistry()
        registry.add(self._entry("a", 10))
        registry.replace([self._entry("b", 20)])
        assert list(registry.list_all()) == ["b"]
        assert len(registry) == 1

    def test_level_is_tier_years(self) -> None:
        assert self._entry("a", 1).level == 1


class TestTierModel:
    def test_parse_tier(self) -> None:
        assert parse_tier(3) is TermTier.THREE_YEARS
        with pytest.raises(ValueError):
            parse_tier(4)

    def test_configured_percent(self) -> None:
        assert tier_percent(TermTier.TWO_YEARS, {2: 0.3}) == 0.3

    def test_explicit_percent_wins(self) -> None:
        assert tier_percent(TermTier.TWO_YEARS, {2: 0.3}, explicit=0.25) == 0.25

    def test_unconfigured_tier(self) -> None:
        with pytest.raises(ValueError):
            tier_percent(TermTier.THREE_YEARS, {1: 0.2})


class TestProducerSealing:
    def test_seal_and_open_next(self, service: RewardLedgerService) -> None:
        service.set_current_round(Round(number=1))
        service.seal_round(Round(number=1), next_round=Round(number=2))
        assert list(service.rounds.get_all_rounds()) == [1]
        assert service.rounds.get_current_round().number == 2

    def test_cannot_seal_the_current_round_in_place(self, service: RewardLedgerService) -> None:
        service.set_current_round(Round(number=3))
        with pytest.raises(ValueError):
            service.seal_round(Round(number=3))
        assert service.rounds.get_all_rounds() == {}

    def test_next_round_must_follow_sealed(self, service: RewardLedgerService) -> None:
        service.set_current_round(Round(number=2))
        with pytest.raises(ValueError):
            service.seal_round(Round(number=2), next_round=Round(number=2))
        assert service.rounds.get_current_round().number == 2
        assert service.rounds.get_all_rounds() == {}
