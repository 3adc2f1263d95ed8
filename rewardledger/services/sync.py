"""Database-backed producer that keeps the in-memory ledger current.

Runs in-process as a daemon thread next to the API. Each refresh holds the
database guard while it reads, then swaps the stores under their own guards;
queries arriving meanwhile get ``Busy`` instead of waiting.
"""

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import structlog
from sqlalchemy.orm import Session

from db.enums import LedgerStore
from db.models import LedgerState, RewardEntries, RewardRounds, TermRewardEntries
from rewardledger.repositories import (
    LedgerStateRepository,
    RewardEntryRepository,
    RewardRoundRepository,
    TermRewardRepository,
)
from rewardledger.services._helpers import now_ts
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.schemas import LedgerEntry, Round, TermEntry
from rewardledger.services.terms import parse_tier, tier_percent

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def round_from_row(row: RewardRounds) -> Round:
    return Round(
        number=row.number,
        start_block_height=row.start_block_height,
        start_block_time=row.start_block_time,
        end_block_height=row.end_block_height,
        end_block_time=row.end_block_time,
        eligible_entries=row.eligible_entries,
        eligible_balance=row.eligible_balance,
        disqualified_entries=row.disqualified_entries,
        disqualified_balance=row.disqualified_balance,
        reward_budget=row.reward_budget,
        percent_rate=row.percent_rate,
        payee_count=row.payee_count,
        block_payees=row.block_payees,
        block_interval=row.block_interval,
    )


def entry_from_row(row: RewardEntries) -> LedgerEntry:
    return LedgerEntry(
        address=row.address,
        balance=row.balance,
        eligible_balance=row.eligible_balance,
        is_node_operator=row.is_node_operator,
        activated=row.activated,
    )


def term_from_row(row: TermRewardEntries, tier_percents: dict[int, float]) -> TermEntry:
    tier = parse_tier(row.tier)
    return TermEntry(
        tx_hash=row.tx_hash,
        address=row.address,
        balance=row.balance,
        tier=tier,
        annual_percent=tier_percent(tier, tier_percents, row.annual_percent),
        expires=row.expires,
    )


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything one refresh reads, taken in a single session."""

    current: Round
    history: list[Round]
    entries: list[LedgerEntry]
    terms: list[TermEntry]
    producer_synced: bool
    tip_height: int


class DatabaseLedgerSync(threading.Thread):
    """Periodically reloads rounds, entries and term deposits from the database.

    Readiness follows the producer's own ``ledger_state`` report: a clean
    reload of a ledger whose producer is still catching up stays NotSynced.
    """

    def __init__(
        self,
        service: RewardLedgerService,
        session_factory: Callable[[], Session],
        interval: float = 30.0,
        clock: Callable[[], int] = now_ts,
    ) -> None:
        super().__init__(name="reward-ledger-sync", daemon=True)
        self.service: RewardLedgerService = service
        self._session_factory = session_factory
        self.interval: float = interval
        self._clock = clock
        self._stop_event = threading.Event()
        self.refreshes: int = 0
        self.last_error: str = ""

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout=timeout)

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.refresh()
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                logger.exception("ledger_refresh_failed", error=self.last_error)
            self._stop_event.wait(self.interval)

    def refresh(self) -> None:
        """Reload every store; on any failure the ledger is marked not synced."""
        svc: RewardLedgerService = self.service
        now: int = self._clock()
        try:
            with svc.writing(LedgerStore.DATABASE):
                snap: LedgerSnapshot = self._load(now)
                with svc.writing(LedgerStore.ROUNDS, LedgerStore.ENTRIES, LedgerStore.TERMS):
                    svc.rounds.replace(snap.current, snap.history)
                    svc.entries.replace(snap.entries)
                    svc.terms.replace(snap.terms)
        except Exception:
            svc.mark_synced(False)
            raise

        self.refreshes += 1
        self.last_error = ""
        svc.tip_height = snap.tip_height
        svc.mark_synced(snap.producer_synced)
        if not snap.producer_synced:
            logger.warning("ledger_producer_not_synced", tip_height=snap.tip_height)
        logger.info(
            "ledger_refreshed",
            current_round=snap.current.number,
            sealed_rounds=len(snap.history),
            entries=len(snap.entries),
            term_entries=len(snap.terms),
            tip_height=snap.tip_height,
        )

    def _load(self, now: int) -> LedgerSnapshot:
        tier_percents: dict[int, float] = self.service.consensus.term_tier_percents
        with self._session_factory() as session:
            rounds_repo = RewardRoundRepository(session)
            current_row: RewardRounds | None = rounds_repo.get_current()
            sealed: Sequence[RewardRounds] = rounds_repo.get_sealed()
            entry_rows: Sequence[RewardEntries] = RewardEntryRepository(session).get_all()
            term_rows: Sequence[TermRewardEntries] = TermRewardRepository(session).get_active(now)
            state: LedgerState | None = LedgerStateRepository(session).get()

            return LedgerSnapshot(
                current=round_from_row(current_row) if current_row else Round(),
                history=[round_from_row(r) for r in sealed],
                entries=[entry_from_row(r) for r in entry_rows],
                terms=[term_from_row(r, tier_percents) for r in term_rows],
                # no row: the producer has never reported
                producer_synced=state is not None and state.synced,
                tip_height=state.tip_height if state is not None else 0,
            )
