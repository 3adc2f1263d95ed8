"""Reward ledger service: owns the stores, their guards and the readiness flag.

One instance per process, constructed at startup and handed to the
dispatcher. Queries only read through ``reading``; the external producer
(see ``rewardledger.services.sync``) writes through the methods at the bottom
of this class or, for bulk reloads, through ``writing`` plus the stores.
"""

from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager

import structlog
from sqlalchemy.orm import Session

from config import ConsensusSettings
from db.enums import LedgerStore
from rewardledger.services.address import LegacyAddressCodec
from rewardledger.services.entries import LedgerEntryStore
from rewardledger.services.errors import NotSyncedError
from rewardledger.services.guard import GuardSet, ReadinessFlag
from rewardledger.services.rounds import RoundHistoryStore
from rewardledger.services.schemas import LedgerEntry, Round, TermEntry
from rewardledger.services.terms import TermDepositRegistry

logger = structlog.get_logger(__name__)

NOT_SYNCED_MESSAGE: str = "Rewards database is not up to date."


class RewardLedgerService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        consensus: ConsensusSettings | None = None,
        debug: bool = False,
        codec: LegacyAddressCodec | None = None,
    ) -> None:
        self.consensus: ConsensusSettings = consensus or ConsensusSettings()
        self.debug: bool = debug
        self.codec: LegacyAddressCodec = codec or LegacyAddressCodec(
            self.consensus.address_prefixes
        )
        self.guards: GuardSet = GuardSet()
        self.readiness: ReadinessFlag = ReadinessFlag()
        self.rounds: RoundHistoryStore = RoundHistoryStore(session_factory)
        self.entries: LedgerEntryStore = LedgerEntryStore()
        self.terms: TermDepositRegistry = TermDepositRegistry()
        self.tip_height: int = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def is_synced(self) -> bool:
        return self.readiness.is_synced()

    def require_synced(self) -> None:
        if self.debug:
            return
        if not self.readiness.is_synced():
            logger.debug("query_refused_not_synced")
            raise NotSyncedError(NOT_SYNCED_MESSAGE)

    @contextmanager
    def reading(self, *stores: LedgerStore) -> Generator[None, None, None]:
        """Non-blocking hold on ``stores``; raises BusyError on contention."""
        with self.guards.try_hold(*stores):
            yield

    def status(self) -> dict[str, object]:
        """Unguarded diagnostic view; may be a moment stale."""
        current: Round = self.rounds.get_current_round()
        return {
            "synced": self.readiness.is_synced(),
            "current_round": current.number,
            "tip_height": self.tip_height,
            "sealed_rounds": len(self.rounds.get_all_rounds()),
            "entries": len(self.entries),
            "term_entries": len(self.terms),
            "busy": [s.value for s in LedgerStore if self.guards[s].locked],
        }

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    @contextmanager
    def writing(self, *stores: LedgerStore) -> Generator[None, None, None]:
        with self.guards.hold(stores):
            yield

    def mark_synced(self, synced: bool = True) -> None:
        if synced != self.readiness.is_synced():
            logger.info("ledger_sync_state", synced=synced)
        self.readiness.set(synced)

    def set_current_round(self, current: Round) -> None:
        with self.writing(LedgerStore.ROUNDS):
            self.rounds.set_current_round(current)

    def seal_round(self, sealed: Round, next_round: Round | None = None) -> None:
        """Move ``sealed`` into history and optionally open ``next_round``.

        ``sealed`` must precede whichever round is current afterwards.
        """
        with self.writing(LedgerStore.ROUNDS):
            after: Round = (
                next_round if next_round is not None else self.rounds.get_current_round()
            )
            if sealed.number >= after.number:
                raise ValueError(
                    f"cannot seal round {sealed.number} while round {after.number} is current"
                )
            self.rounds.seal_round(sealed)
            if next_round is not None:
                self.rounds.set_current_round(next_round)
        logger.info("round_sealed", round=sealed.number)

    def upsert_entry(self, entry: LedgerEntry) -> None:
        with self.writing(LedgerStore.ENTRIES):
            self.entries.upsert(entry)

    def replace_entries(self, entries: Iterable[LedgerEntry]) -> None:
        with self.writing(LedgerStore.ENTRIES):
            self.entries.replace(entries)

    def add_term_entry(self, entry: TermEntry) -> None:
        with self.writing(LedgerStore.TERMS):
            self.terms.add(entry)
