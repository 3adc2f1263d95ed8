"""Repository for the producer's sync status row."""

from typing import Optional

from db.models import LedgerState
from rewardledger.repositories.base import BaseRepository

STATE_ROW_ID = 1


class LedgerStateRepository(BaseRepository[LedgerState]):
    """Repository for the single LedgerState row."""

    model = LedgerState

    def get(self) -> Optional[LedgerState]:
        """The producer's last reported state; ``None`` if it never reported."""
        return self.session.get(LedgerState, STATE_ROW_ID)

    def report(self, synced: bool, tip_height: int, now: int) -> LedgerState:
        """Upsert the producer's sync status."""
        row: Optional[LedgerState] = self.get()
        if row is None:
            row = LedgerState(id=STATE_ROW_ID)
            self.session.add(row)
        row.synced = synced
        row.tip_height = tip_height
        row.updated_at = now
        self.session.flush()
        return row
