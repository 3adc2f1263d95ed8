"""Ledger entry store: per-address state for the current round."""

from collections.abc import Iterable

from rewardledger.services.schemas import LedgerEntry


class LedgerEntryStore:
    """Address -> LedgerEntry. Only the producer writes; callers hold the guard."""

    def __init__(self) -> None:
        self._entries: dict[str, LedgerEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, address: str) -> LedgerEntry | None:
        """``None`` means unknown, which is not the same as a zero balance."""
        return self._entries.get(address)

    def upsert(self, entry: LedgerEntry) -> None:
        self._entries[entry.address] = entry

    def remove(self, address: str) -> None:
        self._entries.pop(address, None)

    def replace(self, entries: Iterable[LedgerEntry]) -> None:
        self._entries = {e.address: e for e in entries}
