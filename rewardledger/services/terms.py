"""Term deposit registry and the tier/yield model."""

from collections.abc import Iterable, Mapping

from db.enums import TermTier
from rewardledger.services.schemas import TermEntry


def parse_tier(raw: int) -> TermTier:
    try:
        return TermTier(int(raw))
    except ValueError:
        valid: list[int] = [t.value for t in TermTier]
        raise ValueError(f"Unknown term tier {raw!r}; expected one of {valid}") from None


def tier_percent(
    tier: TermTier,
    tier_percents: Mapping[int, float],
    explicit: float | None = None,
) -> float:
    """Annual yield fraction for ``tier``; an explicit per-deposit value wins."""
    if explicit is not None:
        return explicit
    if int(tier) not in tier_percents:
        raise ValueError(f"No annual yield configured for tier {int(tier)}")
    return tier_percents[int(tier)]


class TermDepositRegistry:
    """tx hash -> TermEntry. Sorting and formatting are the caller's job."""

    def __init__(self) -> None:
        self._entries: dict[str, TermEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def list_all(self) -> dict[str, TermEntry]:
        return dict(self._entries)

    def add(self, entry: TermEntry) -> None:
        self._entries[entry.tx_hash] = entry

    def replace(self, entries: Iterable[TermEntry]) -> None:
        self._entries = {e.tx_hash: e for e in entries}
