"""Round history store: the current round plus every sealed round."""

from collections.abc import Callable, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import RewardResults
from rewardledger.repositories import RewardResultRepository
from rewardledger.services.errors import InvalidRoundError, StorageUnavailableError
from rewardledger.services.schemas import ResultEntry, Round

logger = structlog.get_logger(__name__)

FETCH_FAILED_MESSAGE: str = "Couldn't fetch the list from the database."


def round_range_message(current: Round) -> str:
    return f"Past reward round required: 1 - {current.number - 1}"


class RoundHistoryStore:
    """Ordered mapping of sealed rounds plus the round under construction.

    Sealed per-address results live in the database and are read on demand;
    only round summaries are held in memory. Callers hold the store's guard.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._current: Round = Round()
        self._history: dict[int, Round] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_current_round(self) -> Round:
        return self._current

    def get_all_rounds(self) -> dict[int, Round]:
        return dict(self._history)

    def get_results_for_round(self, number: int) -> list[ResultEntry]:
        """Eligible-balance snapshot at the end of round ``number``."""
        self._check_round(number)
        return self._fetch(number, lambda repo: repo.get_snapshot(number), "balance")

    def get_payouts_for_round(self, number: int) -> list[ResultEntry]:
        """Realized payouts for round ``number``."""
        self._check_round(number)
        return self._fetch(number, lambda repo: repo.get_payouts(number), "reward")

    def _check_round(self, number: int) -> None:
        if number < 1 or number >= self._current.number:
            raise InvalidRoundError(round_range_message(self._current))

    def _fetch(
        self,
        number: int,
        query: Callable[[RewardResultRepository], Sequence[RewardResults]],
        amount_column: str,
    ) -> list[ResultEntry]:
        try:
            with self._session_factory() as session:
                rows: Sequence[RewardResults] = query(RewardResultRepository(session))
                return [
                    ResultEntry(address=r.address, amount=getattr(r, amount_column))
                    for r in rows
                ]
        except SQLAlchemyError as e:
            logger.exception("round_results_fetch_failed", round=number, error=str(e))
            raise StorageUnavailableError(FETCH_FAILED_MESSAGE) from e

    # ------------------------------------------------------------------
    # Producer writes
    # ------------------------------------------------------------------

    def set_current_round(self, current: Round) -> None:
        self._current = current

    def seal_round(self, sealed: Round) -> None:
        problems: list[str] = sealed.violations()
        if problems:
            raise ValueError("; ".join(problems))
        if sealed.number < 1:
            raise ValueError(f"cannot seal round {sealed.number}")
        self._history[sealed.number] = sealed
        self._history = dict(sorted(self._history.items()))

    def replace(self, current: Round, history: Sequence[Round]) -> None:
        for r in history:
            problems: list[str] = r.violations()
            if problems:
                raise ValueError("; ".join(problems))
            if current.is_active and r.number >= current.number:
                raise ValueError(
                    f"sealed round {r.number} is not before current round {current.number}"
                )
        self._current = current
        self._history = {r.number: r for r in sorted(history, key=lambda r: r.number)}
