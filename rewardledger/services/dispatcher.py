"""Query dispatcher for the smartrewards and termrewards commands.

Every command is read-only and runs the same gauntlet: readiness check, then
non-blocking guards (database first, then the stores it reads), then the
read itself. Any ``RewardLedgerError`` raised on the way becomes a failed
``QueryResult``; nothing partial is ever returned.
"""

from collections.abc import Callable, Sequence

import structlog

from db.enums import LedgerStore, QueryCommand
from rewardledger.services._helpers import format_amount, format_percent, parse_int32
from rewardledger.services._types import (
    CheckDict,
    CurrentRoundDict,
    HistoryRoundDict,
    PayoutDict,
    PayoutScheduleDict,
    QueryValue,
    SnapshotDict,
    TermRewardDict,
)
from rewardledger.services.address import AddressValidation
from rewardledger.services.eligibility import select_rule
from rewardledger.services.errors import (
    AddressNotFoundError,
    ErrorKind,
    InvalidAddressError,
    InvalidParameterError,
    NoActiveRoundError,
    NoHistoryError,
    RewardLedgerError,
    UnknownCommandError,
)
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.rounds import round_range_message
from rewardledger.services.schemas import (
    LedgerEntry,
    PayoutSchedule,
    QueryResult,
    ResultEntry,
    Round,
    TermEntry,
)

logger = structlog.get_logger(__name__)

SMARTREWARDS_USAGE: str = (
    "smartrewards \"command\"...\n"
    "\nAvailable commands:\n"
    "  current           - Print information about the current reward cycle.\n"
    "  history           - Print the results of all past reward cycles.\n"
    "  payouts  :round   - Print a list of all paid rewards in the past cycle :round\n"
    "  snapshot :round   - Print a list of all addresses with their balances"
    " from the end of the past cycle :round.\n"
    "  check :address    - Check the given :address for eligibility"
    " in the current rewards cycle.\n"
)

NO_ACTIVE_ROUND_MESSAGE: str = "No active reward round available yet."
NO_HISTORY_MESSAGE: str = "No finished reward round available yet."
ADDRESS_REQUIRED_MESSAGE: str = "Address required."
ADDRESS_NOT_FOUND_MESSAGE: str = "Couldn't find this address in the database."
NO_PAYEES_MESSAGE: str = "No payees were eligible for this round"


class QueryDispatcher:
    """Parses (command, args), validates them and reads the ledger."""

    def __init__(self, service: RewardLedgerService) -> None:
        self.service: RewardLedgerService = service
        self._commands: dict[QueryCommand, Callable[[Sequence[str]], QueryValue]] = {
            QueryCommand.CURRENT: self._current,
            QueryCommand.HISTORY: self._history,
            QueryCommand.PAYOUTS: self._payouts,
            QueryCommand.SNAPSHOT: self._snapshot,
            QueryCommand.CHECK: self._check,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def dispatch(self, command: str, args: Sequence[str] = ()) -> QueryResult[QueryValue]:
        try:
            parsed: QueryCommand = self._parse_command(command)
            self.service.require_synced()
            value: QueryValue = self._commands[parsed](list(args))
        except RewardLedgerError as e:
            return self._fail(command, e)
        return QueryResult.success(value)

    def list_term_rewards(self) -> QueryResult[list[TermRewardDict]]:
        try:
            self.service.require_synced()
            with self.service.reading(LedgerStore.DATABASE, LedgerStore.TERMS):
                entries: dict[str, TermEntry] = self.service.terms.list_all()
        except RewardLedgerError as e:
            return self._fail("termrewards", e)
        ordered: list[TermEntry] = sorted(entries.values(), key=lambda t: (t.expires, t.tx_hash))
        return QueryResult.success([self._term_dict(t) for t in ordered])

    def call(self, method: str, params: Sequence[str] = ()) -> QueryResult[QueryValue]:
        """RPC-style entry: ``smartrewards <command> [arg]`` or ``termrewards``."""
        if method == "smartrewards":
            if not params:
                return self._fail(method, UnknownCommandError(SMARTREWARDS_USAGE))
            return self.dispatch(params[0], params[1:])
        if method == "termrewards":
            return self.list_term_rewards()
        return self._fail(method, UnknownCommandError(f"Method not found: {method}"))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _current(self, args: Sequence[str]) -> CurrentRoundDict:
        with self.service.reading(LedgerStore.DATABASE, LedgerStore.ROUNDS):
            current: Round = self._require_active_round()
        return CurrentRoundDict(
            rewards_cycle=current.number,
            start_blockheight=current.start_block_height,
            start_blocktime=current.start_block_time,
            end_blockheight=current.end_block_height,
            end_blocktime=current.end_block_time,
            # unclamped on purpose: the live round may be mid-update
            eligible_addresses=current.eligible_entries - current.disqualified_entries,
            eligible_smart=self._amount(current.eligible_balance - current.disqualified_balance),
            disqualified_addresses=current.disqualified_entries,
            disqualified_smart=self._amount(current.disqualified_balance),
            estimated_rewards=self._amount(current.reward_budget),
            estimated_percent=format_percent(current.percent_rate),
        )

    def _history(self, args: Sequence[str]) -> list[HistoryRoundDict]:
        with self.service.reading(LedgerStore.DATABASE, LedgerStore.ROUNDS):
            history: dict[int, Round] = self.service.rounds.get_all_rounds()
        if not history:
            raise NoHistoryError(NO_HISTORY_MESSAGE)
        delay: int = self.service.consensus.payout_start_delay
        return [self._history_dict(r, delay) for r in history.values()]

    def _payouts(self, args: Sequence[str]) -> list[PayoutDict]:
        with self.service.reading(LedgerStore.DATABASE, LedgerStore.ROUNDS):
            current: Round = self._require_active_round()
            number: int = self._parse_round(args, current)
            payouts: list[ResultEntry] = self.service.rounds.get_payouts_for_round(number)
        return [PayoutDict(address=p.address, reward=self._amount(p.amount)) for p in payouts]

    def _snapshot(self, args: Sequence[str]) -> list[SnapshotDict]:
        with self.service.reading(LedgerStore.DATABASE, LedgerStore.ROUNDS):
            current: Round = self._require_active_round()
            number: int = self._parse_round(args, current)
            results: list[ResultEntry] = self.service.rounds.get_results_for_round(number)
        return [SnapshotDict(address=s.address, balance=self._amount(s.amount)) for s in results]

    def _check(self, args: Sequence[str]) -> CheckDict:
        if len(args) != 1:
            raise InvalidParameterError(ADDRESS_REQUIRED_MESSAGE)
        decoded: AddressValidation = self.service.codec.decode(args[0])
        if not decoded.ok:
            raise InvalidAddressError(f"Invalid address provided: {args[0]}")

        with self.service.reading(LedgerStore.DATABASE, LedgerStore.ROUNDS, LedgerStore.ENTRIES):
            current: Round = self.service.rounds.get_current_round()
            entry: LedgerEntry | None = self.service.entries.lookup(decoded.address)
        if entry is None:
            raise AddressNotFoundError(ADDRESS_NOT_FOUND_MESSAGE)

        rule = select_rule(current.number, self.service.consensus.first_composite_rule_round)
        return CheckDict(
            address=entry.address,
            balance=self._amount(entry.balance),
            balance_eligible=self._amount(entry.eligible_balance),
            is_smartnode=entry.is_node_operator,
            activated=entry.activated,
            eligible=rule.is_eligible(entry),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_command(command: str) -> QueryCommand:
        try:
            return QueryCommand(command)
        except ValueError:
            raise UnknownCommandError(SMARTREWARDS_USAGE) from None

    def _require_active_round(self) -> Round:
        current: Round = self.service.rounds.get_current_round()
        if not current.is_active:
            raise NoActiveRoundError(NO_ACTIVE_ROUND_MESSAGE)
        return current

    @staticmethod
    def _parse_round(args: Sequence[str], current: Round) -> int:
        """Round argument must be an int in [1, current - 1], checked against the live round."""
        message: str = round_range_message(current)
        if len(args) != 1:
            raise InvalidParameterError(message)
        try:
            number: int = parse_int32(args[0])
        except (ValueError, OverflowError):
            raise InvalidParameterError(message) from None
        if number < 1 or number >= current.number:
            raise InvalidParameterError(message)
        return number

    def _amount(self, amount: int) -> str:
        return format_amount(amount, self.service.consensus.coin_decimals)

    def _history_dict(self, r: Round, payout_delay: int) -> HistoryRoundDict:
        schedule: PayoutSchedule | None = r.payout_schedule(payout_delay)
        payouts: PayoutScheduleDict | dict[str, str]
        if schedule is None:
            payouts = {"None": NO_PAYEES_MESSAGE}
        else:
            payouts = PayoutScheduleDict(
                firstBlock=schedule.first_block,
                totalBlocks=schedule.total_blocks,
                lastBlock=schedule.last_block,
                totalPayees=schedule.total_payees,
                blockPayees=schedule.block_payees,
                lastBlockPayees=schedule.last_block_payees,
                blockInterval=schedule.block_interval,
            )
        return HistoryRoundDict(
            rewards_cycle=r.number,
            start_blockheight=r.start_block_height,
            start_blocktime=r.start_block_time,
            end_blockheight=r.end_block_height,
            end_blocktime=r.end_block_time,
            eligible_addresses=max(r.eligible_entries - r.disqualified_entries, 0),
            eligible_smart=self._amount(max(r.eligible_balance - r.disqualified_balance, 0)),
            disqualified_addresses=r.disqualified_entries,
            disqualified_smart=self._amount(r.disqualified_balance),
            rewards=self._amount(r.reward_budget),
            percent=format_percent(r.percent_rate),
            payouts=payouts,
        )

    def _term_dict(self, t: TermEntry) -> TermRewardDict:
        return TermRewardDict(
            address=t.address,
            tx_hash=t.tx_hash,
            balance=self._amount(t.balance),
            level=t.level,
            percent=format_percent(t.annual_percent),
            expires=t.expires,
        )

    @staticmethod
    def _fail(command: str, exc: RewardLedgerError) -> QueryResult:
        if exc.kind in (ErrorKind.BUSY, ErrorKind.NOT_SYNCED):
            logger.debug("query_refused", command=command, kind=exc.kind.value)
        else:
            logger.info("query_failed", command=command, kind=exc.kind.value, detail=exc.message)
        return QueryResult.from_exception(exc)
