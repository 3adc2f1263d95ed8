"""Tests for the rewardledger CLI."""

import json
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from config import get_settings
from db.connection import reset_engine
from rewardledger.cli import main as cli
from rewardledger.services.dispatcher import QueryDispatcher
from rewardledger.services.errors import ErrorKind
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.schemas import QueryResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()


@pytest.fixture()
def cli_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point the CLI at a throwaway SQLite file."""
    db_path: Path = tmp_path / "rewards.db"
    monkeypatch.setenv("DB_SQLITE_PATH", str(db_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    get_settings.cache_clear()
    reset_engine()
    yield db_path
    reset_engine()
    get_settings.cache_clear()


@pytest.fixture()
def seeded_cli(
    seeded_service: RewardLedgerService, monkeypatch: pytest.MonkeyPatch
) -> RewardLedgerService:
    monkeypatch.setattr(cli, "_load_dispatcher", lambda: QueryDispatcher(seeded_service))
    return seeded_service


class TestRunWithRetry:
    def test_retries_busy_then_succeeds(self) -> None:
        results = [
            QueryResult.failure(ErrorKind.BUSY, "busy"),
            QueryResult.failure(ErrorKind.BUSY, "busy"),
            QueryResult.success({"ok": True}),
        ]
        sleeps: list[float] = []
        result = cli.run_with_retry(
            lambda: results.pop(0), attempts=3, delay=0.25, sleep=sleeps.append
        )
        assert result.ok
        assert sleeps == [0.25, 0.25]

    def test_gives_up_after_attempts(self) -> None:
        calls: list[int] = []

        def query() -> QueryResult:
            calls.append(1)
            return QueryResult.failure(ErrorKind.BUSY, "busy")

        result = cli.run_with_retry(query, attempts=2, delay=0, sleep=lambda _: None)
        assert result.error.kind is ErrorKind.BUSY
        assert len(calls) == 3

    def test_other_errors_not_retried(self) -> None:
        calls: list[int] = []

        def query() -> QueryResult:
            calls.append(1)
            return QueryResult.failure(ErrorKind.NOT_SYNCED, "not synced")

        cli.run_with_retry(query, attempts=5, delay=0, sleep=lambda _: None)
        assert len(calls) == 1


class TestSmartrewards:
    def test_current_json(self, seeded_cli: RewardLedgerService) -> None:
        result = runner.invoke(cli.app, ["smartrewards", "current", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["rewards_cycle"] == 5

    def test_payouts_table(self, seeded_cli: RewardLedgerService) -> None:
        result = runner.invoke(cli.app, ["smartrewards", "payouts", "1"])
        assert result.exit_code == 0, result.output
        assert "smartrewards payouts" in result.output

    def test_error_exits_nonzero(self, seeded_cli: RewardLedgerService) -> None:
        result = runner.invoke(cli.app, ["smartrewards", "payouts", "5"])
        assert result.exit_code == 1
        assert "InvalidParameter" in result.output

    def test_unknown_command(self, seeded_cli: RewardLedgerService) -> None:
        result = runner.invoke(cli.app, ["smartrewards", "balance"])
        assert result.exit_code == 1
        assert "UnknownCommand" in result.output


class TestTermrewards:
    def test_json(self, seeded_cli: RewardLedgerService) -> None:
        result = runner.invoke(cli.app, ["termrewards", "--json"])
        assert result.exit_code == 0, result.output
        assert [t["level"] for t in json.loads(result.output)] == [1, 2, 3]


class TestDatabaseCommands:
    def test_seed_then_query(self, cli_db: Path) -> None:
        assert runner.invoke(cli.app, ["init-db"]).exit_code == 0
        seeded = runner.invoke(cli.app, ["seed"])
        assert seeded.exit_code == 0
        assert "seeded" in seeded.output
        again = runner.invoke(cli.app, ["seed"])
        assert "skipping" in again.output

        result = runner.invoke(cli.app, ["smartrewards", "history", "--json"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 4
        assert cli_db.exists()
