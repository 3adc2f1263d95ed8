"""Main CLI entry point."""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from rewardledger.services._helpers import dump_json
from rewardledger.services.errors import ErrorKind
from rewardledger.services.schemas import QueryResult

app = typer.Typer(
    name="rewardledger",
    help="Reward ledger query CLI",
    add_completion=False,
)

console = Console()
logger = structlog.get_logger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info-level logs"),
):
    """Reward ledger query CLI."""
    level = logging.INFO if verbose else logging.WARNING
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def run_with_retry(
    query: Callable[[], QueryResult],
    attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> QueryResult:
    """Re-run ``query`` while it reports Busy, up to ``attempts`` extra tries."""
    result: QueryResult = query()
    for attempt in range(attempts):
        if result.error is None or result.error.kind is not ErrorKind.BUSY:
            break
        logger.debug("query_busy_retry", attempt=attempt + 1, delay=delay)
        sleep(delay)
        result = query()
    return result


def _cell(value: object) -> str:
    if isinstance(value, Mapping):
        return ", ".join(f"{k}={v}" for k, v in value.items())
    return str(value)


def render(value: object, title: str) -> None:
    if isinstance(value, list):
        table = Table(title=title)
        if not value:
            console.print(f"[yellow]{title}: no rows[/yellow]")
            return
        for key in value[0]:
            table.add_column(str(key), style="cyan" if key == "address" else None)
        for row in value:
            table.add_row(*(_cell(v) for v in row.values()))
        console.print(table)
        return

    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, v in dict(value).items():
        table.add_row(str(key), _cell(v))
    console.print(table)


def _load_dispatcher():
    from config import get_settings
    from db.connection import get_session_factory
    from rewardledger.services.dispatcher import QueryDispatcher
    from rewardledger.services.ledger import RewardLedgerService
    from rewardledger.services.sync import DatabaseLedgerSync

    settings = get_settings()
    session_factory = get_session_factory()
    service = RewardLedgerService(
        session_factory, consensus=settings.consensus, debug=settings.debug
    )
    try:
        DatabaseLedgerSync(service, session_factory).refresh()
    except (SQLAlchemyError, ValueError) as e:
        console.print(f"[red]Could not load the reward ledger:[/red] {e}")
        raise typer.Exit(code=1) from None
    return QueryDispatcher(service)


def _finish(result: QueryResult, title: str, as_json: bool) -> None:
    if result.error is not None:
        err = result.error
        console.print(f"[red]{err.kind.value}[/red] ({err.code}): {err.message}")
        raise typer.Exit(code=1)
    if as_json:
        console.print_json(dump_json(result.value))
    else:
        render(result.value, title)


@app.command()
def init_db(
    force: bool = typer.Option(False, "--force", "-f", help="Drop and recreate tables")
):
    """Initialize the database schema."""
    from db.connection import init_database

    with console.status("Initializing database..."):
        init_database(drop=force)
        if force:
            console.print("[yellow]Dropped existing tables[/yellow]")

    console.print("[green]Database initialized successfully[/green]")


@app.command()
def seed():
    """Seed a sample reward ledger."""
    from db.connection import get_session, init_database
    from rewardledger.services.sample import seed_sample_ledger

    init_database()
    with get_session() as session:
        created = seed_sample_ledger(session)
    if created:
        console.print("[green]Sample ledger seeded[/green]")
    else:
        console.print("[yellow]Sample ledger already present, skipping[/yellow]")


@app.command()
def smartrewards(
    command: str = typer.Argument(..., help="current | history | payouts | snapshot | check"),
    arg: Optional[str] = typer.Argument(None, help="Round number or address"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """Query the reward ledger."""
    from config import get_settings

    client = get_settings().client
    dispatcher = _load_dispatcher()
    args: list[str] = [arg] if arg is not None else []
    result = run_with_retry(
        lambda: dispatcher.dispatch(command, args),
        attempts=client.retry_attempts,
        delay=client.retry_delay,
    )
    _finish(result, f"smartrewards {command}", as_json)


@app.command()
def termrewards(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """List term deposits with their level and annual yield."""
    from config import get_settings

    client = get_settings().client
    dispatcher = _load_dispatcher()
    result = run_with_retry(
        dispatcher.list_term_rewards,
        attempts=client.retry_attempts,
        delay=client.retry_delay,
    )
    _finish(result, "termrewards", as_json)


if __name__ == "__main__":
    app()
