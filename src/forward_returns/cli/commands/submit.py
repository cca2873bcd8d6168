"""
Submit command - Store a submission and log the return computed for it.
"""
from pathlib import Path

import typer
from rich.console import Console

from forward_returns.cli.commands.common import (
    TODAY_OPTION_HELP,
    build_solver,
    open_database,
    print_result,
    resolve_today,
)
from forward_returns.services.submission import SubmissionError, SubmissionRecorder, load_submission
from forward_returns.utils.log_setup import log_context

console = Console()

FILE_ARGUMENT = typer.Argument(
    ...,
    help="Submission file (YAML or JSON)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)
TODAY_OPTION = typer.Option(None, "--today", "-t", help=TODAY_OPTION_HELP)
DB_OPTION = typer.Option(None, "--db", help="SQLite database file (default: from config)")


def submit_cmd(
    ctx: typer.Context,
    file: Path = FILE_ARGUMENT,
    today: str | None = TODAY_OPTION,
    db_path: Path | None = DB_OPTION,
):
    """
    Store a company's estimates and record a submission log entry.

    Example:
        forward-returns submit msft.yaml
    """
    as_of = resolve_today(ctx, today)

    try:
        payload = load_submission(file)
    except SubmissionError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e

    db = open_database(ctx, db_path)
    try:
        with log_context(ticker=payload.ticker, command="submit"), db.session_scope() as session:
            recorder = SubmissionRecorder(session, build_solver(ctx))
            company, result, log = recorder.record(payload, as_of)
            ticker, log_id = company.ticker, log.id
    except SubmissionError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e
    finally:
        db.close()

    console.print(f"[green]✓[/green] Saved {ticker} (submission #{log_id})\n")
    print_result(console, result)
