"""
Calculate command - Expected return for a submission file, without storing it.
"""
import json
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from forward_returns.cli.commands.common import TODAY_OPTION_HELP, build_solver, print_result, resolve_today
from forward_returns.services.submission import SubmissionError, load_submission
from forward_returns.utils.log_setup import LogPhases, log_context

console = Console()

# Module-level defaults for typer arguments
FILE_ARGUMENT = typer.Argument(
    ...,
    help="Submission file (YAML or JSON)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)
TODAY_OPTION = typer.Option(None, "--today", "-t", help=TODAY_OPTION_HELP)
JSON_OPTION = typer.Option(False, "--json", help="Print the result as JSON")


def calculate_cmd(
    ctx: typer.Context,
    file: Path = FILE_ARGUMENT,
    today: str | None = TODAY_OPTION,
    as_json: bool = JSON_OPTION,
):
    """
    Calculate the expected 5-year return for a submission file.

    Nothing is written to the database.

    Example:
        forward-returns calculate msft.yaml
        forward-returns calculate msft.yaml --today 2026-01-01 --json
    """
    as_of = resolve_today(ctx, today)

    try:
        payload = load_submission(file)
    except SubmissionError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e

    with log_context(ticker=payload.ticker, phase=LogPhases.CALCULATION, command="calculate"):
        logger.info(f"Calculating forward return as of {as_of.isoformat()}")
        result = build_solver(ctx).calculate(payload.to_return_inputs(), as_of)

    if as_json:
        typer.echo(json.dumps({"ticker": payload.ticker, "as_of": as_of.isoformat(), **result.to_dict()}, indent=2))
        return

    console.print(f"\n[bold cyan]{payload.ticker}[/bold cyan] as of {as_of.isoformat()}\n")
    print_result(console, result)
