"""
History command - Read back a company's submission log.
"""
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from forward_returns.cli.commands.common import open_database
from forward_returns.storage.database import SubmissionLog
from forward_returns.storage.repositories import CompanyRepository, SubmissionLogRepository
from forward_returns.utils.formatting import MISSING, format_date, format_multiple, format_percentage, format_price
from forward_returns.utils.log_setup import log_context

console = Console()

TICKER_ARGUMENT = typer.Argument(..., help="Company ticker, e.g. MSFT")
SHOW_OPTION = typer.Option(None, "--show", "-s", help="Show the full snapshot of one submission by ID")
LATEST_OPTION = typer.Option(False, "--latest", help="Show the full snapshot of the most recent submission")
DELETE_OPTION = typer.Option(None, "--delete", help="Delete one submission record by ID")
DB_OPTION = typer.Option(None, "--db", help="SQLite database file (default: from config)")


def history_cmd(
    ctx: typer.Context,
    ticker: str = TICKER_ARGUMENT,
    show: int | None = SHOW_OPTION,
    latest: bool = LATEST_OPTION,
    delete: int | None = DELETE_OPTION,
    db_path: Path | None = DB_OPTION,
):
    """
    List a company's submissions, newest first, or show one in detail.

    Each submission keeps the inputs as submitted and the return computed
    on the day it was recorded.

    Example:
        forward-returns history MSFT
        forward-returns history MSFT --latest
        forward-returns history MSFT --show 3
        forward-returns history MSFT --delete 3
    """
    ticker = ticker.strip().upper()

    db = open_database(ctx, db_path)
    try:
        with log_context(ticker=ticker, command="history"), db.session_scope() as session:
            company = CompanyRepository(session).find_by_ticker(ticker)
            if company is None:
                console.print(f"[red]✗[/red] Unknown ticker: {ticker}")
                raise typer.Exit(code=1)

            logs_repo = SubmissionLogRepository(session)
            log_id = delete if delete is not None else show
            if log_id is not None:
                log = logs_repo.get_by_id(log_id)
                if log is None or log.company_id != company.id:
                    console.print(f"[red]✗[/red] Submission #{log_id} not found for {ticker}")
                    raise typer.Exit(code=1)
                if delete is not None:
                    logs_repo.delete(log_id)
                    selected = []
                else:
                    selected = [log]
            elif latest:
                log = logs_repo.find_latest(company.id)
                selected = [log] if log else []
            else:
                selected = logs_repo.find_by_company(company.id)
    finally:
        db.close()

    if delete is not None:
        console.print(f"[green]✓[/green] Deleted submission #{delete} for {ticker}")
        return

    if not selected:
        console.print(f"[yellow]i[/yellow] No submissions recorded for {ticker}")
        return

    if show is not None or latest:
        _print_snapshot(ticker, selected[0])
        return

    table = Table(title=f"Submission History - {ticker}", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Submitted")
    table.add_column("Analyst")
    table.add_column("As Of")
    table.add_column("Price", justify="right")
    table.add_column("Exit Multiple", justify="right")
    table.add_column("IRR", justify="right", style="green")
    table.add_column("Status")

    for log in selected:
        snapshot = log.snapshot or {}
        inputs = snapshot.get("inputs", {})
        result = snapshot.get("result", {})
        table.add_row(
            str(log.id),
            format_date(log.submitted_at),
            log.analyst_initials or MISSING,
            format_date(snapshot.get("as_of")),
            format_price(inputs.get("current_price")),
            format_multiple(inputs.get("exit_multiple")),
            format_percentage(result.get("irr")),
            result.get("status", MISSING),
        )

    console.print(table)


def _print_snapshot(ticker: str, log: SubmissionLog) -> None:
    snapshot = log.snapshot or {}
    inputs = snapshot.get("inputs", {})
    result = snapshot.get("result", {})

    console.print(
        f"\n[bold cyan]{ticker}[/bold cyan] submission #{log.id} "
        f"by {log.analyst_initials or MISSING} on {format_date(log.submitted_at)}\n"
    )

    summary = Table(title="Submitted Inputs", show_header=True, header_style="bold cyan")
    summary.add_column("Field", style="dim")
    summary.add_column("Value", style="green")
    summary.add_row("Company", inputs.get("company_name") or MISSING)
    summary.add_row("Fiscal Year End", format_date(inputs.get("fiscal_year_end_date")))
    summary.add_row("Metric", inputs.get("metric_type") or MISSING)
    summary.add_row("Price", format_price(inputs.get("current_price")))
    summary.add_row("Exit Multiple", format_multiple(inputs.get("exit_multiple")))
    console.print(summary)

    estimates = inputs.get("estimates", [])
    if estimates:
        table = Table(title="Estimates", show_header=True, header_style="bold cyan")
        table.add_column("Fiscal Year")
        table.add_column("Metric", justify="right")
        table.add_column("Dividend", justify="right")
        for row in estimates:
            table.add_row(
                f"FY {row['fiscal_year']}",
                format_price(row.get("metric_value")),
                format_price(row.get("dividend_value")),
            )
        console.print(table)

    console.print(f"\n[bold]Computed on {format_date(snapshot.get('as_of'))}:[/bold]")
    console.print(f"  IRR: {format_percentage(result.get('irr'))}")
    console.print(f"  Price CAGR: {format_percentage(result.get('price_cagr'))}")
    console.print(f"  Avg Dividend Yield: {format_percentage(result.get('average_dividend_yield'))}")
    console.print(f"  Status: {result.get('status', MISSING)}")
    for item in result.get("missing_data", []):
        console.print(f"  [red]✗[/red] {item}")
