"""
Dashboard command - All companies ranked by expected return.
"""
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from forward_returns.cli.commands.common import TODAY_OPTION_HELP, build_solver, open_database, resolve_today
from forward_returns.services.dashboard import DashboardBuilder
from forward_returns.utils.formatting import (
    MISSING,
    format_date,
    format_multiple,
    format_percentage,
    format_price,
)
from forward_returns.utils.log_setup import log_context

console = Console()

TODAY_OPTION = typer.Option(None, "--today", "-t", help=TODAY_OPTION_HELP)
DB_OPTION = typer.Option(None, "--db", help="SQLite database file (default: from config)")


def dashboard_cmd(
    ctx: typer.Context,
    today: str | None = TODAY_OPTION,
    db_path: Path | None = DB_OPTION,
):
    """
    Show every tracked company ranked by expected 5-year IRR.

    Example:
        forward-returns dashboard
        forward-returns dashboard --today 2026-06-30
    """
    as_of = resolve_today(ctx, today)

    db = open_database(ctx, db_path)
    try:
        with log_context(command="dashboard"), db.session_scope() as session:
            rows = DashboardBuilder(session, build_solver(ctx)).build(as_of)
    finally:
        db.close()

    if not rows:
        console.print("[yellow]i[/yellow] No companies stored yet. Use [bold]forward-returns submit[/bold] first.")
        return

    table = Table(title=f"Expected 5-Year Returns as of {format_date(as_of)}", show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Company")
    table.add_column("Metric", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Exit Multiple", justify="right")
    table.add_column("IRR", justify="right", style="green")
    table.add_column("Price CAGR", justify="right")
    table.add_column("Div Yield", justify="right")
    table.add_column("Price Updated")
    table.add_column("Missing", style="red")

    for row in rows:
        result = row.result
        table.add_row(
            row.ticker,
            row.company_name,
            row.metric_type,
            format_price(row.current_price),
            format_multiple(row.exit_multiple),
            format_percentage(result.irr),
            format_percentage(result.price_cagr),
            format_percentage(result.average_dividend_yield),
            format_date(row.price_last_updated),
            ", ".join(result.missing_data) if result.missing_data else MISSING,
        )

    console.print(table)
