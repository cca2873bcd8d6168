"""
Helpers shared by the CLI commands.
"""
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from forward_returns.analytics.fiscal_calendar import fiscal_year_label
from forward_returns.analytics.forward_return import ForwardReturnSolver
from forward_returns.analytics.models import ReturnResult, ReturnStatus
from forward_returns.config.schema import AppConfig
from forward_returns.storage.database import DatabaseManager
from forward_returns.utils.clock import parse_day
from forward_returns.utils.formatting import format_date, format_percentage, format_price

TODAY_OPTION_HELP = "Calculation date as YYYY-MM-DD (default: today in the configured timezone)"


def get_config(ctx: typer.Context) -> AppConfig:
    """Configuration loaded by the main callback, or defaults."""
    obj = ctx.obj or {}
    config = obj.get("config")
    if config is None:
        config = AppConfig()
    return config


def resolve_today(ctx: typer.Context, value: str | None) -> date:
    """
    Parse a ``--today`` option value.

    Raises:
        typer.BadParameter: If the value is not an ISO date.
    """
    config = get_config(ctx)
    try:
        return parse_day(value, config.calendar.timezone)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def build_solver(ctx: typer.Context) -> ForwardReturnSolver:
    config = get_config(ctx)
    return ForwardReturnSolver.from_config(config.solver, config.calendar)


def open_database(ctx: typer.Context, db_path: Path | None = None) -> DatabaseManager:
    """Open (and create if needed) the configured or given SQLite database."""
    config = get_config(ctx)
    db = DatabaseManager(db_path=db_path or config.paths.database_path)
    db.initialize()
    return db


def result_table(result: ReturnResult, title: str = "Expected 5-Year Return") -> Table:
    """Summary table of a calculation result."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Measure", style="dim")
    table.add_column("Value", style="green", justify="right")

    table.add_row("IRR", format_percentage(result.irr))
    table.add_row("Price CAGR", format_percentage(result.price_cagr))
    table.add_row("Avg Dividend Yield", format_percentage(result.average_dividend_yield))
    table.add_row("Future Price", format_price(result.future_price))
    table.add_row("Interpolated Metric", format_price(result.interpolated_metric))
    if result.forward_fiscal_year is not None:
        table.add_row(
            "Fiscal Years",
            f"{fiscal_year_label(result.forward_fiscal_year)} / {fiscal_year_label(result.next_fiscal_year)}",
        )
    if result.interpolation_weight is not None:
        table.add_row("Interpolation Weight", f"{result.interpolation_weight:.4f}")
    table.add_row("Status", result.status.value)
    return table


def cash_flow_table(result: ReturnResult) -> Table:
    table = Table(title="Cash Flows", show_header=True, header_style="bold cyan")
    table.add_column("Flow", style="dim")
    table.add_column("Date")
    table.add_column("Years", justify="right")
    table.add_column("Amount", justify="right")

    for flow in result.cash_flows:
        table.add_row(flow.label, format_date(flow.payment_date), f"{flow.years:.4f}", format_price(flow.amount))
    return table


def print_result(console: Console, result: ReturnResult) -> None:
    """Print a result, listing what is missing when no IRR is available."""
    console.print(result_table(result))
    if result.cash_flows:
        console.print()
        console.print(cash_flow_table(result))

    if result.status == ReturnStatus.NO_CONVERGENCE:
        console.print("\n[yellow]⚠[/yellow] IRR iteration did not converge for these cash flows.")
    elif result.missing_data:
        console.print("\n[yellow]⚠[/yellow] [bold]Insufficient data:[/bold]")
        for item in result.missing_data:
            console.print(f"  [red]✗[/red] {item}")
