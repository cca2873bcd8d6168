"""
Years command - Show fiscal years for a fiscal-year-end date.
"""
from datetime import date

import typer
from rich.console import Console
from rich.table import Table

from forward_returns.analytics.fiscal_calendar import (
    fiscal_year_bounds,
    fiscal_year_label,
    fiscal_years_from,
    year_fraction_for_date,
)
from forward_returns.analytics.forward_return import ForwardReturnSolver
from forward_returns.cli.commands.common import TODAY_OPTION_HELP, get_config, resolve_today
from forward_returns.utils.formatting import format_date

console = Console()

FYE_ARGUMENT = typer.Argument(..., help="Fiscal year end date as YYYY-MM-DD (only month/day are used)")
TODAY_OPTION = typer.Option(None, "--today", "-t", help=TODAY_OPTION_HELP)
COUNT_OPTION = typer.Option(None, "--count", "-n", min=1, max=20, help="Number of fiscal years (default: from config)")


def years_cmd(
    ctx: typer.Context,
    fiscal_year_end: str = FYE_ARGUMENT,
    today: str | None = TODAY_OPTION,
    count: int | None = COUNT_OPTION,
):
    """
    List upcoming fiscal years and mark the two the 5-year return needs.

    Example:
        forward-returns years 2025-06-30 --today 2026-01-01
    """
    try:
        fye = date.fromisoformat(fiscal_year_end)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date '{fiscal_year_end}', expected YYYY-MM-DD") from e

    as_of = resolve_today(ctx, today)
    count = count or get_config(ctx).calendar.display_years

    forward_fy, next_fy = ForwardReturnSolver().required_fiscal_years(fye, as_of)
    remaining = year_fraction_for_date(as_of, fye)

    table = Table(title=f"Fiscal Years as of {format_date(as_of)}", show_header=True, header_style="bold cyan")
    table.add_column("Fiscal Year", style="bold")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Needed", style="green")

    for fy in fiscal_years_from(as_of, fye, count):
        start, end = fiscal_year_bounds(fy, fye)
        needed = "✓" if fy in (forward_fy, next_fy) else ""
        table.add_row(fiscal_year_label(fy), format_date(start), format_date(end), needed)

    console.print(table)
    console.print(f"\nRemaining in current fiscal year: {remaining:.1%}")
    console.print(
        f"5-year return needs metric estimates for "
        f"[bold]{fiscal_year_label(forward_fy)}[/bold] and [bold]{fiscal_year_label(next_fy)}[/bold]"
    )
