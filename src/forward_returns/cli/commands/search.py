"""
Search command - Find stored companies by ticker or name.
"""
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from forward_returns.cli.commands.common import open_database
from forward_returns.storage.repositories import CompanyRepository
from forward_returns.utils.formatting import format_date, format_price
from forward_returns.utils.log_setup import log_context

console = Console()

TEXT_ARGUMENT = typer.Argument(None, help="Part of a ticker or company name (omit to list recent companies)")
LIMIT_OPTION = typer.Option(10, "--limit", "-n", min=1, max=100, help="Companies listed when no text is given")
DB_OPTION = typer.Option(None, "--db", help="SQLite database file (default: from config)")


def search_cmd(
    ctx: typer.Context,
    text: str | None = TEXT_ARGUMENT,
    limit: int = LIMIT_OPTION,
    db_path: Path | None = DB_OPTION,
):
    """
    Search tracked companies, or list the most recently updated ones.

    Example:
        forward-returns search micro
        forward-returns search --limit 5
    """
    query = (text or "").strip()

    db = open_database(ctx, db_path)
    try:
        with log_context(command="search"), db.session_scope() as session:
            repo = CompanyRepository(session)
            companies = repo.search(query) if query else repo.get_recent(limit=limit)
            total = repo.count()
    finally:
        db.close()

    if not companies:
        if query:
            console.print(f"[yellow]i[/yellow] No companies match '{query}'")
        else:
            console.print("[yellow]i[/yellow] No companies stored yet. Use [bold]forward-returns submit[/bold] first.")
        return

    title = f"Companies matching '{query}'" if query else "Recently Updated Companies"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Ticker", style="bold")
    table.add_column("Company")
    table.add_column("Fiscal Year End")
    table.add_column("Metric", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Updated")

    for company in companies:
        table.add_row(
            company.ticker,
            company.company_name,
            format_date(company.fiscal_year_end_date),
            company.metric_type or "",
            format_price(company.current_stock_price),
            format_date(company.updated_at),
        )

    console.print(table)
    if not query and total > len(companies):
        console.print(f"Showing {len(companies)} of {total} companies. Use [bold]--limit[/bold] to see more.")
