"""
Price command - Update a company's current stock price.
"""
from pathlib import Path

import typer
from rich.console import Console

from forward_returns.cli.commands.common import open_database
from forward_returns.storage.repositories import CompanyRepository
from forward_returns.utils.formatting import format_price
from forward_returns.utils.log_setup import log_context

console = Console()

TICKER_ARGUMENT = typer.Argument(..., help="Company ticker, e.g. MSFT")
PRICE_ARGUMENT = typer.Argument(..., help="New stock price")
DB_OPTION = typer.Option(None, "--db", help="SQLite database file (default: from config)")


def price_cmd(
    ctx: typer.Context,
    ticker: str = TICKER_ARGUMENT,
    price: float = PRICE_ARGUMENT,
    db_path: Path | None = DB_OPTION,
):
    """
    Record a new current stock price for a stored company.

    Example:
        forward-returns price MSFT 415.20
    """
    if price <= 0:
        console.print(f"[red]✗[/red] Price must be positive (got {price})")
        raise typer.Exit(code=1)

    db = open_database(ctx, db_path)
    try:
        with log_context(ticker=ticker.upper(), command="price"), db.session_scope() as session:
            company = CompanyRepository(session).update_price(ticker, price)
            found = company is not None
    finally:
        db.close()

    if not found:
        console.print(f"[red]✗[/red] Unknown ticker: {ticker.upper()}")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] {ticker.upper()} price set to {format_price(price)}")
