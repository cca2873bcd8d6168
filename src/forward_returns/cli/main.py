"""
Main CLI application using Typer.
Provides entry point and command routing for Forward Returns.
"""
from pathlib import Path

import typer
from rich.console import Console

from forward_returns.cli.commands.calculate import calculate_cmd
from forward_returns.cli.commands.config import config_cmd
from forward_returns.cli.commands.dashboard import dashboard_cmd
from forward_returns.cli.commands.history import history_cmd
from forward_returns.cli.commands.price import price_cmd
from forward_returns.cli.commands.search import search_cmd
from forward_returns.cli.commands.submit import submit_cmd
from forward_returns.cli.commands.years import years_cmd
from forward_returns.config.loader import ConfigLoader, ConfigurationError
from forward_returns.utils.log_setup import setup_logging

# Initialize Typer app
app = typer.Typer(
    name="forward-returns",
    help="Forward Returns - expected 5-year IRR from analyst estimates",
    add_completion=False,
    rich_markup_mode="rich",
)

# Initialize Rich console for output
console = Console()


def version_callback(value: bool):
    """Display version information."""
    if value:
        try:
            from importlib.metadata import version

            app_version = version("forward-returns")
        except Exception:
            # Fallback if package not installed
            app_version = "0.1.0"

        console.print(f"[bold cyan]Forward Returns[/bold cyan] version [green]{app_version}[/green]")
        raise typer.Exit()


# Module-level typer options
VERSION_OPTION = typer.Option(
    None,
    "--version",
    "-v",
    callback=version_callback,
    is_eager=True,
    help="Show version and exit.",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configuration file (default: ./config.yaml)",
    exists=True,
    dir_okay=False,
    readable=True,
)
VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    help="Enable verbose output (DEBUG level logging)",
)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = VERSION_OPTION,
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Forward Returns - track analyst estimates and rank companies by expected return.

    Use [bold cyan]forward-returns COMMAND --help[/bold cyan] for command-specific help.
    """
    try:
        loader = ConfigLoader(config_path=str(config)) if config else ConfigLoader()
        app_config = loader.load_config(validate=False)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e!s}", style="red")
        console.print(
            "\n[yellow]Tip:[/yellow] Check your config.yaml file or use --config to specify a different path."
        )
        raise typer.Exit(code=1) from e

    # Store config in context for subcommands
    ctx.obj = {
        "config_path": config,
        "verbose": verbose,
        "config": app_config,
    }

    # Initialize logging early
    try:
        log_level = "DEBUG" if verbose else app_config.logging.level
        setup_logging(
            log_level=log_level,
            log_dir=str(app_config.paths.logs_dir),
            console=app_config.logging.console,
            file=app_config.logging.file,
            retention_days=app_config.logging.retention_days,
        )
    except Exception as e:
        console.print(f"[bold red]Logging Setup Error:[/bold red] {e!s}", style="red")
        raise typer.Exit(code=1) from e


app.command(name="calculate")(calculate_cmd)
app.command(name="submit")(submit_cmd)
app.command(name="dashboard")(dashboard_cmd)
app.command(name="price")(price_cmd)
app.command(name="search")(search_cmd)
app.command(name="history")(history_cmd)
app.command(name="years")(years_cmd)
app.command(name="config")(config_cmd)


if __name__ == "__main__":
    app()
