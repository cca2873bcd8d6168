"""
Config command - Display and validate configuration.
"""
import typer
from rich.console import Console
from rich.table import Table

from forward_returns.config.loader import ConfigLoader

console = Console()


def _section_table(title: str, rows: list[tuple[str, str]]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="green")
    for name, value in rows:
        table.add_row(name, value)
    return table


def config_cmd(
    ctx: typer.Context,
    sources: bool = typer.Option(
        False,
        "--sources",
        help="Also show where configuration values came from",
    ),
):
    """
    Display current configuration settings.

    Shows the merged configuration from all sources:
    - Environment variables (FWD_ prefix, highest priority)
    - Config file from --config option
    - Default config.yaml
    - Built-in defaults (lowest priority)

    Example:
        forward-returns config
        forward-returns --config custom-config.yaml config --sources
    """
    console.print("\n[bold cyan]Forward Returns - Configuration[/bold cyan]\n")

    config_path = ctx.obj.get("config_path")

    try:
        if config_path:
            loader = ConfigLoader(config_path=str(config_path))
            console.print(f"[green]✓[/green] Using config file: [bold]{config_path}[/bold]")
        else:
            loader = ConfigLoader()
            console.print("[green]✓[/green] Using default config: [bold]config.yaml[/bold]")

        config = loader.load_config(validate=False)
        console.print("[green]✓[/green] Configuration loaded successfully\n")

    except Exception as e:
        console.print(f"[bold red]✗[/bold red] Configuration Error: {e!s}", style="red")
        console.print("\n[yellow]Tip:[/yellow] Check your config.yaml file syntax and required fields.")
        raise typer.Exit(code=1) from e

    console.print(
        _section_table(
            "Paths Configuration",
            [
                ("Data Directory", str(config.paths.data_dir)),
                ("Logs Directory", str(config.paths.logs_dir)),
                ("Database", str(config.paths.database_path)),
            ],
        )
    )
    console.print()

    console.print(
        _section_table(
            "Solver Configuration",
            [
                ("Initial Guess", f"{config.solver.initial_guess:g}"),
                ("Tolerance", f"{config.solver.tolerance:g}"),
                ("Max Iterations", str(config.solver.max_iterations)),
                ("Rate Band", f"({config.solver.min_rate:g}, {config.solver.max_rate:g})"),
            ],
        )
    )
    console.print()

    console.print(
        _section_table(
            "Calendar Configuration",
            [
                ("Timezone", config.calendar.timezone),
                ("Days per Year", f"{config.calendar.days_per_year:g}"),
                ("Display Years", str(config.calendar.display_years)),
            ],
        )
    )
    console.print()

    console.print("[bold cyan]Logging Configuration:[/bold cyan]")
    console.print(f"  Level: {config.logging.level}")
    console.print(f"  Console: {config.logging.console}")
    console.print(f"  File: {config.logging.file}")
    console.print(f"  Retention: {config.logging.retention_days} days")
    console.print()

    if sources:
        info = loader.sources_info()
        console.print("[bold cyan]Configuration Sources:[/bold cyan]")
        yaml_info = info["yaml_file"]
        console.print(f"  YAML: {yaml_info['path']} ({'found' if yaml_info['exists'] else 'not found'})")
        env_info = info["environment_variables"]
        console.print(f"  Environment variables: {env_info['count']}")
        for name in env_info["variables"]:
            console.print(f"    {name}")
        if env_info["sections"]:
            console.print(f"  Sections set from environment: {', '.join(env_info['sections'])}")
        console.print()
