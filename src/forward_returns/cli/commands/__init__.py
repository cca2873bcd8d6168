"""
CLI commands package.
Contains individual command implementations.
"""
from forward_returns.cli.commands.calculate import calculate_cmd
from forward_returns.cli.commands.config import config_cmd
from forward_returns.cli.commands.dashboard import dashboard_cmd
from forward_returns.cli.commands.history import history_cmd
from forward_returns.cli.commands.price import price_cmd
from forward_returns.cli.commands.search import search_cmd
from forward_returns.cli.commands.submit import submit_cmd
from forward_returns.cli.commands.years import years_cmd

__all__ = [
    "calculate_cmd",
    "config_cmd",
    "dashboard_cmd",
    "history_cmd",
    "price_cmd",
    "search_cmd",
    "submit_cmd",
    "years_cmd",
]
