"""Forward-return engine: fiscal calendar, cash-flow schedule and IRR solver."""

from .fiscal_calendar import (
    add_years,
    fiscal_year_bounds,
    fiscal_year_end_in,
    fiscal_year_for_date,
    fiscal_year_label,
    fiscal_years_from,
    generate_fiscal_years,
    year_fraction_for_date,
)
from .forward_return import DAYS_PER_YEAR, ForwardReturnSolver
from .irr_solver import IRRSolution, IRRSolver
from .models import (
    HORIZON_YEARS,
    CashFlow,
    Estimate,
    ReturnInputs,
    ReturnResult,
    ReturnStatus,
    index_estimates,
)

__all__ = [
    # Models
    "HORIZON_YEARS",
    "CashFlow",
    "Estimate",
    "ReturnInputs",
    "ReturnResult",
    "ReturnStatus",
    "index_estimates",
    # Fiscal calendar
    "add_years",
    "fiscal_year_bounds",
    "fiscal_year_end_in",
    "fiscal_year_for_date",
    "fiscal_year_label",
    "fiscal_years_from",
    "generate_fiscal_years",
    "year_fraction_for_date",
    # Solvers
    "DAYS_PER_YEAR",
    "ForwardReturnSolver",
    "IRRSolution",
    "IRRSolver",
]
