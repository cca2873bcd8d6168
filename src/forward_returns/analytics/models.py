"""Shared dataclasses for the forward-return engine."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Optional

# Horizon of every expected-return calculation, in years.
HORIZON_YEARS = 5


class ReturnStatus(str, Enum):
    """Outcome of a forward-return calculation."""

    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    NO_CONVERGENCE = "no_convergence"


@dataclass(frozen=True)
class Estimate:
    """Analyst projection for a single fiscal year.

    ``metric_value`` is the per-share metric the exit multiple applies to
    (EPS, FCFPS, ...). A missing metric means "unknown"; a missing dividend
    counts as zero.
    """

    fiscal_year: int
    metric_value: Optional[float] = None
    dividend_value: Optional[float] = None

    def __post_init__(self) -> None:
        # Decimal and int values from storage or YAML are held as floats
        object.__setattr__(self, "metric_value", _as_float(self.metric_value))
        object.__setattr__(self, "dividend_value", _as_float(self.dividend_value))


def _as_float(value) -> Optional[float]:
    return None if value is None else float(value)


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    """NaN and infinities have no JSON representation."""
    if value is None or math.isfinite(value):
        return value
    return None


@dataclass(frozen=True)
class CashFlow:
    """A single dated cash flow, timed in fractional years from today."""

    amount: float
    years: float
    label: str
    payment_date: Optional[date] = None


def index_estimates(estimates: Iterable[Estimate]) -> dict[int, Estimate]:
    """Key estimates by fiscal year.

    Raises:
        ValueError: If the same fiscal year appears more than once.
    """
    indexed: dict[int, Estimate] = {}
    for estimate in estimates:
        if estimate.fiscal_year in indexed:
            raise ValueError(f"Duplicate estimate for fiscal year {estimate.fiscal_year}")
        indexed[estimate.fiscal_year] = estimate
    return indexed


@dataclass(frozen=True)
class ReturnInputs:
    """Argument bundle for a single forward-return calculation."""

    current_price: Optional[float]
    exit_multiple: Optional[float]
    fiscal_year_end_date: Optional[date]
    estimates: Mapping[int, Estimate] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "current_price", _as_float(self.current_price))
        object.__setattr__(self, "exit_multiple", _as_float(self.exit_multiple))

    @classmethod
    def build(
        cls,
        current_price: Optional[float],
        exit_multiple: Optional[float],
        fiscal_year_end_date: Optional[date],
        estimates: Iterable[Estimate] = (),
    ) -> ReturnInputs:
        """Create inputs from a sequence of estimates, keyed by fiscal year."""
        return cls(
            current_price=current_price,
            exit_multiple=exit_multiple,
            fiscal_year_end_date=fiscal_year_end_date,
            estimates=MappingProxyType(index_estimates(estimates)),
        )

    def metric_for(self, fiscal_year: int) -> Optional[float]:
        estimate = self.estimates.get(fiscal_year)
        return estimate.metric_value if estimate else None

    def dividend_for(self, fiscal_year: int) -> Optional[float]:
        estimate = self.estimates.get(fiscal_year)
        return estimate.dividend_value if estimate else None


@dataclass
class ReturnResult:
    """Expected 5-year return and the intermediate values behind it."""

    irr: Optional[float] = None
    price_cagr: Optional[float] = None
    average_dividend_yield: Optional[float] = None
    future_price: Optional[float] = None
    interpolated_metric: Optional[float] = None
    missing_data: list[str] = field(default_factory=list)
    status: ReturnStatus = ReturnStatus.INSUFFICIENT_DATA
    forward_fiscal_year: Optional[int] = None
    next_fiscal_year: Optional[int] = None
    interpolation_weight: Optional[float] = None
    total_dividends: Optional[float] = None
    average_dividend: Optional[float] = None
    iterations: int = 0
    cash_flows: list[CashFlow] = field(default_factory=list)

    @property
    def has_irr(self) -> bool:
        return self.irr is not None

    def to_dict(self) -> dict:
        """Plain-dict view used for JSON output and submission snapshots.

        Non-finite numbers (a NaN price CAGR for a negative future price) are
        written as None so the result always serializes to valid JSON.
        """
        return {
            "irr": _finite_or_none(self.irr),
            "price_cagr": _finite_or_none(self.price_cagr),
            "average_dividend_yield": _finite_or_none(self.average_dividend_yield),
            "future_price": _finite_or_none(self.future_price),
            "interpolated_metric": _finite_or_none(self.interpolated_metric),
            "missing_data": list(self.missing_data),
            "status": self.status.value,
            "forward_fiscal_year": self.forward_fiscal_year,
            "next_fiscal_year": self.next_fiscal_year,
            "interpolation_weight": _finite_or_none(self.interpolation_weight),
            "total_dividends": _finite_or_none(self.total_dividends),
            "average_dividend": _finite_or_none(self.average_dividend),
            "iterations": self.iterations,
            "cash_flows": [
                {
                    "amount": _finite_or_none(cf.amount),
                    "years": cf.years,
                    "label": cf.label,
                    "payment_date": cf.payment_date.isoformat() if cf.payment_date else None,
                }
                for cf in self.cash_flows
            ],
        }


__all__ = [
    "HORIZON_YEARS",
    "CashFlow",
    "Estimate",
    "ReturnInputs",
    "ReturnResult",
    "ReturnStatus",
    "index_estimates",
]
