"""Forward return solver.

Computes a company's expected 5-year annual return from its current price,
exit multiple and per-fiscal-year estimates:

1. The per-share metric at exactly five years out is interpolated between
   the fiscal year containing that date and the following one.
2. ``future_price = interpolated_metric * exit_multiple``.
3. Dividends are placed at fiscal-year midpoints (pro-rated at both ends of
   the window) and, together with the purchase and the terminal price, form
   a dated cash-flow stream whose IRR is the expected return.

Insufficient data and non-convergence are reported in the result, never
raised.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

import numpy as np
from loguru import logger

from .fiscal_calendar import (
    add_years,
    fiscal_year_bounds,
    fiscal_year_for_date,
    year_fraction_for_date,
)
from .irr_solver import IRRSolver
from .models import HORIZON_YEARS, CashFlow, ReturnInputs, ReturnResult, ReturnStatus

DAYS_PER_YEAR = 365.25


class ForwardReturnSolver:
    """Build the 5-year cash-flow schedule for a company and solve its IRR."""

    def __init__(self, irr_solver: Optional[IRRSolver] = None, days_per_year: float = DAYS_PER_YEAR) -> None:
        self.irr_solver = irr_solver or IRRSolver()
        self.days_per_year = days_per_year
        self.logger = logger.bind(module="forward_return")

    @classmethod
    def from_config(cls, solver_config, calendar_config=None) -> ForwardReturnSolver:
        """Create a solver from the ``solver`` and ``calendar`` config sections."""
        irr_solver = IRRSolver(
            initial_guess=solver_config.initial_guess,
            tolerance=solver_config.tolerance,
            max_iterations=solver_config.max_iterations,
            min_rate=solver_config.min_rate,
            max_rate=solver_config.max_rate,
        )
        days_per_year = calendar_config.days_per_year if calendar_config is not None else DAYS_PER_YEAR
        return cls(irr_solver=irr_solver, days_per_year=days_per_year)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def calculate(self, inputs: ReturnInputs, today: date) -> ReturnResult:
        """Calculate the expected 5-year return as of ``today``.

        Args:
            inputs: Price, exit multiple, fiscal-year end and estimates.
            today: Calculation date. Results are valid for this date only.

        Returns:
            ReturnResult. ``irr`` is None when data is missing (``missing_data``
            lists every cause) or when the IRR iteration fails to converge.
        """
        missing = self._validate(inputs)
        fye = inputs.fiscal_year_end_date
        if fye is None:
            return ReturnResult(missing_data=missing)

        five_years = add_years(today, HORIZON_YEARS)
        forward_fy, next_fy = self.required_fiscal_years(fye, today)
        forward_metric = inputs.metric_for(forward_fy)
        next_metric = inputs.metric_for(next_fy)

        if forward_metric is None:
            missing.append(f"FY {forward_fy} metric estimate")
        if next_metric is None:
            missing.append(f"FY {next_fy} metric estimate")

        if missing:
            self.logger.debug("Insufficient data for IRR: {}", ", ".join(missing))
            return ReturnResult(
                missing_data=missing,
                forward_fiscal_year=forward_fy,
                next_fiscal_year=next_fy,
            )

        current_price = float(inputs.current_price)
        weight = year_fraction_for_date(five_years, fye)
        interpolated_metric = weight * forward_metric + (1.0 - weight) * next_metric
        future_price = interpolated_metric * float(inputs.exit_multiple)
        price_cagr = self.price_cagr(future_price, current_price)

        cash_flows = self.build_cash_flows(inputs, today, future_price)
        dividend_flows = [cf.amount for cf in cash_flows[1:-1]]
        total_dividends = float(sum(dividend_flows))
        average_dividend = total_dividends / HORIZON_YEARS
        average_dividend_yield = average_dividend / current_price

        solution = self.irr_solver.solve(cash_flows)
        status = ReturnStatus.OK if solution.converged else ReturnStatus.NO_CONVERGENCE
        if not solution.converged:
            self.logger.warning("IRR did not converge ({})", solution.reason)

        return ReturnResult(
            irr=solution.rate,
            price_cagr=price_cagr,
            average_dividend_yield=average_dividend_yield,
            future_price=future_price,
            interpolated_metric=interpolated_metric,
            missing_data=[],
            status=status,
            forward_fiscal_year=forward_fy,
            next_fiscal_year=next_fy,
            interpolation_weight=weight,
            total_dividends=total_dividends,
            average_dividend=average_dividend,
            iterations=solution.iterations,
            cash_flows=cash_flows,
        )

    def required_fiscal_years(self, fiscal_year_end: date, today: date) -> tuple[int, int]:
        """Fiscal years whose metric estimates bracket the five-year date."""
        five_years = add_years(today, HORIZON_YEARS)
        forward_fy = fiscal_year_for_date(five_years, fiscal_year_end)
        return forward_fy, forward_fy + 1

    def has_sufficient_data(self, inputs: ReturnInputs, today: date) -> bool:
        """True when ``calculate`` would get past its data checks."""
        if self._validate(inputs):
            return False
        forward_fy, next_fy = self.required_fiscal_years(inputs.fiscal_year_end_date, today)
        return inputs.metric_for(forward_fy) is not None and inputs.metric_for(next_fy) is not None

    def build_cash_flows(self, inputs: ReturnInputs, today: date, future_price: float) -> list[CashFlow]:
        """Dated cash flows: purchase, dividends, then the terminal price.

        The first flow is always ``-current_price`` at time 0 and the last is
        ``future_price`` at exactly the horizon; dividends sit in between in
        chronological order.
        """
        fye = inputs.fiscal_year_end_date
        five_years = add_years(today, HORIZON_YEARS)
        current_fy = fiscal_year_for_date(today, fye)

        flows = [CashFlow(amount=-float(inputs.current_price), years=0.0, label="purchase", payment_date=today)]

        # Current fiscal year: remaining share, paid midway to its end
        dividend = inputs.dividend_for(current_fy)
        if dividend and dividend > 0:
            _, end = fiscal_year_bounds(current_fy, fye)
            if end <= five_years:
                partial = year_fraction_for_date(today, fye) * dividend
                if partial > 0:
                    self._append_dividend(flows, partial, today, end, today, f"FY {current_fy} dividend (partial)")

        # Full interior fiscal years
        for fy in range(current_fy + 1, current_fy + HORIZON_YEARS):
            dividend = inputs.dividend_for(fy)
            if not dividend or dividend <= 0:
                continue
            start, end = fiscal_year_bounds(fy, fye)
            if end <= five_years:
                self._append_dividend(flows, dividend, start, end, today, f"FY {fy} dividend")

        # Final fiscal year: full if it closes inside the window, else pro-rated
        final_fy = current_fy + HORIZON_YEARS
        dividend = inputs.dividend_for(final_fy)
        if dividend and dividend > 0:
            start, end = fiscal_year_bounds(final_fy, fye)
            if end <= five_years:
                self._append_dividend(flows, dividend, start, end, today, f"FY {final_fy} dividend")
            else:
                elapsed = (five_years - start).days / (end - start).days
                partial = max(0.0, min(1.0, elapsed)) * dividend
                if partial > 0:
                    self._append_dividend(
                        flows, partial, start, five_years, today, f"FY {final_fy} dividend (partial)"
                    )

        flows.append(
            CashFlow(amount=future_price, years=float(HORIZON_YEARS), label="exit", payment_date=five_years)
        )
        return flows

    @staticmethod
    def price_cagr(future_price: float, current_price: float) -> float:
        """Annualised price appreciation; NaN when ``future_price`` is negative."""
        with np.errstate(invalid="ignore"):
            growth = np.power(np.float64(future_price / current_price), 1.0 / HORIZON_YEARS)
        return float(growth - 1.0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _validate(self, inputs: ReturnInputs) -> list[str]:
        """Names of required scalar inputs that are missing or not positive."""
        missing: list[str] = []
        if inputs.current_price is None or inputs.current_price <= 0:
            missing.append("Current stock price")
        if inputs.exit_multiple is None or inputs.exit_multiple <= 0:
            missing.append("Exit multiple")
        if inputs.fiscal_year_end_date is None:
            missing.append("Fiscal year end date")
        return missing

    def _append_dividend(
        self,
        flows: list[CashFlow],
        amount: float,
        period_start: date,
        period_end: date,
        today: date,
        label: str,
    ) -> None:
        """Add a dividend paid at the midpoint of ``[period_start, period_end]``."""
        midpoint_days = (period_start - today).days + (period_end - period_start).days / 2.0
        years = midpoint_days / self.days_per_year
        if 0 < years <= HORIZON_YEARS:
            payment_date = today + timedelta(days=int(midpoint_days))
            flows.append(CashFlow(amount=amount, years=years, label=label, payment_date=payment_date))


__all__ = ["DAYS_PER_YEAR", "ForwardReturnSolver"]
