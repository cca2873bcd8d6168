"""Newton-Raphson solver for the IRR of irregularly timed cash flows.

Finds ``rate`` such that ``sum(cf_i * (1 + rate) ** -t_i) == 0`` where ``t_i``
is measured in fractional years. The solver never returns an approximate
rate: it either converges within tolerance or reports failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from .models import CashFlow


@dataclass
class IRRSolution:
    """Result of a single root-finding run."""

    rate: Optional[float]
    converged: bool
    iterations: int
    reason: Optional[str] = None


class IRRSolver:
    """Newton-Raphson IRR solver with divergence guards."""

    def __init__(
        self,
        initial_guess: float = 0.10,
        tolerance: float = 1e-6,
        max_iterations: int = 100,
        min_rate: float = -0.99,
        max_rate: float = 10.0,
    ) -> None:
        self.initial_guess = initial_guess
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.min_rate = min_rate
        self.max_rate = max_rate
        self.logger = logger.bind(module="irr_solver")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def solve(self, cash_flows: Sequence[CashFlow]) -> IRRSolution:
        """Solve for the IRR of ``cash_flows``.

        Args:
            cash_flows: Flows with their timing in years from today.

        Returns:
            IRRSolution whose ``rate`` is None unless the iteration converged.
        """
        if len(cash_flows) < 2:
            return IRRSolution(rate=None, converged=False, iterations=0, reason="fewer than two cash flows")

        amounts = np.array([cf.amount for cf in cash_flows], dtype=np.float64)
        times = np.array([cf.years for cf in cash_flows], dtype=np.float64)
        return self.solve_arrays(amounts, times)

    def solve_arrays(self, amounts: np.ndarray, times: np.ndarray) -> IRRSolution:
        """Solve for the IRR given parallel arrays of amounts and times."""
        if amounts.shape != times.shape or amounts.size < 2:
            return IRRSolution(rate=None, converged=False, iterations=0, reason="fewer than two cash flows")

        rate = self.initial_guess
        for iteration in range(1, self.max_iterations + 1):
            npv, derivative = self.npv_and_derivative(amounts, times, rate)

            if abs(npv) < self.tolerance:
                self.logger.debug("IRR converged to {:.6f} after {} iterations", rate, iteration)
                return IRRSolution(rate=rate, converged=True, iterations=iteration)

            if abs(derivative) < self.tolerance:
                self.logger.debug("NPV derivative vanished at rate {:.6f}", rate)
                return IRRSolution(rate=None, converged=False, iterations=iteration, reason="flat NPV derivative")

            rate = rate - npv / derivative

            if rate < self.min_rate or rate > self.max_rate:
                self.logger.debug("IRR iteration left ({}, {}) at {:.4f}", self.min_rate, self.max_rate, rate)
                return IRRSolution(rate=None, converged=False, iterations=iteration, reason="rate out of bounds")

        self.logger.debug("IRR did not converge within {} iterations", self.max_iterations)
        return IRRSolution(
            rate=None,
            converged=False,
            iterations=self.max_iterations,
            reason="iteration limit reached",
        )

    @staticmethod
    def npv_and_derivative(amounts: np.ndarray, times: np.ndarray, rate: float) -> tuple[float, float]:
        """NPV at ``rate`` and its derivative with respect to ``rate``."""
        discount = np.power(1.0 + rate, -times)
        npv = float(np.dot(amounts, discount))
        derivative = float(np.dot(-times * amounts, discount / (1.0 + rate)))
        return npv, derivative


__all__ = ["IRRSolution", "IRRSolver"]
