"""
Unit tests for the Newton-Raphson IRR solver.
"""
import numpy as np
import pytest

from forward_returns.analytics.irr_solver import IRRSolver
from forward_returns.analytics.models import CashFlow


def flows(*pairs):
    return [CashFlow(amount=amount, years=years, label=f"cf{i}") for i, (amount, years) in enumerate(pairs)]


class TestIRRSolver:
    """Test convergence and failure handling."""

    def test_single_period(self):
        solution = IRRSolver().solve(flows((-100.0, 0.0), (110.0, 1.0)))
        assert solution.converged
        assert solution.rate == pytest.approx(0.10, abs=1e-6)
        assert solution.iterations == 1

    @pytest.mark.parametrize("ratio", [0.5, 0.9, 1.2, 2.0, 4.0])
    def test_closed_form_five_year(self, ratio):
        """A single outflow and terminal inflow solve to the compound growth rate."""
        solution = IRRSolver().solve(flows((-100.0, 0.0), (100.0 * ratio, 5.0)))
        assert solution.converged
        assert solution.rate == pytest.approx(ratio ** 0.2 - 1, abs=1e-6)

    def test_interim_flows_raise_the_rate(self):
        without = IRRSolver().solve(flows((-100.0, 0.0), (120.0, 5.0)))
        with_dividends = IRRSolver().solve(
            flows((-100.0, 0.0), (2.0, 0.5), (2.0, 1.5), (2.0, 2.5), (2.0, 3.5), (2.0, 4.5), (120.0, 5.0))
        )
        assert with_dividends.rate > without.rate

    def test_solution_zeroes_npv(self):
        amounts = np.array([-250.0, 5.0, 5.5, 6.0, 6.5, 300.0])
        times = np.array([0.0, 0.7, 1.7, 2.7, 3.7, 5.0])
        solution = IRRSolver().solve_arrays(amounts, times)
        npv, _ = IRRSolver.npv_and_derivative(amounts, times, solution.rate)
        assert abs(npv) < 1e-6

    def test_fewer_than_two_flows(self):
        solution = IRRSolver().solve(flows((-100.0, 0.0)))
        assert solution.rate is None
        assert not solution.converged
        assert solution.reason == "fewer than two cash flows"

    def test_rate_leaving_band_aborts(self):
        """All-positive flows have no root; the iteration runs away."""
        solution = IRRSolver().solve(flows((100.0, 0.0), (100.0, 1.0)))
        assert solution.rate is None
        assert solution.reason == "rate out of bounds"

    def test_iteration_limit(self):
        solution = IRRSolver(max_iterations=1).solve(flows((-100.0, 0.0), (200.0, 5.0)))
        assert solution.rate is None
        assert solution.iterations == 1
        assert solution.reason == "iteration limit reached"

    def test_flat_derivative(self):
        """Flows at time zero only give an NPV independent of the rate."""
        solution = IRRSolver().solve(flows((-100.0, 0.0), (50.0, 0.0)))
        assert solution.rate is None
        assert solution.reason == "flat NPV derivative"


class TestNPV:
    """Test the NPV and derivative helper."""

    def test_values(self):
        npv, derivative = IRRSolver.npv_and_derivative(np.array([-100.0, 110.0]), np.array([0.0, 1.0]), 0.10)
        assert npv == pytest.approx(0.0, abs=1e-9)
        assert derivative == pytest.approx(-110.0 / 1.1 ** 2)

    def test_derivative_matches_finite_difference(self):
        amounts = np.array([-100.0, 3.0, 3.0, 130.0])
        times = np.array([0.0, 1.2, 2.2, 5.0])
        rate, h = 0.07, 1e-6
        _, derivative = IRRSolver.npv_and_derivative(amounts, times, rate)
        up, _ = IRRSolver.npv_and_derivative(amounts, times, rate + h)
        down, _ = IRRSolver.npv_and_derivative(amounts, times, rate - h)
        assert derivative == pytest.approx((up - down) / (2 * h), rel=1e-5)
