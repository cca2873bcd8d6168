"""Dashboard of expected returns across all tracked companies."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from forward_returns.analytics.forward_return import ForwardReturnSolver
from forward_returns.analytics.models import ReturnResult
from forward_returns.services.submission import inputs_for_company
from forward_returns.storage.database import Company
from forward_returns.storage.repositories import CompanyRepository
from forward_returns.utils.log_setup import LogPhases, log_context


@dataclass
class DashboardRow:
    """One company's line on the dashboard."""

    ticker: str
    company_name: str
    metric_type: str
    current_price: Optional[float]
    exit_multiple: Optional[float]
    price_last_updated: Optional[datetime]
    result: ReturnResult

    @property
    def irr(self) -> Optional[float]:
        return self.result.irr


class DashboardBuilder:
    """
    Recompute every company's return as of a given day.

    Returns are never cached: they shift daily as the five-year date moves
    through the fiscal calendar.
    """

    def __init__(self, session: Session, solver: Optional[ForwardReturnSolver] = None) -> None:
        self.companies = CompanyRepository(session)
        self.solver = solver or ForwardReturnSolver()
        self.logger = logger.bind(module="dashboard")

    def build(self, today: date) -> list[DashboardRow]:
        """
        Rows for all companies, highest IRR first.

        Companies without an IRR sort last, by ticker.
        """
        with log_context(phase=LogPhases.REPORTING):
            rows = [self._row_for(company, today) for company in self.companies.get_all_with_estimates()]
            rows.sort(key=lambda row: (row.irr is None, -(row.irr or 0.0), row.ticker))
            self.logger.info(
                "Built dashboard for {} companies ({} with IRR)",
                len(rows),
                sum(1 for row in rows if row.irr is not None),
            )
            return rows

    def build_for_ticker(self, ticker: str, today: date) -> Optional[DashboardRow]:
        company = self.companies.find_by_ticker(ticker)
        if company is None:
            return None
        return self._row_for(company, today)

    def _row_for(self, company: Company, today: date) -> DashboardRow:
        inputs = inputs_for_company(company)
        with log_context(ticker=company.ticker):
            result = self.solver.calculate(inputs, today)
        return DashboardRow(
            ticker=company.ticker,
            company_name=company.company_name,
            metric_type=company.metric_type,
            current_price=company.current_stock_price,
            exit_multiple=inputs.exit_multiple,
            price_last_updated=company.price_last_updated,
            result=result,
        )
