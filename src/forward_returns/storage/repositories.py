"""
Repository pattern implementations for database entities.

Each repository wraps a session and implements the lookups and upserts the
submission and dashboard flows need.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from sqlalchemy import desc
from sqlalchemy.orm import joinedload

from forward_returns.analytics.models import HORIZON_YEARS, Estimate
from forward_returns.storage.database import (
    BaseRepository,
    Company,
    CompanyEstimate,
    ExitMultiple,
    SubmissionLog,
    utc_now,
)


class CompanyRepository(BaseRepository[Company]):
    """
    Repository for Company entities.
    """

    model = Company

    def find_by_ticker(self, ticker: str) -> Company | None:
        """
        Find a company by ticker (case-insensitive).

        Args:
            ticker: Exchange ticker, e.g. 'MSFT'.

        Returns:
            The company if found, None otherwise.
        """
        return self.session.query(self.model).filter(self.model.ticker == ticker.upper()).first()

    def search(self, text: str) -> list[Company]:
        """Find companies whose ticker or name contains ``text``."""
        pattern = f"%{text}%"
        return (
            self.session.query(self.model)
            .filter(self.model.ticker.ilike(pattern) | self.model.company_name.ilike(pattern))
            .order_by(self.model.ticker)
            .all()
        )

    def get_recent(self, limit: int = 10) -> list[Company]:
        """Most recently updated companies first."""
        return self.session.query(self.model).order_by(desc(self.model.updated_at)).limit(limit).all()

    def get_all_with_estimates(self) -> list[Company]:
        """All companies with estimates and exit multiples eagerly loaded."""
        return (
            self.session.query(self.model)
            .options(joinedload(self.model.estimates), joinedload(self.model.exit_multiples))
            .order_by(self.model.ticker)
            .all()
        )

    def upsert_by_ticker(self, ticker: str, **fields: Any) -> Company:
        """
        Create the company or update the existing row with the same ticker.

        Args:
            ticker: Exchange ticker (stored upper-case).
            **fields: Column values to set.

        Returns:
            The created or updated company.
        """
        company = self.find_by_ticker(ticker)
        if company is None:
            return self.create(ticker=ticker.upper(), **fields)

        for key, value in fields.items():
            if hasattr(company, key):
                setattr(company, key, value)
        company.updated_at = utc_now()
        self.session.flush()
        return company

    def update_price(self, ticker: str, price: float) -> Company | None:
        """
        Record a new stock price and its timestamp.

        Returns:
            The updated company, or None if the ticker is unknown.
        """
        company = self.find_by_ticker(ticker)
        if company:
            company.current_stock_price = price
            company.price_last_updated = utc_now()
            self.session.flush()
        return company


class EstimateRepository(BaseRepository[CompanyEstimate]):
    """
    Repository for per-fiscal-year estimates.
    """

    model = CompanyEstimate

    def find(self, company_id: int, fiscal_year: int) -> CompanyEstimate | None:
        return (
            self.session.query(self.model)
            .filter(self.model.company_id == company_id, self.model.fiscal_year == fiscal_year)
            .first()
        )

    def upsert(
        self,
        company_id: int,
        fiscal_year: int,
        metric_value: Optional[float],
        dividend_value: Optional[float],
    ) -> CompanyEstimate:
        """Insert or overwrite the estimate for ``(company_id, fiscal_year)``."""
        row = self.find(company_id, fiscal_year)
        if row is None:
            return self.create(
                company_id=company_id,
                fiscal_year=fiscal_year,
                metric_value=metric_value,
                dividend_value=dividend_value,
            )

        row.metric_value = metric_value
        row.dividend_value = dividend_value
        row.updated_at = utc_now()
        self.session.flush()
        return row

    def upsert_many(self, company_id: int, estimates: Iterable[Estimate]) -> list[CompanyEstimate]:
        """
        Upsert a batch of estimates.

        Years with neither a metric nor a dividend are skipped, so an empty
        form row never overwrites stored data.
        """
        rows: list[CompanyEstimate] = []
        for estimate in estimates:
            if estimate.metric_value is None and estimate.dividend_value is None:
                continue
            rows.append(
                self.upsert(company_id, estimate.fiscal_year, estimate.metric_value, estimate.dividend_value)
            )
        return rows


class ExitMultipleRepository(BaseRepository[ExitMultiple]):
    """
    Repository for exit multiples.
    """

    model = ExitMultiple

    def find_for_company(self, company_id: int, time_horizon_years: int = HORIZON_YEARS) -> ExitMultiple | None:
        return (
            self.session.query(self.model)
            .filter(self.model.company_id == company_id, self.model.time_horizon_years == time_horizon_years)
            .first()
        )

    def upsert(self, company_id: int, multiple: float, time_horizon_years: int = HORIZON_YEARS) -> ExitMultiple:
        """Insert or overwrite the multiple for ``(company_id, horizon)``."""
        row = self.find_for_company(company_id, time_horizon_years)
        if row is None:
            return self.create(company_id=company_id, time_horizon_years=time_horizon_years, multiple=multiple)

        row.multiple = multiple
        row.updated_at = utc_now()
        self.session.flush()
        return row


class SubmissionLogRepository(BaseRepository[SubmissionLog]):
    """
    Repository for submission audit records.
    """

    model = SubmissionLog

    def create_log(self, company_id: int, analyst_initials: Optional[str], snapshot: dict[str, Any]) -> SubmissionLog:
        log = SubmissionLog(company_id=company_id, analyst_initials=analyst_initials)
        log.snapshot = snapshot
        self.session.add(log)
        self.session.flush()
        return log

    def find_by_company(self, company_id: int) -> list[SubmissionLog]:
        """Submissions for a company, newest first."""
        return (
            self.session.query(self.model)
            .filter(self.model.company_id == company_id)
            .order_by(desc(self.model.submitted_at), desc(self.model.id))
            .all()
        )

    def find_latest(self, company_id: int) -> SubmissionLog | None:
        logs = self.find_by_company(company_id)
        return logs[0] if logs else None
