"""Analyst submissions: file schema, loading and persistence.

A submission file (YAML or JSON) carries everything the engine needs for one
company. ``SubmissionRecorder`` stores it and logs a snapshot of the inputs
together with the return computed at submission time.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Literal, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy.orm import Session

from forward_returns.analytics.forward_return import ForwardReturnSolver
from forward_returns.analytics.models import Estimate, ReturnInputs, ReturnResult
from forward_returns.storage.database import Company, SubmissionLog
from forward_returns.storage.repositories import (
    CompanyRepository,
    EstimateRepository,
    ExitMultipleRepository,
    SubmissionLogRepository,
)
from forward_returns.utils.log_setup import LogPhases, log_context

MetricType = Literal["EPS", "FCFPS", "Distributable Earnings", "P/B", "P/NAV"]


class SubmissionError(Exception):
    """Raised when a submission file cannot be read or validated."""

    pass


class EstimatePayload(BaseModel):
    """One row of the estimates table."""

    fiscal_year: int = Field(ge=1900, le=2200)
    metric_value: Optional[float] = None
    dividend_value: Optional[float] = None

    def to_estimate(self) -> Estimate:
        return Estimate(
            fiscal_year=self.fiscal_year,
            metric_value=self.metric_value,
            dividend_value=self.dividend_value,
        )


class SubmissionPayload(BaseModel):
    """A company's inputs as submitted by an analyst."""

    ticker: str = Field(min_length=1, max_length=20)
    company_name: Optional[str] = None
    fiscal_year_end_date: Optional[date] = None
    metric_type: MetricType = "EPS"
    current_price: Optional[float] = None
    exit_multiple: Optional[float] = None
    analyst_initials: Optional[str] = Field(default=None, max_length=10)
    estimates: list[EstimatePayload] = Field(default_factory=list)

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, v):
        """Tickers are stored upper-case without surrounding whitespace."""
        return v.strip().upper()

    @field_validator("estimates")
    @classmethod
    def validate_unique_years(cls, v):
        """Each fiscal year may appear only once."""
        seen: set[int] = set()
        for row in v:
            if row.fiscal_year in seen:
                raise ValueError(f"Duplicate estimate for fiscal year {row.fiscal_year}")
            seen.add(row.fiscal_year)
        return v

    def to_return_inputs(self) -> ReturnInputs:
        """Engine inputs built from this submission."""
        return ReturnInputs.build(
            current_price=self.current_price,
            exit_multiple=self.exit_multiple,
            fiscal_year_end_date=self.fiscal_year_end_date,
            estimates=[row.to_estimate() for row in self.estimates],
        )


def load_submission(path: Path | str) -> SubmissionPayload:
    """Read and validate a submission file.

    JSON files are read with the YAML parser, which accepts them as-is.

    Raises:
        SubmissionError: If the file is missing, unparseable or invalid.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise SubmissionError(f"Submission file not found: {path}") from e
    except yaml.YAMLError as e:
        raise SubmissionError(f"Invalid YAML/JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise SubmissionError(f"Submission file {path} must contain a mapping")

    try:
        return SubmissionPayload.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{' -> '.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise SubmissionError(f"Invalid submission in {path}: {details}") from e


class SubmissionRecorder:
    """Persist submissions and log the return computed for them."""

    def __init__(self, session: Session, solver: Optional[ForwardReturnSolver] = None) -> None:
        self.session = session
        self.solver = solver or ForwardReturnSolver()
        self.companies = CompanyRepository(session)
        self.estimates = EstimateRepository(session)
        self.exit_multiples = ExitMultipleRepository(session)
        self.logs = SubmissionLogRepository(session)
        self.logger = logger.bind(module="submission")

    def record(self, payload: SubmissionPayload, today: date) -> tuple[Company, ReturnResult, SubmissionLog]:
        """Upsert the company, its estimates and exit multiple, then log it.

        Raises:
            SubmissionError: If a new company is submitted without a name or
                fiscal-year-end date.
        """
        with log_context(ticker=payload.ticker, phase=LogPhases.STORAGE):
            existing = self.companies.find_by_ticker(payload.ticker)
            if existing is None and (not payload.company_name or payload.fiscal_year_end_date is None):
                raise SubmissionError(
                    f"New company {payload.ticker} needs company_name and fiscal_year_end_date"
                )

            fields = {"metric_type": payload.metric_type}
            if payload.company_name:
                fields["company_name"] = payload.company_name
            if payload.fiscal_year_end_date is not None:
                fields["fiscal_year_end_date"] = payload.fiscal_year_end_date
            if payload.analyst_initials:
                fields["analyst_initials"] = payload.analyst_initials
            company = self.companies.upsert_by_ticker(payload.ticker, **fields)

            if payload.current_price is not None:
                self.companies.update_price(company.ticker, payload.current_price)

            self.estimates.upsert_many(company.id, [row.to_estimate() for row in payload.estimates])
            if payload.exit_multiple is not None:
                self.exit_multiples.upsert(company.id, payload.exit_multiple)

            self.session.refresh(company)
            result = self.solver.calculate(inputs_for_company(company), today)

            snapshot = {
                "as_of": today.isoformat(),
                "inputs": payload.model_dump(mode="json"),
                "result": result.to_dict(),
            }
            log = self.logs.create_log(company.id, payload.analyst_initials, snapshot)
            self.logger.info(
                "Recorded submission for {} (status={}, irr={})",
                company.ticker,
                result.status.value,
                result.irr,
            )
            return company, result, log


def inputs_for_company(company: Company) -> ReturnInputs:
    """Engine inputs assembled from a stored company and its relations."""
    multiple = next(
        (m.multiple for m in company.exit_multiples if m.time_horizon_years == 5),
        None,
    )
    return ReturnInputs.build(
        current_price=company.current_stock_price,
        exit_multiple=multiple,
        fiscal_year_end_date=company.fiscal_year_end_date,
        estimates=[
            Estimate(
                fiscal_year=row.fiscal_year,
                metric_value=row.metric_value,
                dividend_value=row.dividend_value,
            )
            for row in company.estimates
        ],
    )


__all__ = [
    "EstimatePayload",
    "SubmissionError",
    "SubmissionPayload",
    "SubmissionRecorder",
    "inputs_for_company",
    "load_submission",
]
