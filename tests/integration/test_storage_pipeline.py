"""
Integration tests for the submission and dashboard pipeline.

Tests cover the complete flow through a file-backed SQLite database:
- Submission file → SubmissionRecorder → companies / estimates / logs
- Price updates between submissions
- Dashboard recomputation as "today" moves through the fiscal calendar
- Audit snapshots matching the return computed at submission time
"""

from datetime import date, timedelta

import pytest

from forward_returns.analytics.forward_return import ForwardReturnSolver
from forward_returns.analytics.models import ReturnStatus
from forward_returns.config.loader import load_config_for_testing
from forward_returns.services.dashboard import DashboardBuilder
from forward_returns.services.submission import SubmissionRecorder, load_submission
from forward_returns.storage.database import DatabaseManager
from forward_returns.storage.repositories import CompanyRepository, SubmissionLogRepository

MSFT = """
ticker: MSFT
company_name: Microsoft Corporation
fiscal_year_end_date: 2025-06-30
metric_type: EPS
current_price: 415.20
exit_multiple: 28.0
analyst_initials: JD
estimates:
  - {fiscal_year: 2026, metric_value: 13.10, dividend_value: 3.32}
  - {fiscal_year: 2027, metric_value: 15.05, dividend_value: 3.64}
  - {fiscal_year: 2028, metric_value: 17.20, dividend_value: 4.00}
  - {fiscal_year: 2029, metric_value: 19.40, dividend_value: 4.40}
  - {fiscal_year: 2030, metric_value: 21.70, dividend_value: 4.84}
  - {fiscal_year: 2031, metric_value: 24.10, dividend_value: 5.30}
  - {fiscal_year: 2032, metric_value: 26.60, dividend_value: 5.80}
"""

KO = """
ticker: KO
company_name: The Coca-Cola Company
fiscal_year_end_date: 2025-12-31
metric_type: EPS
current_price: 62.50
exit_multiple: 22.0
estimates:
  - {fiscal_year: 2026, metric_value: 3.00, dividend_value: 2.04}
  - {fiscal_year: 2027, metric_value: 3.20, dividend_value: 2.12}
  - {fiscal_year: 2028, metric_value: 3.40, dividend_value: 2.20}
  - {fiscal_year: 2029, metric_value: 3.60, dividend_value: 2.28}
  - {fiscal_year: 2030, metric_value: 3.80, dividend_value: 2.36}
  - {fiscal_year: 2031, metric_value: 4.00, dividend_value: 2.44}
"""

TODAY = date(2026, 1, 15)


@pytest.fixture
def config(tmp_path):
    return load_config_for_testing(
        cli_overrides={
            "paths": {
                "data_dir": str(tmp_path / "data"),
                "logs_dir": str(tmp_path / "logs"),
                "database_path": str(tmp_path / "data" / "returns.db"),
            }
        }
    )


@pytest.fixture
def db(config):
    manager = DatabaseManager(db_path=config.paths.database_path)
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def solver(config):
    return ForwardReturnSolver.from_config(config.solver, config.calendar)


@pytest.fixture
def submissions(tmp_path):
    paths = {}
    for name, content in (("msft", MSFT), ("ko", KO)):
        path = tmp_path / f"{name}.yaml"
        path.write_text(content, encoding="utf-8")
        paths[name] = path
    return paths


class TestSubmissionToDashboard:
    """End-to-end flow across separate sessions."""

    def test_full_pipeline(self, db, solver, submissions):
        with db.session_scope() as session:
            recorder = SubmissionRecorder(session, solver)
            for path in submissions.values():
                recorder.record(load_submission(path), TODAY)

        with db.session_scope() as session:
            rows = DashboardBuilder(session, solver).build(TODAY)

            assert {row.ticker for row in rows} == {"MSFT", "KO"}
            msft = next(row for row in rows if row.ticker == "MSFT")
            assert msft.result.status == ReturnStatus.OK
            assert msft.result.forward_fiscal_year == 2031
            assert msft.result.next_fiscal_year == 2032
            assert 0.0 < msft.result.average_dividend_yield < 0.05

            # KO has no FY 2032 estimate yet
            ko = next(row for row in rows if row.ticker == "KO")
            assert ko.irr is None
            assert ko.result.missing_data == ["FY 2032 metric estimate"]
            assert rows[-1].ticker == "KO"

    def test_snapshot_matches_dashboard_on_same_day(self, db, solver, submissions):
        with db.session_scope() as session:
            _, result, _ = SubmissionRecorder(session, solver).record(load_submission(submissions["msft"]), TODAY)

        with db.session_scope() as session:
            company = CompanyRepository(session).find_by_ticker("MSFT")
            log = SubmissionLogRepository(session).find_latest(company.id)
            row = DashboardBuilder(session, solver).build_for_ticker("MSFT", TODAY)

            assert log.snapshot["result"]["irr"] == pytest.approx(result.irr)
            assert row.irr == pytest.approx(log.snapshot["result"]["irr"])
            assert len(log.snapshot["result"]["cash_flows"]) == len(result.cash_flows)

    def test_price_drop_raises_expected_return(self, db, solver, submissions):
        with db.session_scope() as session:
            SubmissionRecorder(session, solver).record(load_submission(submissions["msft"]), TODAY)

        with db.session_scope() as session:
            before = DashboardBuilder(session, solver).build_for_ticker("MSFT", TODAY).irr
            CompanyRepository(session).update_price("MSFT", 350.0)

        with db.session_scope() as session:
            after = DashboardBuilder(session, solver).build_for_ticker("MSFT", TODAY).irr

        assert after > before

    def test_returns_recomputed_daily(self, db, solver, submissions):
        """Stored estimates stay valid until the five-year mark needs FY 2033."""
        with db.session_scope() as session:
            SubmissionRecorder(session, solver).record(load_submission(submissions["msft"]), TODAY)

        with db.session_scope() as session:
            builder = DashboardBuilder(session, solver)
            irrs = []
            day = TODAY
            while day <= date(2026, 6, 30):
                irrs.append(builder.build_for_ticker("MSFT", day).irr)
                day += timedelta(days=15)

            assert all(irr is not None for irr in irrs)
            assert max(irrs) - min(irrs) < 0.05

            rolled = builder.build_for_ticker("MSFT", date(2026, 7, 1))
            assert rolled.irr is None
            assert rolled.result.missing_data == ["FY 2033 metric estimate"]

    def test_resubmission_history(self, db, solver, submissions):
        with db.session_scope() as session:
            recorder = SubmissionRecorder(session, solver)
            recorder.record(load_submission(submissions["ko"]), TODAY)

        updated = submissions["ko"].read_text(encoding="utf-8") + "  - {fiscal_year: 2032, metric_value: 4.20}\n"
        submissions["ko"].write_text(updated, encoding="utf-8")

        with db.session_scope() as session:
            _, result, _ = SubmissionRecorder(session, solver).record(load_submission(submissions["ko"]), TODAY)
            assert result.status == ReturnStatus.OK

        with db.session_scope() as session:
            company = CompanyRepository(session).find_by_ticker("KO")
            logs = SubmissionLogRepository(session).find_by_company(company.id)

            assert [log.snapshot["result"]["status"] for log in logs] == ["ok", "insufficient_data"]
            assert len(company.estimates) == 7
