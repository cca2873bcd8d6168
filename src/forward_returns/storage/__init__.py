"""
Storage module for the forward-return tracker.

This module provides:
- SQLite database (SQLAlchemy ORM) for companies, estimates, exit multiples
  and submission logs
- Repositories for the lookups and upserts the workflows need
"""

from forward_returns.storage.database import (
    METRIC_TYPES,
    Base,
    BaseRepository,
    Company,
    CompanyEstimate,
    DatabaseManager,
    ExitMultiple,
    SubmissionLog,
)
from forward_returns.storage.repositories import (
    CompanyRepository,
    EstimateRepository,
    ExitMultipleRepository,
    SubmissionLogRepository,
)

__all__ = [
    # Database Models
    "METRIC_TYPES",
    "Base",
    "Company",
    "CompanyEstimate",
    "ExitMultiple",
    "SubmissionLog",
    # Database Manager
    "DatabaseManager",
    "BaseRepository",
    # Repositories
    "CompanyRepository",
    "EstimateRepository",
    "ExitMultipleRepository",
    "SubmissionLogRepository",
]
