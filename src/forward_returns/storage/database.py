"""
SQLite database module using SQLAlchemy ORM.

This module provides:
- SQLAlchemy ORM models for companies, estimates, exit multiples and submissions
- Database initialization and session management
- Base repository pattern for data access
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, TypeVar

from loguru import logger
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Session,
    relationship,
    sessionmaker,
)

METRIC_TYPES = ("EPS", "FCFPS", "Distributable Earnings", "P/B", "P/NAV")


def utc_now():
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


# =============================================================================
# ORM Models
# =============================================================================


class Company(Base):
    """
    A tracked company.

    The fiscal-year-end date fixes how estimate years are numbered; changing
    it re-labels every stored estimate.
    """

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticker = Column(String(20), unique=True, nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    fiscal_year_end_date = Column(Date, nullable=False)
    metric_type = Column(String(50), default="EPS")  # one of METRIC_TYPES
    current_stock_price = Column(Float, nullable=True)
    price_last_updated = Column(DateTime, nullable=True)
    analyst_initials = Column(String(10), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    estimates = relationship(
        "CompanyEstimate",
        back_populates="company",
        cascade="all, delete-orphan",
        order_by="CompanyEstimate.fiscal_year",
    )
    exit_multiples = relationship("ExitMultiple", back_populates="company", cascade="all, delete-orphan")
    submission_logs = relationship("SubmissionLog", back_populates="company", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, ticker='{self.ticker}', name='{self.company_name}')>"


class CompanyEstimate(Base):
    """
    Per-share metric and dividend estimate for one fiscal year.
    """

    __tablename__ = "estimates"
    __table_args__ = (UniqueConstraint("company_id", "fiscal_year", name="uq_estimate_company_year"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    fiscal_year = Column(Integer, nullable=False)  # absolute, e.g. 2031
    metric_value = Column(Float, nullable=True)
    dividend_value = Column(Float, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    company = relationship("Company", back_populates="estimates")

    def __repr__(self) -> str:
        return f"<CompanyEstimate(id={self.id}, fy={self.fiscal_year}, metric={self.metric_value})>"


class ExitMultiple(Base):
    """
    Valuation multiple assumed at the end of the return horizon.
    """

    __tablename__ = "exit_multiples"
    __table_args__ = (UniqueConstraint("company_id", "time_horizon_years", name="uq_exit_multiple_horizon"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    time_horizon_years = Column(Integer, nullable=False, default=5)
    multiple = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    company = relationship("Company", back_populates="exit_multiples")

    def __repr__(self) -> str:
        return f"<ExitMultiple(id={self.id}, horizon={self.time_horizon_years}, multiple={self.multiple})>"


class SubmissionLog(Base):
    """
    Audit record of an analyst submission.

    Stores a JSON snapshot of the submitted inputs and the return computed
    at submission time.
    """

    __tablename__ = "submission_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    analyst_initials = Column(String(10), nullable=True)
    submitted_at = Column(DateTime, default=utc_now)
    snapshot_data = Column(Text, nullable=True)  # JSON blob

    # Relationships
    company = relationship("Company", back_populates="submission_logs")

    @property
    def snapshot(self) -> dict[str, Any] | None:
        """Deserialize the submission snapshot from JSON."""
        if self.snapshot_data:
            return json.loads(self.snapshot_data)
        return None

    @snapshot.setter
    def snapshot(self, value: dict[str, Any]) -> None:
        """Serialize the submission snapshot to JSON."""
        self.snapshot_data = json.dumps(value, default=str) if value else None

    def __repr__(self) -> str:
        return f"<SubmissionLog(id={self.id}, company_id={self.company_id}, at={self.submitted_at})>"


# =============================================================================
# Database Manager
# =============================================================================


class DatabaseManager:
    """
    Manages SQLite database connections and sessions.

    Example:
        db = DatabaseManager(db_path="./data/forward_returns.db")
        db.initialize()

        with db.session_scope() as session:
            session.add(Company(ticker="MSFT", company_name="Microsoft", ...))
    """

    def __init__(self, db_path: Path | str = "./data/forward_returns.db"):
        """
        Initialize the database manager.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._engine = None
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine."""
        if self._engine is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            db_url = f"sqlite:///{self.db_path}"
            self._engine = create_engine(
                db_url,
                echo=False,
                pool_pre_ping=True,
                connect_args={"check_same_thread": False},
            )
            logger.debug(f"Created database engine: {db_url}")

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def initialize(self) -> None:
        """
        Initialize the database by creating all tables.

        Safe to call repeatedly; existing tables are left alone.
        """
        Base.metadata.create_all(self.engine)
        logger.info(f"Database initialized at {self.db_path}")

    def get_session(self) -> Session:
        """
        Create a new database session.

        Note:
            Caller is responsible for closing the session.
            Prefer using session_scope() context manager instead.
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope around a series of operations.

        Commits on success, rolls back on exception.

        Yields:
            SQLAlchemy session.
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close the database engine and cleanup resources."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.debug("Database engine closed")


# =============================================================================
# Repository Base Class
# =============================================================================

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Subclasses specify the model class and add custom query methods.
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    def create(self, **kwargs) -> ModelType:
        """
        Create a new entity.

        Args:
            **kwargs: Entity attributes.

        Returns:
            The created entity instance.
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()  # Get the ID without committing
        return instance

    def get_by_id(self, entity_id: int) -> ModelType | None:
        """Get an entity by its primary key ID."""
        return self.session.query(self.model).filter(self.model.id == entity_id).first()

    def delete(self, entity_id: int) -> bool:
        """
        Delete an entity by ID.

        Returns:
            True if deleted, False if not found.
        """
        instance = self.get_by_id(entity_id)
        if instance:
            self.session.delete(instance)
            self.session.flush()
            return True
        return False

    def count(self) -> int:
        """Count total number of entities."""
        return self.session.query(self.model).count()
