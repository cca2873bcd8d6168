"""Submission and dashboard workflows on top of the engine and storage."""

from forward_returns.services.dashboard import DashboardBuilder, DashboardRow
from forward_returns.services.submission import (
    EstimatePayload,
    SubmissionError,
    SubmissionPayload,
    SubmissionRecorder,
    inputs_for_company,
    load_submission,
)

__all__ = [
    "DashboardBuilder",
    "DashboardRow",
    "EstimatePayload",
    "SubmissionError",
    "SubmissionPayload",
    "SubmissionRecorder",
    "inputs_for_company",
    "load_submission",
]
