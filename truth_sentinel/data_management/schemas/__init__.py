"""Schemas for persisted learning-log data."""

from truth_sentinel.data_management.schemas.log_schema import (
    LearningInsights,
    LogVerdict,
    VerificationLogEntry,
    utc_timestamp,
)

__all__ = [
    "LearningInsights",
    "LogVerdict",
    "VerificationLogEntry",
    "utc_timestamp",
]
