"""
Pydantic data models for ResumeRank.

This module provides the database documents and the result models
returned by the analysis pipeline.
"""

# Base models
from .base import BaseDocument, PyObjectId, TimestampMixin, parse_object_id, utc_now

# Entity models
from .activity import ActivityLogEntry, create_analysis_completed_entry
from .candidate import Candidate
from .job import Job
from .quota import UserQuota

# Analysis results
from .analysis import (
    AnalysisOutcome,
    AnalysisResult,
    BulkAnalysisReport,
    BulkSummary,
    ItemResult,
)

__all__ = [
    # Base
    "BaseDocument",
    "PyObjectId",
    "TimestampMixin",
    "parse_object_id",
    "utc_now",
    # Entities
    "ActivityLogEntry",
    "create_analysis_completed_entry",
    "Candidate",
    "Job",
    "UserQuota",
    # Analysis
    "AnalysisOutcome",
    "AnalysisResult",
    "BulkAnalysisReport",
    "BulkSummary",
    "ItemResult",
]
