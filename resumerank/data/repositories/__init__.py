"""
Database repositories for ResumeRank data access.

This module provides repository classes for all database collections,
implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .activity_repository import ActivityLogRepository
from .candidate_repository import CandidateRepository
from .job_repository import JobRepository
from .quota_repository import QuotaRepository

__all__ = [
    "BaseRepository",
    "ActivityLogRepository",
    "CandidateRepository",
    "JobRepository",
    "QuotaRepository",
]
