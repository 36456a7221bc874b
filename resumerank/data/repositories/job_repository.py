"""
Job repository for ResumeRank.
"""

from resumerank.data.models.job import Job

from .base import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for job document operations. Jobs are read-only here."""

    @property
    def collection_name(self) -> str:
        return "jobs"

    @property
    def model_class(self) -> type[Job]:
        return Job
