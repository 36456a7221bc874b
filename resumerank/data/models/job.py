"""
Job posting data models for ResumeRank.
"""

from typing import Optional

from resumerank.utils.constants import JobStatus

from .base import BaseDocument


class Job(BaseDocument):
    """A job posting; supplies the context text for resume analysis."""

    user_id: str
    title: str
    description: str = ""
    requirements: Optional[str] = None
    location: Optional[str] = None
    salary_range: Optional[str] = None
    status: JobStatus = JobStatus.OPEN

    def is_owned_by(self, user_id: str) -> bool:
        """Check whether the given user created this job."""
        return bool(user_id) and self.user_id == user_id

    @property
    def has_description(self) -> bool:
        """Whether the job has a usable description."""
        return bool(self.description and self.description.strip())

    def build_context_text(self) -> str:
        """Build the job description text handed to the AI analysis."""
        lines = [
            f"Title: {self.title}",
            f"Description: {self.description}",
        ]
        if self.requirements:
            lines.append(f"Requirements: {self.requirements}")
        if self.location:
            lines.append(f"Location: {self.location}")
        return "\n".join(lines).strip()

    class Settings:
        """MongoDB collection settings."""

        name = "jobs"
        indexes = ["user_id", "status"]
