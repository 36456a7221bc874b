"""
Candidate data models for ResumeRank.

Defines the candidate application document together with the
AI analysis fields written by the analysis pipeline.
"""

from typing import Any, Optional, Union

from pydantic import Field, field_validator

from resumerank.utils.constants import (
    MAX_SCORE,
    MIN_SCORE,
    CandidateStatus,
    Recommendation,
    RESUME_URL_MARKER,
)

from .base import BaseDocument, PyObjectId


def storage_path_from_ref(ref: str) -> Optional[str]:
    """
    Storage path of a stored resume reference.

    Public URLs carry the path after the ``/resumes/`` marker; bare
    storage paths are returned without a leading slash.
    """
    ref = ref.strip()
    if RESUME_URL_MARKER in ref:
        path = ref.split(RESUME_URL_MARKER, 1)[1]
    else:
        path = ref.lstrip("/")
    return path.split("?", 1)[0] or None


class Candidate(BaseDocument):
    """
    An application for one job posting.

    Candidates are created by the application intake flow and owned by
    the user who created the parent job. Only the analysis pipeline
    writes the ``ai_*`` fields.
    """

    job_id: PyObjectId
    user_id: str

    # Applicant
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None

    # Resume reference in the blob store (path or public URL)
    resume_ref: Optional[str] = None

    status: CandidateStatus = CandidateStatus.PENDING_REVIEW

    # AI analysis
    ai_score: Optional[Union[int, float]] = None
    ai_summary: Optional[str] = None
    ai_strengths: list[str] = Field(default_factory=list)
    ai_weaknesses: list[str] = Field(default_factory=list)
    ai_recommendation: Optional[Recommendation] = None

    notes: Optional[str] = None

    @field_validator("ai_score", mode="before")
    @classmethod
    def validate_score(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not MIN_SCORE <= v <= MAX_SCORE:
            raise ValueError(f"ai_score must be between {MIN_SCORE} and {MAX_SCORE}")
        return v

    @property
    def has_resume(self) -> bool:
        """Whether a resume file is attached to this application."""
        return bool(self.resume_ref and self.resume_ref.strip())

    @property
    def is_analyzed(self) -> bool:
        """Whether an AI score has been recorded."""
        return self.ai_score is not None

    @property
    def resume_path(self) -> Optional[str]:
        """Storage path of the resume, if one is attached."""
        if not self.has_resume:
            return None
        return storage_path_from_ref(self.resume_ref)

    @property
    def resume_extension(self) -> Optional[str]:
        """Lowercased file extension of the stored resume, without the dot."""
        path = self.resume_path
        if not path or "." not in path.rsplit("/", 1)[-1]:
            return None
        return path.rsplit(".", 1)[-1].lower()

    class Settings:
        """MongoDB collection settings."""

        name = "candidates"
        indexes = [
            "job_id",
            "user_id",
            "status",
            "created_at",
        ]
