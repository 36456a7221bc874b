"""
Application-wide constants for ResumeRank.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "ResumeRank"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# File Types
# =============================================================================

PDF_MIME_TYPE: Final[str] = "application/pdf"
DOCX_MIME_TYPE: Final[str] = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# Marker that separates the storage path inside a public resume URL
RESUME_URL_MARKER: Final[str] = "/resumes/"


# =============================================================================
# Analysis Constants
# =============================================================================

MIN_SCORE: Final[float] = 0.0
MAX_SCORE: Final[float] = 100.0

# Substrings that mark an inference failure as transient (case-sensitive)
TRANSIENT_ERROR_MARKERS: Final[tuple[str, ...]] = (
    "503",
    "overloaded",
    "rate limit",
    "RESOURCE_EXHAUSTED",
)

# Rate limiter action keys
ACTION_AI_ANALYSIS: Final[str] = "ai_analysis"
ACTION_UPLOAD: Final[str] = "upload"
ACTION_API: Final[str] = "api"


# =============================================================================
# Realtime Topics
# =============================================================================

JOB_TOPIC_TEMPLATE: Final[str] = "job:{job_id}:candidates"
USER_TOPIC_TEMPLATE: Final[str] = "user:{user_id}:candidates"
CANDIDATE_CHANGE_EVENT: Final[str] = "candidate-change"


# =============================================================================
# Enums
# =============================================================================


class CandidateStatus(str, Enum):
    """Status of a candidate in the hiring pipeline."""

    PENDING_REVIEW = "PENDING_REVIEW"
    REVIEWED = "REVIEWED"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEWED = "INTERVIEWED"
    REJECTED = "REJECTED"
    HIRED = "HIRED"


class JobStatus(str, Enum):
    """Status of a job posting."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    PAUSED = "PAUSED"


class Recommendation(str, Enum):
    """Hiring recommendation returned by the AI analysis."""

    HIRE = "HIRE"
    INTERVIEW = "INTERVIEW"
    REJECT = "REJECT"


class ActivityAction(str, Enum):
    """Actions recorded in the activity log by the analysis pipeline."""

    AI_ANALYSIS_COMPLETED = "AI_ANALYSIS_COMPLETED"
    AI_REANALYSIS_COMPLETED = "AI_REANALYSIS_COMPLETED"


class AnalysisStage(str, Enum):
    """Stages of a single-candidate analysis run."""

    AUTHORIZING = "AUTHORIZING"
    CHECKING_RESUME = "CHECKING_RESUME"
    RATE_LIMITING = "RATE_LIMITING"
    FETCHING = "FETCHING"
    ANALYZING = "ANALYZING"
    PERSISTING = "PERSISTING"
    NOTIFYING = "NOTIFYING"
    LOGGING = "LOGGING"
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible from this stage."""
        return self in (AnalysisStage.DONE, AnalysisStage.FAILED)
