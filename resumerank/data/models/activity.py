"""
Activity log data models for ResumeRank.

Defines the append-only activity trail written after each
completed analysis.
"""

from typing import Any, Optional

from pydantic import Field

from resumerank.utils.constants import ActivityAction

from .analysis import AnalysisResult
from .base import BaseDocument


class ActivityLogEntry(BaseDocument):
    """
    One entry in the append-only activity trail.

    Entries are inserted once and never updated.
    """

    user_id: str
    action: str
    resource_type: str
    resource_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    class Settings:
        """MongoDB collection settings."""

        name = "activity_log"
        indexes = [
            "user_id",
            "action",
            "resource_type",
            "resource_id",
            "created_at",
        ]


# Utility functions for creating common activity entries

def create_analysis_completed_entry(
    user_id: str,
    candidate_id: str,
    result: AnalysisResult,
    reanalysis: bool = False,
    job_id: Optional[str] = None,
) -> ActivityLogEntry:
    """Create an activity entry for a completed AI analysis."""
    metadata: dict[str, Any] = {
        "score": result.score,
        "analysis": result.model_dump(mode="json"),
    }
    if reanalysis:
        metadata["reanalysis"] = True
    if job_id:
        metadata["job_id"] = job_id

    action = (
        ActivityAction.AI_REANALYSIS_COMPLETED
        if reanalysis
        else ActivityAction.AI_ANALYSIS_COMPLETED
    )
    return ActivityLogEntry(
        user_id=user_id,
        action=action.value,
        resource_type="candidate",
        resource_id=candidate_id,
        metadata=metadata,
    )
