"""
Analysis result and outcome models for ResumeRank.

``AnalysisResult`` is the validated output of one inference call.
``AnalysisOutcome`` and ``BulkAnalysisReport`` are what the pipeline
returns to its callers.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from resumerank.core.errors import AnalysisError
from resumerank.utils.constants import (
    MAX_SCORE,
    MIN_SCORE,
    AnalysisStage,
    CandidateStatus,
    Recommendation,
)


class AnalysisResult(BaseModel):
    """
    Structured assessment of a resume against a job description.

    Validation is strict on the fields the pipeline depends on (score,
    summary, strengths) and lenient on the optional ones.
    """

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    score: Union[int, float]
    summary: str
    strengths: list[str]
    weaknesses: list[str] = Field(default_factory=list)
    recommendation: Optional[Recommendation] = None

    @field_validator("score", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("score must be a number")
        if not MIN_SCORE <= v <= MAX_SCORE:
            raise ValueError(f"score must be between {MIN_SCORE} and {MAX_SCORE}")
        return v

    @field_validator("summary", mode="before")
    @classmethod
    def require_summary(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("summary must be a non-empty string")
        return v.strip()

    @field_validator("strengths", mode="before")
    @classmethod
    def require_sequence(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            raise ValueError("strengths must be a list")
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    @field_validator("weaknesses", mode="before")
    @classmethod
    def coerce_weaknesses(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return []
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    @field_validator("recommendation", mode="before")
    @classmethod
    def normalize_recommendation(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return None
        normalized = v.strip().upper()
        if normalized in Recommendation.__members__:
            return normalized
        return None

    def to_candidate_update(self) -> dict[str, Any]:
        """Field values written to the candidate on a successful analysis."""
        return {
            "ai_score": self.score,
            "ai_summary": self.summary,
            "ai_strengths": list(self.strengths),
            "ai_weaknesses": list(self.weaknesses),
            "ai_recommendation": self.recommendation,
            "status": CandidateStatus.REVIEWED.value,
        }


class ResponseModel(BaseModel):
    """Base for models returned to callers; serializes with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_response(self) -> dict[str, Any]:
        """Serialize for an API response, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AnalysisOutcome(ResponseModel):
    """
    Result of analyzing one candidate.

    ``error`` holds the taxonomy kind of the failure. ``is_temporary`` is
    only set on failures.
    """

    candidate_id: Optional[str] = None
    success: bool
    score: Optional[Union[int, float]] = None
    summary: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    is_temporary: Optional[bool] = None
    failed_stage: Optional[AnalysisStage] = None

    @classmethod
    def succeeded(cls, candidate_id: str, result: AnalysisResult) -> "AnalysisOutcome":
        return cls(
            candidate_id=candidate_id,
            success=True,
            score=result.score,
            summary=result.summary,
        )

    @classmethod
    def failed(cls, candidate_id: str, error: AnalysisError) -> "AnalysisOutcome":
        return cls(
            candidate_id=candidate_id,
            success=False,
            error=error.kind,
            message=error.message,
            is_temporary=error.is_temporary,
            failed_stage=error.stage,
        )


# Bulk items carry the same fields as a single outcome
ItemResult = AnalysisOutcome


class BulkSummary(ResponseModel):
    """Counts over the items of one bulk run."""

    total: int = 0
    successful: int = 0
    failed: int = 0
    temporary: int = 0


class BulkAnalysisReport(ResponseModel):
    """Itemized result of a bulk run, in input order."""

    summary: BulkSummary
    results: list[ItemResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[ItemResult]) -> "BulkAnalysisReport":
        successful = sum(1 for r in results if r.success)
        summary = BulkSummary(
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
            temporary=sum(1 for r in results if not r.success and r.is_temporary),
        )
        return cls(summary=summary, results=list(results))
