"""
Candidate repository for ResumeRank.

Provides data access for candidate documents, including the single
write that records a completed AI analysis.
"""

from bson import ObjectId

from resumerank.data.models.analysis import AnalysisResult
from resumerank.data.models.candidate import Candidate
from resumerank.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class CandidateRepository(BaseRepository[Candidate]):
    """Repository for candidate document operations."""

    @property
    def collection_name(self) -> str:
        return "candidates"

    @property
    def model_class(self) -> type[Candidate]:
        return Candidate

    # -------------------------------------------------------------------------
    # Analysis Results
    # -------------------------------------------------------------------------

    async def record_analysis_async(
        self, candidate_id: str | ObjectId, result: AnalysisResult
    ) -> bool:
        """
        Write a complete analysis result and mark the candidate REVIEWED.

        Every ``ai_*`` field is overwritten, so repeated analyses leave only
        the most recent result.

        Returns:
            False if no candidate matched the id
        """
        updated = await self.update_fields_async(candidate_id, result.to_candidate_update())
        if updated:
            logger.info(f"Recorded analysis for candidate {candidate_id}: score={result.score}")
        else:
            logger.warning(f"No candidate matched {candidate_id} when recording analysis")
        return updated
