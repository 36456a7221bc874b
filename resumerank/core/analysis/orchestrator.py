"""
Analysis orchestrator.

Runs the single-candidate pipeline

    AUTHORIZING -> CHECKING_RESUME -> RATE_LIMITING -> FETCHING ->
    ANALYZING -> PERSISTING -> NOTIFYING -> LOGGING -> DONE

with FAILED reachable from every non-terminal stage, and the bulk
variant that runs the pipeline once per candidate with per-item
failure isolation.
"""

import asyncio
from typing import Optional

from resumerank.core.errors import (
    AnalysisError,
    FetchError,
    InternalError,
    InvalidArgumentError,
    InvalidJobContextError,
    MissingResumeError,
    PersistenceError,
    QuotaExhaustedError,
    RateLimitedError,
    UnauthorizedError,
)
from resumerank.core.quota_guard import QuotaGuard
from resumerank.core.rate_limiter import RateLimiter
from resumerank.data.models.activity import create_analysis_completed_entry
from resumerank.data.models.analysis import (
    AnalysisOutcome,
    AnalysisResult,
    BulkAnalysisReport,
    ItemResult,
)
from resumerank.data.models.candidate import Candidate
from resumerank.data.models.job import Job
from resumerank.data.repositories.candidate_repository import CandidateRepository
from resumerank.data.repositories.job_repository import JobRepository
from resumerank.services.activity_logger import ActivityLogger
from resumerank.services.blob_store import BlobNotFound, BlobStore, mime_type_for_extension
from resumerank.services.broadcaster import (
    Broadcaster,
    CandidateChangeEvent,
    job_topic,
    user_topic,
)
from resumerank.utils.constants import ACTION_AI_ANALYSIS, AnalysisStage
from resumerank.utils.logger import get_logger

from .ai_client import AIAnalysisClient

logger = get_logger(__name__)


class AnalysisOrchestrator:
    """
    Composes the analysis collaborators into single and bulk flows.

    Every collaborator is injected; the orchestrator holds no clients of
    its own. Broadcast, quota increment and activity logging run after a
    successful persist, each in its own error boundary, and are awaited
    before the call returns.
    """

    def __init__(
        self,
        candidates: CandidateRepository,
        jobs: JobRepository,
        rate_limiter: RateLimiter,
        quota_guard: QuotaGuard,
        blob_store: BlobStore,
        ai_client: AIAnalysisClient,
        broadcaster: Broadcaster,
        activity_logger: ActivityLogger,
        max_bulk_candidates: int = 50,
        bulk_concurrency: int = 3,
    ) -> None:
        if bulk_concurrency < 1:
            raise ValueError("bulk_concurrency must be at least 1")
        self._candidates = candidates
        self._jobs = jobs
        self._rate_limiter = rate_limiter
        self._quota_guard = quota_guard
        self._blob_store = blob_store
        self._ai_client = ai_client
        self._broadcaster = broadcaster
        self._activity_logger = activity_logger
        self.max_bulk_candidates = max_bulk_candidates
        self.bulk_concurrency = bulk_concurrency

    # -------------------------------------------------------------------------
    # Single Candidate
    # -------------------------------------------------------------------------

    async def submit_single_analysis(
        self,
        candidate_id: str,
        requesting_user_id: str,
        reanalysis: bool = False,
    ) -> AnalysisOutcome:
        """
        Analyze one candidate on behalf of a user.

        Pipeline failures are returned in the outcome, never raised.
        """
        try:
            result = await self._analyze(candidate_id, requesting_user_id, reanalysis)
        except AnalysisError as e:
            stage = e.stage.value if e.stage else "UNKNOWN"
            logger.warning(
                f"Analysis of candidate {candidate_id} failed at {stage}: "
                f"{e.kind} - {e.message}"
            )
            self._log_stage(candidate_id, AnalysisStage.FAILED)
            return AnalysisOutcome.failed(candidate_id, e)

        return AnalysisOutcome.succeeded(candidate_id, result)

    async def _analyze(
        self, candidate_id: str, user_id: str, reanalysis: bool
    ) -> AnalysisResult:
        stage = AnalysisStage.AUTHORIZING
        try:
            self._log_stage(candidate_id, stage)
            candidate, job = await self._authorize(candidate_id, user_id)

            stage = AnalysisStage.CHECKING_RESUME
            self._log_stage(candidate_id, stage)
            if not candidate.has_resume:
                raise MissingResumeError("Resume not found for candidate")

            stage = AnalysisStage.RATE_LIMITING
            self._log_stage(candidate_id, stage)
            if not await self._rate_limiter.check(user_id, ACTION_AI_ANALYSIS):
                raise RateLimitedError("Too many analysis requests. Please try again later.")
            if not await self._quota_guard.admit(user_id):
                raise QuotaExhaustedError("AI credit quota exceeded")

            stage = AnalysisStage.FETCHING
            self._log_stage(candidate_id, stage)
            if not job.has_description:
                raise InvalidJobContextError("Job description not found")
            resume_bytes = await self._fetch_resume(candidate)
            mime_type = mime_type_for_extension(candidate.resume_extension)

            stage = AnalysisStage.ANALYZING
            self._log_stage(candidate_id, stage)
            result = await self._ai_client.analyze(
                resume_bytes, mime_type, job.build_context_text()
            )

            stage = AnalysisStage.PERSISTING
            self._log_stage(candidate_id, stage)
            await self._persist(candidate_id, result)
        except AnalysisError as e:
            raise e.at_stage(stage)
        except Exception as e:
            logger.exception(
                f"Unexpected error analyzing candidate {candidate_id} at {stage.value}"
            )
            raise InternalError(str(e) or type(e).__name__, stage=stage) from e

        self._log_stage(candidate_id, AnalysisStage.NOTIFYING)
        self._log_stage(candidate_id, AnalysisStage.LOGGING)
        await asyncio.gather(
            self._broadcast_change(candidate),
            self._consume_credit(user_id),
            self._record_activity(candidate, user_id, result, reanalysis),
        )

        self._log_stage(candidate_id, AnalysisStage.DONE)
        logger.info(f"Analyzed candidate {candidate_id}: score={result.score}")
        return result

    async def _authorize(self, candidate_id: str, user_id: str) -> tuple[Candidate, Job]:
        """Load the candidate and its job; the job's creator owns both."""
        if not user_id:
            raise UnauthorizedError("Unauthorized")

        candidate = await self._candidates.get_by_id_async(candidate_id)
        if candidate is None:
            raise UnauthorizedError("Candidate not found or access denied")

        job = await self._jobs.get_by_id_async(candidate.job_id)
        if job is None or not job.is_owned_by(user_id):
            raise UnauthorizedError("Candidate not found or access denied")

        return candidate, job

    async def _fetch_resume(self, candidate: Candidate) -> bytes:
        try:
            return await self._blob_store.get(candidate.resume_ref)
        except BlobNotFound as e:
            raise FetchError(f"Failed to download resume: {e}") from e
        except Exception as e:
            logger.error(f"Blob store error for candidate {candidate.id_str}: {e}")
            raise FetchError("Failed to download resume") from e

    async def _persist(self, candidate_id: str, result: AnalysisResult) -> None:
        try:
            updated = await self._candidates.record_analysis_async(candidate_id, result)
        except Exception as e:
            logger.error(f"Failed to save analysis for candidate {candidate_id}: {e}")
            raise PersistenceError("Failed to save analysis results") from e
        if not updated:
            raise PersistenceError("Failed to save analysis results")

    # -------------------------------------------------------------------------
    # Best-effort Side Effects
    # -------------------------------------------------------------------------

    async def _broadcast_change(self, candidate: Candidate) -> None:
        payload = CandidateChangeEvent(candidate_id=candidate.id_str).to_payload()
        topics = [job_topic(str(candidate.job_id))]
        if candidate.user_id:
            topics.append(user_topic(candidate.user_id))

        for topic in topics:
            try:
                await self._broadcaster.publish(topic, payload)
            except Exception as e:
                logger.warning(f"Broadcast to '{topic}' failed: {e}")

    async def _consume_credit(self, user_id: str) -> None:
        try:
            await self._quota_guard.consume(user_id)
        except Exception as e:
            logger.warning(f"Failed to increment AI credits for user {user_id}: {e}")

    async def _record_activity(
        self,
        candidate: Candidate,
        user_id: str,
        result: AnalysisResult,
        reanalysis: bool,
    ) -> None:
        entry = create_analysis_completed_entry(
            user_id=user_id,
            candidate_id=candidate.id_str,
            result=result,
            reanalysis=reanalysis,
            job_id=str(candidate.job_id),
        )
        try:
            await self._activity_logger.append(entry)
        except Exception as e:
            logger.warning(f"Activity logging failed for candidate {candidate.id_str}: {e}")

    # -------------------------------------------------------------------------
    # Bulk
    # -------------------------------------------------------------------------

    async def submit_bulk_analysis(
        self,
        candidate_ids: list[str],
        requesting_user_id: str,
    ) -> BulkAnalysisReport:
        """
        Re-analyze up to ``max_bulk_candidates`` candidates.

        Each candidate runs the full single pipeline independently; results
        keep the input order.

        Raises:
            InvalidArgumentError: if the id list is empty or too long
        """
        self._validate_bulk_request(candidate_ids)
        logger.info(
            f"Bulk analysis of {len(candidate_ids)} candidates for user {requesting_user_id}"
        )

        semaphore = asyncio.Semaphore(self.bulk_concurrency)

        async def run_item(candidate_id: str) -> ItemResult:
            async with semaphore:
                return await self._analyze_item(candidate_id, requesting_user_id)

        results = await asyncio.gather(*(run_item(cid) for cid in candidate_ids))
        report = BulkAnalysisReport.from_results(list(results))

        summary = report.summary
        logger.info(
            f"Bulk analysis finished: {summary.successful}/{summary.total} succeeded, "
            f"{summary.failed} failed ({summary.temporary} temporary)"
        )
        return report

    def _validate_bulk_request(self, candidate_ids: Optional[list[str]]) -> None:
        if not isinstance(candidate_ids, (list, tuple)) or not candidate_ids:
            raise InvalidArgumentError("Candidate IDs array is required")
        if len(candidate_ids) > self.max_bulk_candidates:
            raise InvalidArgumentError(
                f"Maximum {self.max_bulk_candidates} candidates can be analyzed at once"
            )
        if not all(isinstance(cid, str) and cid for cid in candidate_ids):
            raise InvalidArgumentError("Candidate IDs must be non-empty strings")

    async def _analyze_item(self, candidate_id: str, user_id: str) -> ItemResult:
        return await self.submit_single_analysis(candidate_id, user_id, reanalysis=True)

    @staticmethod
    def _log_stage(candidate_id: str, stage: AnalysisStage) -> None:
        logger.debug(f"Candidate {candidate_id}: {stage.value}")
