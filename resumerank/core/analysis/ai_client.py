"""
AI analysis client.

Calls the inference backend under a retry policy and validates the
response into an ``AnalysisResult``.
"""

import json
from typing import Optional

from pydantic import ValidationError

from resumerank.core.errors import (
    AnalysisError,
    PermanentProviderError,
    TransientProviderError,
    is_transient_message,
)
from resumerank.core.retry import RetryPolicy, SleepFunction, exponential_backoff
from resumerank.data.models.analysis import AnalysisResult
from resumerank.utils.constants import TRANSIENT_ERROR_MARKERS
from resumerank.utils.logger import get_logger

from .inference import InferenceService
from .prompts import build_analysis_prompt

logger = get_logger(__name__)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    clean = text.strip()
    if clean.startswith("```json"):
        clean = clean.replace("```json", "").replace("```", "")
    elif clean.startswith("```"):
        clean = clean.replace("```", "")
    return clean.strip()


def parse_analysis_response(text: str) -> AnalysisResult:
    """
    Parse raw model output into a validated analysis.

    Raises:
        PermanentProviderError: if the text is not JSON or the structure is invalid
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise PermanentProviderError(f"AI response was not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise PermanentProviderError("Invalid analysis structure")

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        logger.warning(f"AI response failed validation: {e.error_count()} error(s)")
        raise PermanentProviderError("Invalid analysis structure") from e


class AIAnalysisClient:
    """
    Scores a resume against a job description with an inference backend.

    Failures whose text carries an overload or throttling marker are
    retried with exponential backoff. Everything else, including an
    invalid response, fails on the first attempt.
    """

    def __init__(
        self,
        inference: InferenceService,
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        sleep: Optional[SleepFunction] = None,
        transient_markers: tuple[str, ...] = TRANSIENT_ERROR_MARKERS,
    ) -> None:
        self._inference = inference
        self._transient_markers = transient_markers
        self.retry_policy = RetryPolicy(
            max_attempts=max_attempts,
            backoff=exponential_backoff(backoff_base_seconds),
            retryable=self.is_transient,
            sleep=sleep,
        )

    def is_transient(self, exc: BaseException) -> bool:
        """Whether a failed attempt is worth retrying."""
        if isinstance(exc, AnalysisError):
            return False
        return is_transient_message(str(exc), self._transient_markers)

    async def analyze(
        self,
        resume_bytes: bytes,
        mime_type: str,
        job_description: str,
    ) -> AnalysisResult:
        """
        Analyze one resume.

        Raises:
            TransientProviderError: overload/throttling persisted through every attempt
            PermanentProviderError: any other failure, including invalid output
        """
        prompt = build_analysis_prompt(job_description)

        async def attempt() -> AnalysisResult:
            raw = await self._inference.infer(resume_bytes, mime_type, prompt)
            return parse_analysis_response(raw)

        try:
            return await self.retry_policy.run(attempt)
        except PermanentProviderError:
            raise
        except Exception as e:
            if self.is_transient(e):
                logger.error(f"AI analysis still failing after retries: {e}")
                raise TransientProviderError(str(e)) from e
            logger.error(f"AI analysis failed: {e}")
            raise PermanentProviderError(str(e) or type(e).__name__) from e
