"""
Gemini inference service for ResumeRank.

Sends a resume file plus an instruction prompt to the Gemini
``generateContent`` REST endpoint and returns the generated text.
"""

import base64
from typing import Any, Optional

import httpx

from resumerank.core.analysis.inference import InferenceService
from resumerank.core.analysis.prompts import CONNECTION_CHECK_PROMPT
from resumerank.utils.config import AISettings, get_settings
from resumerank.utils.logger import get_logger

logger = get_logger(__name__)


class InferenceServiceError(Exception):
    """Raised when the inference backend fails or returns no text."""


class GeminiInferenceService(InferenceService):
    """
    Gemini ``generateContent`` client over httpx.

    The resume is attached as inline base64 data next to the prompt.
    HTTP failures are raised with the status code and response body in
    the message so callers can tell overload and throttling apart from
    other errors.
    """

    def __init__(
        self,
        ai_settings: Optional[AISettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = ai_settings or get_settings().ai
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._settings.timeout_seconds)

    async def __aenter__(self) -> "GeminiInferenceService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def endpoint(self) -> str:
        base_url = self._settings.base_url.rstrip("/")
        return f"{base_url}/models/{self._settings.model}:generateContent"

    async def infer(self, data: bytes, mime_type: str, prompt: str) -> str:
        parts = [
            {
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(data).decode("ascii"),
                }
            },
            {"text": prompt},
        ]
        return await self._generate(parts)

    async def check_connection(self) -> tuple[bool, Optional[str]]:
        """
        Send a trivial prompt to verify the API key and model.

        Returns:
            Tuple of (success, error message)
        """
        try:
            text = await self._generate([{"text": CONNECTION_CHECK_PROMPT}])
        except InferenceServiceError as e:
            logger.error(f"Gemini connection test failed: {e}")
            return False, str(e)
        if not text.strip():
            return False, "Empty response from Gemini"
        return True, None

    async def _generate(self, parts: list[dict[str, Any]]) -> str:
        if not self._settings.api_key:
            raise InferenceServiceError("Gemini API key is not configured")

        payload = {"contents": [{"role": "user", "parts": parts}]}
        headers = {"x-goog-api-key": self._settings.api_key}

        logger.debug(f"Sending Gemini request: model={self.model}")
        try:
            response = await self._client.post(self.endpoint, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Gemini API HTTP error: {status} - {e.response.text}")
            raise InferenceServiceError(
                f"Gemini API error {status}: {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Gemini API request error: {e}")
            raise InferenceServiceError(f"Gemini request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise InferenceServiceError("Gemini returned a non-JSON body") from e

        return self._extract_text(body)

    @staticmethod
    def _extract_text(body: dict[str, Any]) -> str:
        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise InferenceServiceError(f"Gemini blocked the prompt: {block_reason}")

        candidates = body.get("candidates") or []
        if not candidates:
            raise InferenceServiceError("Empty response from Gemini")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text:
            raise InferenceServiceError("Empty response from Gemini")
        return text
