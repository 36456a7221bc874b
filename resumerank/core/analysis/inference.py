"""
Interface for AI inference backends.
"""

from abc import ABC, abstractmethod


class InferenceService(ABC):
    """Backend that turns a document plus a prompt into generated text."""

    @abstractmethod
    async def infer(self, data: bytes, mime_type: str, prompt: str) -> str:
        """Generate text for a document and prompt."""
        pass
