"""
Error taxonomy for the resume analysis pipeline.

Every failure a caller can observe is an ``AnalysisError`` subclass
carrying its taxonomy ``kind`` and whether retrying later may help.
"""

from typing import Optional

from resumerank.utils.constants import AnalysisStage


class AnalysisError(Exception):
    """Base class for all analysis pipeline failures."""

    kind: str = "AnalysisError"
    is_temporary: bool = False

    def __init__(self, message: str = "", stage: Optional[AnalysisStage] = None) -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.stage = stage

    def at_stage(self, stage: AnalysisStage) -> "AnalysisError":
        """Attach the failing stage unless one is already recorded."""
        if self.stage is None:
            self.stage = stage
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r}, stage={self.stage})"


class UnauthorizedError(AnalysisError):
    """The requesting user does not own the candidate, or it does not exist."""

    kind = "Unauthorized"


class InvalidArgumentError(AnalysisError):
    """The request itself is malformed."""

    kind = "InvalidArgument"


class MissingResumeError(AnalysisError):
    """The candidate has no resume reference."""

    kind = "MissingResume"


class InvalidJobContextError(AnalysisError):
    """The parent job has no usable description."""

    kind = "InvalidJobContext"


class FetchError(AnalysisError):
    """The resume could not be read from the blob store."""

    kind = "FetchError"


class RateLimitedError(AnalysisError):
    """The per-user throttle was exceeded."""

    kind = "RateLimited"
    is_temporary = True


class QuotaExhaustedError(AnalysisError):
    """The user has no AI credits left."""

    kind = "QuotaExhausted"


class ProviderError(AnalysisError):
    """Base class for inference provider failures."""

    kind = "ProviderError"


class TransientProviderError(ProviderError):
    """Inference failed with an overload or throttle error on every attempt."""

    kind = "TransientProviderError"
    is_temporary = True


class PermanentProviderError(ProviderError):
    """Inference failed in a way retrying will not fix."""

    kind = "PermanentProviderError"


class PersistenceError(AnalysisError):
    """Analysis results could not be written."""

    kind = "PersistenceError"


class InternalError(AnalysisError):
    """An unexpected exception escaped a pipeline stage."""

    kind = "InternalError"


def is_transient_message(text: str, markers: tuple[str, ...]) -> bool:
    """Check whether an error text contains any transient marker (case-sensitive)."""
    return any(marker in text for marker in markers)
