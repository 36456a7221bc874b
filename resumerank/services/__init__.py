"""
External-facing services for ResumeRank.

This module contains the adapters the analysis pipeline talks to:
resume storage, realtime broadcasting, activity logging and the
Gemini inference backend.
"""

from resumerank.services.activity_logger import ActivityLogger
from resumerank.services.blob_store import (
    BlobNotFound,
    BlobStore,
    GridFSBlobStore,
    LocalBlobStore,
    create_blob_store,
    mime_type_for_extension,
)
from resumerank.services.broadcaster import (
    Broadcaster,
    CandidateChangeEvent,
    InMemoryBroadcaster,
    MongoBroadcaster,
    create_broadcaster,
)
from resumerank.services.gemini_service import GeminiInferenceService, InferenceServiceError

__all__ = [
    "ActivityLogger",
    "BlobNotFound",
    "BlobStore",
    "GridFSBlobStore",
    "LocalBlobStore",
    "create_blob_store",
    "mime_type_for_extension",
    "Broadcaster",
    "CandidateChangeEvent",
    "InMemoryBroadcaster",
    "MongoBroadcaster",
    "create_broadcaster",
    "GeminiInferenceService",
    "InferenceServiceError",
]
