"""
Resume blob storage for ResumeRank.

Resumes are read by reference. A reference is either a storage path
or a public URL containing ``/resumes/``.
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from gridfs.errors import NoFile

from resumerank.data.database import DatabaseManager
from resumerank.data.models.candidate import storage_path_from_ref
from resumerank.utils.config import StorageSettings
from resumerank.utils.constants import DOCX_MIME_TYPE, PDF_MIME_TYPE
from resumerank.utils.logger import get_logger

logger = get_logger(__name__)


class BlobNotFound(Exception):
    """Raised when no stored object matches a reference."""


def mime_type_for_extension(extension: Optional[str]) -> str:
    """Mime type sent with a resume: PDF for ``pdf``, DOCX for anything else."""
    if extension and extension.lower().lstrip(".") == "pdf":
        return PDF_MIME_TYPE
    return DOCX_MIME_TYPE


class BlobStore(ABC):
    """Read-only access to stored resume files."""

    async def get(self, ref: str) -> bytes:
        """
        Read the bytes stored under a reference.

        Raises:
            BlobNotFound: if the reference resolves to no stored object
        """
        path = storage_path_from_ref(ref) if ref else None
        if not path:
            raise BlobNotFound(f"Invalid resume reference: {ref!r}")
        data = await self._read(path)
        logger.debug(f"Read {len(data)} bytes for '{path}'")
        return data

    @abstractmethod
    async def _read(self, path: str) -> bytes:
        pass


class GridFSBlobStore(BlobStore):
    """Resumes stored in a MongoDB GridFS bucket, looked up by file name."""

    def __init__(self, db_manager: DatabaseManager, bucket_name: str = "resumes") -> None:
        self._db_manager = db_manager
        self._bucket_name = bucket_name

    async def _read(self, path: str) -> bytes:
        bucket = self._db_manager.get_gridfs_bucket(self._bucket_name)
        try:
            stream = await bucket.open_download_stream_by_name(path)
        except NoFile as e:
            raise BlobNotFound(f"Resume not found in bucket '{self._bucket_name}': {path}") from e
        return await stream.read()


class LocalBlobStore(BlobStore):
    """Resumes stored as files below a local directory."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self._directory / path).resolve()
        if self._directory not in target.parents:
            raise BlobNotFound(f"Resume path escapes storage directory: {path}")
        return target

    async def _read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise BlobNotFound(f"Resume not found: {path}")
        return await asyncio.to_thread(target.read_bytes)


def create_blob_store(
    storage_settings: StorageSettings,
    db_manager: Optional[DatabaseManager] = None,
) -> BlobStore:
    """Build the configured blob store backend."""
    if storage_settings.backend == "local":
        return LocalBlobStore(storage_settings.local_directory)
    if db_manager is None:
        raise ValueError("The gridfs storage backend needs a database manager")
    return GridFSBlobStore(db_manager, bucket_name=storage_settings.bucket_name)
