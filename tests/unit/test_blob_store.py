"""
Tests for resumerank.services.blob_store — reference resolution and local storage.
"""

import asyncio

import pytest

from resumerank.data.models.candidate import storage_path_from_ref
from resumerank.services.blob_store import (
    BlobNotFound,
    GridFSBlobStore,
    LocalBlobStore,
    create_blob_store,
    mime_type_for_extension,
)
from resumerank.utils.config import StorageSettings
from resumerank.utils.constants import DOCX_MIME_TYPE, PDF_MIME_TYPE


# ── storage_path_from_ref() ─────────────────────────────────────────────────


class TestStoragePathFromRef:
    def test_public_url(self):
        ref = "https://cdn.example.com/storage/v1/object/public/resumes/abc/jane.pdf"
        assert storage_path_from_ref(ref) == "abc/jane.pdf"

    def test_public_url_with_query(self):
        ref = "https://cdn.example.com/public/resumes/abc/jane.pdf?token=xyz"
        assert storage_path_from_ref(ref) == "abc/jane.pdf"

    def test_bare_path(self):
        assert storage_path_from_ref("job-uploads/jane.docx") == "job-uploads/jane.docx"

    def test_leading_slash_stripped(self):
        assert storage_path_from_ref("/job-uploads/jane.pdf") == "job-uploads/jane.pdf"

    def test_empty_path_after_marker(self):
        assert storage_path_from_ref("https://cdn.example.com/resumes/") is None


class TestMimeTypeForExtension:
    @pytest.mark.parametrize("extension", ["pdf", "PDF", ".pdf"])
    def test_pdf(self, extension):
        assert mime_type_for_extension(extension) == PDF_MIME_TYPE

    @pytest.mark.parametrize("extension", ["docx", "doc", "txt", None])
    def test_everything_else_is_docx(self, extension):
        assert mime_type_for_extension(extension) == DOCX_MIME_TYPE


# ── LocalBlobStore ──────────────────────────────────────────────────────────


class TestLocalBlobStore:
    @pytest.fixture
    def store(self, tmp_path):
        (tmp_path / "abc").mkdir()
        (tmp_path / "abc" / "jane.pdf").write_bytes(b"%PDF-1.7")
        return LocalBlobStore(tmp_path)

    def test_get_by_path(self, store):
        assert asyncio.run(store.get("abc/jane.pdf")) == b"%PDF-1.7"

    def test_get_by_public_url(self, store):
        url = "https://cdn.example.com/public/resumes/abc/jane.pdf"
        assert asyncio.run(store.get(url)) == b"%PDF-1.7"

    def test_missing_file(self, store):
        with pytest.raises(BlobNotFound):
            asyncio.run(store.get("abc/missing.pdf"))

    def test_empty_reference(self, store):
        with pytest.raises(BlobNotFound):
            asyncio.run(store.get(""))

    def test_path_traversal_rejected(self, store):
        with pytest.raises(BlobNotFound, match="escapes"):
            asyncio.run(store.get("../secret.pdf"))


class TestCreateBlobStore:
    def test_local_backend(self, tmp_path):
        store = create_blob_store(StorageSettings(backend="local", local_directory=tmp_path))
        assert isinstance(store, LocalBlobStore)

    def test_gridfs_backend(self, fake_db):
        store = create_blob_store(StorageSettings(backend="gridfs"), fake_db)
        assert isinstance(store, GridFSBlobStore)

    def test_gridfs_backend_requires_database(self):
        with pytest.raises(ValueError):
            create_blob_store(StorageSettings(backend="gridfs"))
