"""
Tests for hireflow.services.storage_service: paths, public URLs and GridFS storage.
"""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from gridfs.errors import NoFile
from pymongo.errors import AutoReconnect

from hireflow.core.exceptions import StorageError
from hireflow.services import GridFSResumeStorage, build_public_url, build_storage_path


class FakeGridOut:
    def __init__(self, content: bytes, metadata: dict):
        self._content = content
        self.metadata = metadata

    async def read(self) -> bytes:
        return self._content


class FakeGridBucket:
    """The subset of AsyncIOMotorGridFSBucket the storage uses."""

    def __init__(self, error: Exception = None):
        self.files: dict[str, FakeGridOut] = {}
        self.error = error

    def find(self, query: dict):
        matches = [query["filename"]] if query["filename"] in self.files else []

        async def to_list(length: int):
            return matches[:length]

        return SimpleNamespace(to_list=to_list)

    async def upload_from_stream(self, filename: str, source: bytes, metadata: dict = None):
        if self.error:
            raise self.error
        self.files[filename] = FakeGridOut(source, metadata or {})

    async def open_download_stream_by_name(self, filename: str):
        if filename not in self.files:
            raise NoFile(f"no file named {filename}")
        return self.files[filename]


@pytest.fixture
def grid():
    return FakeGridBucket()


@pytest.fixture
def gridfs_storage(grid):
    return GridFSResumeStorage(grid, bucket="resumes", public_base_url="https://api.example.com/")


class TestStoragePath:
    def test_path_format(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        millis = int(moment.timestamp() * 1000)
        assert build_storage_path("user-1", "cv.pdf", moment) == f"user-1/{millis}_cv.pdf"

    def test_directory_parts_are_dropped(self):
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert build_storage_path("u", "../../etc/cv.pdf", moment).endswith("_cv.pdf")
        assert build_storage_path("u", "C:\\Users\\me\\cv.pdf", moment).endswith("_cv.pdf")

    def test_paths_are_namespaced_by_user(self):
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert build_storage_path("alice", "cv.pdf", moment) != build_storage_path("bob", "cv.pdf", moment)


class TestPublicUrl:
    def test_url_layout(self):
        url = build_public_url("https://api.example.com/", "resumes", "user-1/1_cv.pdf")
        assert url == "https://api.example.com/storage/v1/object/public/resumes/user-1/1_cv.pdf"

    def test_spaces_are_quoted(self):
        url = build_public_url("https://api.example.com", "resumes", "user-1/1_jane doe.pdf")
        assert url.endswith("/user-1/1_jane%20doe.pdf")


class TestGridFSResumeStorage:
    def test_upload_and_download(self, gridfs_storage):
        async def run():
            await gridfs_storage.upload("user-1/1_cv.pdf", b"%PDF", "application/pdf")
            return await gridfs_storage.download("user-1/1_cv.pdf")

        stored = asyncio.run(run())

        assert stored.content == b"%PDF"
        assert stored.content_type == "application/pdf"

    def test_existing_path_is_not_overwritten(self, gridfs_storage, grid):
        async def run():
            await gridfs_storage.upload("user-1/1_cv.pdf", b"first", "application/pdf")
            await gridfs_storage.upload("user-1/1_cv.pdf", b"second", "application/pdf")

        with pytest.raises(StorageError, match="already exists"):
            asyncio.run(run())
        assert asyncio.run(grid.files["user-1/1_cv.pdf"].read()) == b"first"

    def test_driver_error_becomes_storage_error(self):
        storage = GridFSResumeStorage(
            FakeGridBucket(error=AutoReconnect("connection lost")), "resumes", "https://api.example.com"
        )

        with pytest.raises(StorageError, match="connection lost"):
            asyncio.run(storage.upload("user-1/1_cv.pdf", b"%PDF", "application/pdf"))

    def test_missing_object(self, gridfs_storage):
        with pytest.raises(StorageError, match="Object not found"):
            asyncio.run(gridfs_storage.download("user-1/missing.pdf"))

    def test_public_url(self, gridfs_storage):
        assert gridfs_storage.get_public_url("user-1/1_cv.pdf") == (
            "https://api.example.com/storage/v1/object/public/resumes/user-1/1_cv.pdf"
        )
