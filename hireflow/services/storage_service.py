"""
Resume object storage for hireflow.

Uploaded resumes are kept in a MongoDB GridFS bucket under a path
namespaced by the uploading user. The forwarding service exposes them at
a public URL so the screening workflow can dereference the original file.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import quote

from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from hireflow.core.exceptions import StorageError
from hireflow.data.models.base import utc_now
from hireflow.utils.constants import DEFAULT_CONTENT_TYPE
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)

PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public"


def build_storage_path(user_id: str, filename: str, now: Optional[datetime] = None) -> str:
    """
    Build a collision-resistant storage path for an upload.

    Args:
        user_id: Owner of the file; becomes the top-level folder.
        filename: Original filename. Directory parts are dropped.
        now: Upload time, defaults to the current UTC time.

    Returns:
        ``"{user_id}/{epoch_millis}_{filename}"``
    """
    moment = now or utc_now()
    millis = int(moment.timestamp() * 1000)
    safe_name = PurePosixPath(filename.replace("\\", "/")).name or "resume"
    return f"{user_id}/{millis}_{safe_name}"


def build_public_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{PUBLIC_OBJECT_PREFIX}/{bucket}/{quote(path)}"


@dataclass
class StoredObject:
    """A file read back from storage."""

    path: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


class ResumeStorage(ABC):
    """Interface the upload pipeline needs from object storage."""

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Bucket name used in public URLs."""

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path``; never overwrites. Returns the path."""

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        """Publicly dereferenceable URL for a stored path."""

    @abstractmethod
    async def download(self, path: str) -> StoredObject:
        """Read a stored object back."""


class GridFSResumeStorage(ResumeStorage):
    """
    GridFS-backed resume storage.

    Usage:
        storage = GridFSResumeStorage(db_manager.get_resume_bucket(),
                                      bucket="resumes",
                                      public_base_url="https://api.example.com")
        path = await storage.upload("user-1/1700000000000_cv.pdf", data, "application/pdf")
    """

    def __init__(self, grid_bucket, bucket: str, public_base_url: str) -> None:
        self._grid = grid_bucket
        self._bucket = bucket
        self._public_base_url = public_base_url

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            existing = await self._grid.find({"filename": path}).to_list(length=1)
            if existing:
                raise StorageError(f"The resource already exists: {path}")

            await self._grid.upload_from_stream(
                path, data, metadata={"contentType": content_type}
            )
        except PyMongoError as e:
            logger.error(f"GridFS upload failed for {path}: {e}")
            raise StorageError(str(e)) from e

        logger.debug(f"Stored {len(data)} bytes at {self._bucket}/{path}")
        return path

    def get_public_url(self, path: str) -> str:
        return build_public_url(self._public_base_url, self._bucket, path)

    async def download(self, path: str) -> StoredObject:
        try:
            grid_out = await self._grid.open_download_stream_by_name(path)
            content = await grid_out.read()
        except NoFile as e:
            raise StorageError(f"Object not found: {path}") from e
        except PyMongoError as e:
            raise StorageError(str(e)) from e

        metadata = grid_out.metadata or {}
        return StoredObject(
            path=path,
            content=content,
            content_type=metadata.get("contentType", DEFAULT_CONTENT_TYPE),
        )
