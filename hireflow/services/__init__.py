"""
External service adapters for hireflow.

- storage_service: resume object storage (GridFS) and public URLs
- screening_client: HTTP client for the forwarding proxy
"""

from hireflow.services.screening_client import ScreeningProxyClient, ScreeningResponse
from hireflow.services.storage_service import (
    GridFSResumeStorage,
    ResumeStorage,
    StoredObject,
    build_public_url,
    build_storage_path,
)

__all__ = [
    "GridFSResumeStorage",
    "ResumeStorage",
    "ScreeningProxyClient",
    "ScreeningResponse",
    "StoredObject",
    "build_public_url",
    "build_storage_path",
]
