"""
Job repository for hireflow.

Provides data access operations for job postings.
"""

from typing import Optional

from bson import ObjectId

from hireflow.data.models.job import JobCreate, JobPosting
from hireflow.utils.constants import JobStatus
from hireflow.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class JobRepository(BaseRepository[JobPosting]):
    """Repository for job posting document operations."""

    collection_name = "jobs"
    model_class = JobPosting

    async def create_from_schema(self, user_id: str, data: JobCreate) -> JobPosting:
        """Create a job posting owned by ``user_id``."""
        job = JobPosting(user_id=user_id, **data.model_dump())
        job = await self.create_async(job)
        logger.info(f"Job created: {job.id} ({job.title})")
        return job

    async def list_active_for_user(self, user_id: str, limit: int = 100) -> list[JobPosting]:
        """Jobs a user can upload resumes against."""
        return await self.find_async(
            {"user_id": user_id, "status": JobStatus.ACTIVE.value}, limit=limit
        )

    async def get_for_user(
        self, job_id: str | ObjectId, user_id: str
    ) -> Optional[JobPosting]:
        """Get a job only if it belongs to ``user_id``."""
        job = await self.get_by_id_async(job_id)
        if job is None or job.user_id != user_id:
            return None
        return job

    async def set_status(self, job_id: str | ObjectId, status: JobStatus) -> Optional[JobPosting]:
        return await self.update_async(job_id, {"status": status.value})

    async def get_title(self, job_id: str | ObjectId) -> Optional[str]:
        """Title only, for labelling candidates and uploads."""
        job = await self.get_by_id_async(job_id)
        return job.title if job else None
