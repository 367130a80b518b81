"""
Candidate repository for hireflow.

Persists screened candidates and serves the review screens' reads:
per-job ranking, name search and status counts.
"""

import re
from typing import Optional

from bson import ObjectId

from hireflow.data.models.candidate import CandidateRecord, CandidateStatusUpdate
from hireflow.utils.constants import CandidateStatus
from hireflow.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class CandidateRepository(BaseRepository[CandidateRecord]):
    """Repository for candidate document operations."""

    collection_name = "candidates"
    model_class = CandidateRecord

    async def insert(self, record: CandidateRecord) -> CandidateRecord:
        """Persist a freshly screened candidate; always starts as ``new``."""
        record.status = CandidateStatus.NEW.value
        return await self.create_async(record)

    async def list_for_job(
        self, job_id: str, skip: int = 0, limit: int = 100
    ) -> list[CandidateRecord]:
        """Candidates for a job, best match first."""
        return await self.find_async(
            {"job_id": job_id},
            skip=skip,
            limit=limit,
            sort_by="match_score",
            sort_order=-1,
        )

    async def search_by_name(
        self, user_id: str, query: str, job_id: Optional[str] = None, limit: int = 100
    ) -> list[CandidateRecord]:
        """Case-insensitive substring search on candidate names."""
        filters: dict = {
            "user_id": user_id,
            "name": {"$regex": re.escape(query.strip()), "$options": "i"},
        }
        if job_id:
            filters["job_id"] = job_id
        return await self.find_async(filters, limit=limit)

    async def update_status(
        self, id_value: str | ObjectId, update: CandidateStatusUpdate
    ) -> Optional[CandidateRecord]:
        status = CandidateStatus(update.status)
        logger.info(f"Candidate {id_value} -> {status.value}")
        return await self.update_async(id_value, {"status": status.value})

    async def status_counts(self, user_id: str) -> dict[str, int]:
        """Number of the user's candidates in each review status."""
        counts: dict[str, int] = {}
        for status in CandidateStatus:
            counts[status.value] = await self.count_async(
                {"user_id": user_id, "status": status.value}
            )
        counts["total"] = sum(counts.values())
        return counts
