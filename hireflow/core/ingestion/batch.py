"""
Batch orchestration of resume uploads.

Validates the batch preconditions, runs every pending task of a session
through the pipeline and reports a summary once all of them are terminal.
Tasks run one at a time in list order unless a higher concurrency is
configured; either way one task's failure never touches its siblings.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

from hireflow.core.exceptions import BatchValidationError
from hireflow.core.ingestion.pipeline import ResumeUploadPipeline
from hireflow.core.ingestion.session import UploadSession, UploadTask
from hireflow.data.models.job import JobPosting
from hireflow.utils.constants import UploadStatus
from hireflow.utils.logger import LoggerMixin, audit_log


class JobLookup(Protocol):
    async def get_for_user(self, job_id: str, user_id: str) -> Optional[JobPosting]: ...


@dataclass
class BatchSummary:
    """Outcome of one batch run."""

    job_id: str
    total: int = 0
    completed: int = 0
    failed: int = 0
    tasks: list[UploadTask] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"{self.completed} resume(s) analyzed successfully."

    @property
    def errors(self) -> dict[str, str]:
        """Filename -> error message for every failed task."""
        return {task.filename: task.error or "" for task in self.tasks if task.status == UploadStatus.ERROR}


class BatchOrchestrator(LoggerMixin):
    """
    Runs an upload session against one job.

    Usage:
        orchestrator = BatchOrchestrator(pipeline, job_repo)
        summary = await orchestrator.run(session, job_id, user_id)
    """

    def __init__(
        self,
        pipeline: ResumeUploadPipeline,
        jobs: JobLookup,
        max_concurrency: int = 1,
    ) -> None:
        self._pipeline = pipeline
        self._jobs = jobs
        self._max_concurrency = max(1, max_concurrency)

    def validate(self, session: UploadSession, job_id: Optional[str], user_id: Optional[str]) -> list[UploadTask]:
        """
        Check preconditions that need no I/O.

        Returns:
            The pending tasks to process.

        Raises:
            BatchValidationError: no job selected, nobody signed in, no
                files, or the session is already running.
        """
        if not job_id:
            raise BatchValidationError("Please select a job first")
        if not user_id:
            raise BatchValidationError("You must be signed in to analyze resumes")
        if session.running:
            raise BatchValidationError("An analysis is already running for this session")
        pending = session.pending_tasks
        if not pending:
            raise BatchValidationError("Please upload at least one resume")
        return pending

    async def _resolve_job(self, job_id: str, user_id: str) -> JobPosting:
        try:
            job = await self._jobs.get_for_user(job_id, user_id)
        except ValueError as e:
            raise BatchValidationError(f"Invalid job id: {job_id}") from e
        if job is None:
            raise BatchValidationError(f"Job not found: {job_id}")
        return job

    async def _process_one(
        self, session: UploadSession, task: UploadTask, job_id: str, job: JobPosting, user_id: str
    ) -> None:
        # The user may have removed the file while earlier tasks ran
        if task.id not in session or task.status != UploadStatus.PENDING:
            return
        await self._pipeline.process(
            task,
            job_id=job_id,
            job_title=job.title,
            user_id=user_id,
            on_update=session.notify,
        )

    async def run(
        self, session: UploadSession, job_id: Optional[str], user_id: Optional[str]
    ) -> BatchSummary:
        """
        Process every pending task of ``session`` against ``job_id``.

        Raises:
            BatchValidationError: before any side effect if a
                precondition fails.
        """
        pending = self.validate(session, job_id, user_id)
        job = await self._resolve_job(job_id, user_id)

        self.logger.info(f"Analyzing {len(pending)} resume(s) for job {job.id} ({job.title})")
        session.running = True
        try:
            if self._max_concurrency == 1:
                for task in pending:
                    await self._process_one(session, task, job_id, job, user_id)
            else:
                limit = asyncio.Semaphore(self._max_concurrency)

                async def bounded(task: UploadTask) -> None:
                    async with limit:
                        await self._process_one(session, task, job_id, job, user_id)

                await asyncio.gather(*(bounded(task) for task in pending))
        finally:
            session.running = False

        processed = [task for task in pending if task.status != UploadStatus.PENDING]
        summary = BatchSummary(
            job_id=job_id,
            total=len(processed),
            completed=sum(1 for t in processed if t.status == UploadStatus.COMPLETED),
            failed=sum(1 for t in processed if t.status == UploadStatus.ERROR),
            tasks=processed,
        )
        self.logger.info(f"Batch finished: {summary.completed}/{summary.total} completed")
        audit_log(
            "batch_finished",
            {"job_id": summary.job_id, "total": summary.total, "completed": summary.completed, "failed": summary.failed},
            audit_type="BATCH",
        )
        return summary
