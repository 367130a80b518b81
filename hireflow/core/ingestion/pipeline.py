"""
Per-file resume upload pipeline.

Drives one UploadTask from pending to a terminal state:
storage upload -> public URL -> proxy submission -> result mapping ->
candidate persistence. Steps run strictly in order; any failure ends the
task in ``error`` with a message and never escapes to the caller.
"""

import asyncio
from typing import Any, Awaitable, Optional, Protocol

from hireflow.core.exceptions import PipelineStepError
from hireflow.core.ingestion.mapping import map_analysis
from hireflow.core.ingestion.session import TaskListener, UploadTask
from hireflow.data.models.candidate import CandidateRecord
from hireflow.services.screening_client import ScreeningProxyClient, ScreeningResponse
from hireflow.services.storage_service import ResumeStorage, build_storage_path
from hireflow.utils.constants import (
    PROGRESS_ANALYZED,
    PROGRESS_SUBMITTED,
    PROGRESS_UPLOADED,
)
from hireflow.utils.logger import LoggerMixin, audit_log


class CandidateStore(Protocol):
    async def insert(self, record: CandidateRecord) -> CandidateRecord: ...


def describe_failure(response: ScreeningResponse) -> str:
    """Human readable message for a non-success proxy response."""
    payload = response.payload
    if isinstance(payload, dict):
        detail = payload.get("error") or payload.get("message") or payload.get("raw")
        if detail:
            return f"Screening failed (HTTP {response.status_code}): {detail}"
    return f"Screening service returned HTTP {response.status_code}"


class ResumeUploadPipeline(LoggerMixin):
    """
    Per-file state machine over injected storage, proxy client and store.

    Usage:
        pipeline = ResumeUploadPipeline(storage, client, candidate_repo)
        await pipeline.process(task, job_id, job_title, user_id)
    """

    def __init__(
        self,
        storage: ResumeStorage,
        screening: ScreeningProxyClient,
        candidates: CandidateStore,
        step_timeout: float = 60.0,
    ) -> None:
        self._storage = storage
        self._screening = screening
        self._candidates = candidates
        self._step_timeout = step_timeout

    async def _run_step(self, step: str, call: Awaitable[Any], timeout: Optional[float]) -> Any:
        """Await one step, converting timeouts and failures to PipelineStepError."""
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as e:
            raise PipelineStepError(step, f"{step.capitalize()} timed out after {timeout:g}s") from e
        except PipelineStepError:
            raise
        except Exception as e:
            raise PipelineStepError(step, str(e) or e.__class__.__name__) from e

    async def process(
        self,
        task: UploadTask,
        job_id: str,
        job_title: str,
        user_id: str,
        on_update: Optional[TaskListener] = None,
    ) -> UploadTask:
        """
        Run every step for one task.

        The job and user must already be validated by the caller.
        Returns the same task, now completed or errored.
        """

        def changed() -> None:
            if on_update is None:
                return
            try:
                on_update(task)
            except Exception:
                self.logger.exception(f"{task.filename}: update listener failed")

        task.start()
        changed()

        try:
            resume = task.file
            path = build_storage_path(user_id, resume.filename)
            await self._run_step(
                "storage",
                self._storage.upload(path, resume.content, resume.content_type),
                self._step_timeout,
            )
            task.storage_path = path
            task.resume_url = self._storage.get_public_url(path)
            task.advance(PROGRESS_UPLOADED)
            changed()

            task.advance(PROGRESS_SUBMITTED)
            changed()
            response = await self._run_step(
                "submission",
                self._screening.submit(
                    filename=resume.filename,
                    content=resume.content,
                    content_type=resume.content_type,
                    job_id=job_id,
                    job_title=job_title,
                    user_id=user_id,
                    resume_url=task.resume_url,
                ),
                None,
            )
            task.advance(PROGRESS_ANALYZED)
            changed()

            if not response.ok:
                raise PipelineStepError("submission", describe_failure(response))

            record = map_analysis(
                response.payload,
                job_id=job_id,
                user_id=user_id,
                filename=resume.filename,
                resume_url=task.resume_url,
            )

            saved = await self._run_step(
                "persistence", self._candidates.insert(record), self._step_timeout
            )
        except PipelineStepError as e:
            self.logger.warning(f"{task.filename}: {e.step} failed: {e.message}")
            task.fail(e.message)
        except Exception as e:
            self.logger.exception(f"{task.filename}: unexpected pipeline failure")
            task.fail(str(e) or e.__class__.__name__)
        else:
            task.complete(saved)
            audit_log(
                "candidate_persisted",
                {
                    "candidate_id": str(saved.id),
                    "job_id": job_id,
                    "user_id": user_id,
                    "file": task.filename,
                    "match_score": saved.match_score,
                },
            )

        changed()
        return task
