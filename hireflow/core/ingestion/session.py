"""
Upload session state.

An UploadSession is the batch-level task list for one screen visit: files
are added as pending UploadTasks (from a picker or a drag-drop, both end
up here), the orchestrator claims and advances them, and the UI reads
their status and progress. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional
from uuid import uuid4

from hireflow.core.exceptions import InvalidResumeFileError, TaskStateError
from hireflow.data.models.candidate import CandidateRecord
from hireflow.utils.constants import (
    DEFAULT_CONTENT_TYPE,
    PROGRESS_DONE,
    PROGRESS_STARTED,
    RESUME_CONTENT_TYPES,
    SUPPORTED_RESUME_FORMATS,
    UploadStatus,
)

TaskListener = Callable[["UploadTask"], None]


@dataclass(frozen=True)
class ResumeFile:
    """Raw resume payload selected by the user."""

    filename: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_path(cls, path: Path) -> "ResumeFile":
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=RESUME_CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE),
        )

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def size_kb(self) -> float:
        return round(self.size / 1024, 1)


@dataclass
class UploadTask:
    """
    One file's journey through the ingestion pipeline.

    pending -> processing -> completed | error. Terminal states are final
    and progress never moves backwards.
    """

    file: ResumeFile
    id: str = field(default_factory=lambda: str(uuid4()))
    status: UploadStatus = UploadStatus.PENDING
    progress: int = 0
    result: Optional[CandidateRecord] = None
    error: Optional[str] = None
    storage_path: Optional[str] = None
    resume_url: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.file.filename

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def start(self) -> None:
        if self.status != UploadStatus.PENDING:
            raise TaskStateError(f"Task {self.id} is {self.status.value}, not pending")
        self.status = UploadStatus.PROCESSING
        self.advance(PROGRESS_STARTED)

    def advance(self, progress: int) -> None:
        if self.status != UploadStatus.PROCESSING:
            raise TaskStateError(f"Task {self.id} is {self.status.value}, cannot advance")
        self.progress = max(self.progress, min(progress, PROGRESS_DONE))

    def complete(self, record: CandidateRecord) -> None:
        if self.status != UploadStatus.PROCESSING:
            raise TaskStateError(f"Task {self.id} is {self.status.value}, cannot complete")
        self.result = record
        self.progress = PROGRESS_DONE
        self.status = UploadStatus.COMPLETED

    def fail(self, message: str) -> None:
        if self.is_terminal:
            raise TaskStateError(f"Task {self.id} already finished as {self.status.value}")
        self.error = message
        self.status = UploadStatus.ERROR


class UploadSession:
    """
    Ordered list of upload tasks for one session.

    Usage:
        session = UploadSession(max_file_size_mb=5)
        session.add_files([ResumeFile.from_path(p) for p in paths])
        session.remove(task_id)   # only while still pending
    """

    def __init__(
        self,
        max_file_size_mb: int = 5,
        on_update: Optional[TaskListener] = None,
    ) -> None:
        self._tasks: list[UploadTask] = []
        self._max_bytes = max_file_size_mb * 1024 * 1024
        self._on_update = on_update
        self.running = False

    def __iter__(self) -> Iterator[UploadTask]:
        return iter(list(self._tasks))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self._tasks)

    @property
    def tasks(self) -> list[UploadTask]:
        return list(self._tasks)

    @property
    def pending_tasks(self) -> list[UploadTask]:
        return [task for task in self._tasks if task.status == UploadStatus.PENDING]

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self._tasks if task.status == UploadStatus.COMPLETED)

    def validate_file(self, resume: ResumeFile) -> None:
        """Raise InvalidResumeFileError if the file cannot be screened."""
        if resume.extension not in SUPPORTED_RESUME_FORMATS:
            raise InvalidResumeFileError(
                f"{resume.filename}: unsupported format, expected one of "
                f"{', '.join(SUPPORTED_RESUME_FORMATS)}"
            )
        if resume.size == 0:
            raise InvalidResumeFileError(f"{resume.filename}: file is empty")
        if resume.size > self._max_bytes:
            raise InvalidResumeFileError(
                f"{resume.filename}: {resume.size_kb} KB exceeds the "
                f"{self._max_bytes // (1024 * 1024)} MB limit"
            )

    def add_files(self, files: Iterable[ResumeFile]) -> list[UploadTask]:
        """Validate every file first, then append them all as pending tasks."""
        files = list(files)
        for resume in files:
            self.validate_file(resume)

        added = [UploadTask(file=resume) for resume in files]
        self._tasks.extend(added)
        for task in added:
            self.notify(task)
        return added

    def get(self, task_id: str) -> UploadTask:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise KeyError(task_id)

    def remove(self, task_id: str) -> UploadTask:
        """Drop a task the orchestrator has not claimed yet."""
        task = self.get(task_id)
        if task.status != UploadStatus.PENDING:
            raise TaskStateError(f"Task {task_id} is {task.status.value} and can no longer be removed")
        self._tasks.remove(task)
        return task

    def clear_finished(self) -> int:
        """Forget completed and errored tasks, e.g. before re-adding failed files."""
        before = len(self._tasks)
        self._tasks = [task for task in self._tasks if not task.is_terminal]
        return before - len(self._tasks)

    def notify(self, task: UploadTask) -> None:
        if self._on_update is not None:
            self._on_update(task)
