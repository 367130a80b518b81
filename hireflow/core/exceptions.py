"""
Exception hierarchy for hireflow.

Only BatchValidationError is meant to reach callers of the batch
orchestrator; every other failure inside a task is converted into the
task's ``error`` state.
"""


class HireflowError(Exception):
    """Base class for all hireflow errors."""


class BatchValidationError(HireflowError):
    """A batch was rejected before any task started (no job, no files, no user)."""


class InvalidResumeFileError(HireflowError):
    """A file cannot be added to an upload session."""


class TaskStateError(HireflowError):
    """An upload task was asked to make an illegal transition."""


class StorageError(HireflowError):
    """The object storage backend rejected an operation."""


class PipelineStepError(HireflowError):
    """A step of the per-file pipeline failed."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step
        self.message = message

    def __str__(self) -> str:
        return self.message
