"""
Application-wide constants for hireflow.

Enumerations for persisted statuses, upload task lifecycle values and the
path-segment pairs the webhook endpoint resolver knows how to swap.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "hireflow"
APP_DISPLAY_NAME: Final[str] = "Hireflow Resume Screening"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# File Types
# =============================================================================

SUPPORTED_RESUME_FORMATS: Final[tuple[str, ...]] = (
    ".pdf",
    ".docx",
    ".txt",
)

RESUME_CONTENT_TYPES: Final[dict[str, str]] = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"


# =============================================================================
# Webhook Endpoint Variants
# =============================================================================

# n8n serves a registered workflow under /webhook/ when active and under
# /webhook-test/ while the editor is listening.
WEBHOOK_PRODUCTION_SEGMENT: Final[str] = "/webhook/"
WEBHOOK_TEST_SEGMENT: Final[str] = "/webhook-test/"

# Trailing resource names that have both been used for the screening workflow
WEBHOOK_RESOURCE_ALIASES: Final[tuple[tuple[str, str], ...]] = (
    ("candidate-screening", "resume-screening"),
)


# =============================================================================
# Upload Progress Milestones
# =============================================================================

PROGRESS_STARTED: Final[int] = 10
PROGRESS_UPLOADED: Final[int] = 30
PROGRESS_SUBMITTED: Final[int] = 50
PROGRESS_ANALYZED: Final[int] = 80
PROGRESS_DONE: Final[int] = 100


# =============================================================================
# Enums
# =============================================================================


class CandidateStatus(str, Enum):
    """Review status of a screened candidate."""

    NEW = "new"
    SHORTLISTED = "shortlisted"
    SCHEDULED = "scheduled"
    REJECTED = "rejected"


class JobStatus(str, Enum):
    """Status of a job posting."""

    ACTIVE = "active"
    DRAFT = "draft"
    CLOSED = "closed"


class WorkType(str, Enum):
    """Where the work for a job posting happens."""

    ONSITE = "OnSite"
    HYBRID = "Hybrid"
    REMOTE = "Remote"


class ExperienceBand(str, Enum):
    """Years-of-experience bands offered on job postings."""

    ENTRY = "0-1"
    JUNIOR = "1-3"
    MID = "3-5"
    SENIOR = "5-8"
    LEAD = "8-12"
    EXECUTIVE = "12+"


class GrowthPotential(str, Enum):
    """Growth-potential category assigned by the screening workflow."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class UploadStatus(str, Enum):
    """Lifecycle of one file in an upload session."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.ERROR)
