"""
Pydantic data models for hireflow.

Job postings and candidate records are the two persisted entities;
upload tasks are session state and live in hireflow.core.ingestion.
"""

from .base import BaseDocument, EmbeddedModel, PyObjectId, utc_now

from .candidate import (
    CandidateRecord,
    CandidateStatusUpdate,
    SkillAnalysis,
)

from .job import (
    JobCreate,
    JobPosting,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "utc_now",
    # Candidate
    "CandidateRecord",
    "CandidateStatusUpdate",
    "SkillAnalysis",
    # Job
    "JobCreate",
    "JobPosting",
]
