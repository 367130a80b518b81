"""
Candidate record models for hireflow.

A CandidateRecord is the persisted outcome of one successfully analyzed
resume. The schema is validated when the record is built, so a malformed
analysis payload fails before it reaches the store.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from hireflow.utils.constants import CandidateStatus, GrowthPotential

from .base import BaseDocument, EmbeddedModel

Score = Optional[int]


class SkillAnalysis(EmbeddedModel):
    """How well the candidate matches one skill of the job."""

    name: str = Field(..., min_length=1)
    match: int = Field(default=0, ge=0, le=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CandidateRecord(BaseDocument):
    """
    Screened candidate stored in the ``candidates`` collection.

    Created once per completed upload task and tied to exactly one job.
    Later status changes happen through CandidateStatusUpdate.
    """

    job_id: str = Field(..., min_length=1)

    # Identity and contact
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None

    # Scores, 0-100
    match_score: Score = Field(default=None, ge=0, le=100)
    predictive_score: Score = Field(default=None, ge=0, le=100)
    bias_score: Score = Field(default=None, ge=0, le=100)

    # Analysis breakdown
    skills_analysis: list[SkillAnalysis] = Field(default_factory=list)
    robust_points: list[str] = Field(default_factory=list)
    lacking_points: list[str] = Field(default_factory=list)
    growth_potential: Optional[GrowthPotential] = None
    total_experience: Optional[str] = None
    relevant_experience: Optional[str] = None

    # Source material
    resume_url: Optional[str] = None
    parsed_data: dict[str, Any] = Field(default_factory=dict)

    status: CandidateStatus = CandidateStatus.NEW

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part).upper()[:2]


class CandidateStatusUpdate(BaseModel):
    """Schema for moving a candidate through review."""

    status: CandidateStatus
