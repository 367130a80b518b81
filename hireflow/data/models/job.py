"""
Job posting models for hireflow.

A job posting is what uploaded resumes are screened against; the
ingestion pipeline only needs its id and title.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from hireflow.utils.constants import ExperienceBand, JobStatus, WorkType

from .base import BaseDocument


def _clean_skills(skills: list[str]) -> list[str]:
    """Trim, drop blanks and deduplicate while keeping first-seen order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for skill in skills:
        name = skill.strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


class JobPosting(BaseDocument):
    """Job posting stored in the ``jobs`` collection."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    location: Optional[str] = None
    work_type: list[WorkType] = Field(default_factory=list)
    years_experience: Optional[ExperienceBand] = None
    must_have_skills: list[str] = Field(default_factory=list)
    good_to_have_skills: list[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.ACTIVE

    @field_validator("must_have_skills", "good_to_have_skills")
    @classmethod
    def dedupe_skills(cls, v: list[str]) -> list[str]:
        return _clean_skills(v)

    @field_validator("work_type")
    @classmethod
    def dedupe_work_types(cls, v: list[WorkType]) -> list[WorkType]:
        return list(dict.fromkeys(v))

    @property
    def is_active(self) -> bool:
        return self.status == JobStatus.ACTIVE.value


class JobCreate(BaseModel):
    """Schema for creating a new job posting."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    location: Optional[str] = None
    work_type: list[WorkType] = Field(default_factory=list)
    years_experience: Optional[ExperienceBand] = None
    must_have_skills: list[str] = Field(default_factory=list)
    good_to_have_skills: list[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.ACTIVE

    @staticmethod
    def split_skills(raw: str) -> list[str]:
        """Split a comma separated skills string as typed into a form."""
        return _clean_skills(raw.split(","))
