"""
Database repositories for hireflow data access.
"""

from .base import BaseRepository
from .candidate_repository import CandidateRepository
from .job_repository import JobRepository

__all__ = [
    "BaseRepository",
    "CandidateRepository",
    "JobRepository",
]
