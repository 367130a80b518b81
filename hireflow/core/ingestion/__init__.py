"""
Resume ingestion: files -> storage -> screening proxy -> candidate records.
"""

from .batch import BatchOrchestrator, BatchSummary
from .mapping import map_analysis
from .pipeline import ResumeUploadPipeline
from .session import ResumeFile, UploadSession, UploadTask

__all__ = [
    "BatchOrchestrator",
    "BatchSummary",
    "ResumeFile",
    "ResumeUploadPipeline",
    "UploadSession",
    "UploadTask",
    "map_analysis",
]
