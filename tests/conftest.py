"""
Shared test fixtures for the hireflow test suite.

Sets environment variables before any hireflow imports to keep config
deterministic, then provides in-memory stand-ins for storage, the
candidate store, job lookup and the screening client, plus sample
analysis payloads.
"""

import os

# === Set environment BEFORE any hireflow imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "hireflow_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

import asyncio
from types import SimpleNamespace
from typing import Any, Optional

import pytest
from bson import ObjectId

from hireflow.core.exceptions import StorageError
from hireflow.core.ingestion import ResumeFile, ResumeUploadPipeline, UploadSession
from hireflow.data.models import CandidateRecord, JobPosting
from hireflow.services import ResumeStorage, ScreeningResponse, StoredObject, build_public_url

USER_ID = "user-1"
WEBHOOK_URL = "https://n8n.example.com/webhook/candidate-screening"
PUBLIC_BASE_URL = "https://files.example.com"


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class InMemoryResumeStorage(ResumeStorage):
    """ResumeStorage keeping objects in a dict; can fail named files."""

    def __init__(self, bucket: str = "resumes", fail_on: tuple[str, ...] = (), delay: float = 0.0):
        self._bucket = bucket
        self.objects: dict[str, StoredObject] = {}
        self.fail_on = fail_on
        self.delay = delay
        self.calls: list[str] = []

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        self.calls.append(path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if any(path.endswith(name) for name in self.fail_on):
            raise StorageError("Bucket quota exceeded")
        if path in self.objects:
            raise StorageError(f"The resource already exists: {path}")
        self.objects[path] = StoredObject(path=path, content=data, content_type=content_type)
        return path

    def get_public_url(self, path: str) -> str:
        return build_public_url(PUBLIC_BASE_URL, self._bucket, path)

    async def download(self, path: str) -> StoredObject:
        if path not in self.objects:
            raise StorageError(f"Object not found: {path}")
        return self.objects[path]


class FakeScreeningClient:
    """Answers every submission with a canned response, tracking concurrency."""

    def __init__(self, response: Optional[ScreeningResponse] = None, delay: float = 0.0):
        self.response = response or ScreeningResponse(200, {"name": "Jane Doe", "match_score": 77})
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def submit(self, **kwargs) -> ScreeningResponse:
        self.calls.append(kwargs)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.response
        finally:
            self.in_flight -= 1


class FakeCandidateStore:
    """Candidate store that assigns ids, or fails with a store message."""

    def __init__(self, error: Optional[str] = None):
        self.error = error
        self.records: list[CandidateRecord] = []

    async def insert(self, record: CandidateRecord) -> CandidateRecord:
        if self.error:
            raise RuntimeError(self.error)
        record.id = ObjectId()
        self.records.append(record)
        return record


class FakeJobLookup:
    def __init__(self, *jobs: JobPosting):
        self.jobs = {str(job.id): job for job in jobs}
        self.calls: list[tuple[str, str]] = []

    async def get_for_user(self, job_id: str, user_id: str) -> Optional[JobPosting]:
        self.calls.append((job_id, user_id))
        job = self.jobs.get(job_id)
        if job is None or job.user_id != user_id:
            return None
        return job


class FakeCollection:
    """
    Just enough of a motor collection for repository tests.

    Queries support plain equality on top-level fields.
    """

    def __init__(self):
        self.documents: list[dict[str, Any]] = []

    @staticmethod
    def _matches(document: dict, query: dict) -> bool:
        return all(document.get(key) == value for key, value in query.items())

    async def insert_one(self, document: dict):
        document = dict(document)
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query: dict):
        return next((dict(d) for d in self.documents if self._matches(d, query)), None)

    async def count_documents(self, query: dict) -> int:
        return sum(1 for d in self.documents if self._matches(d, query))

    async def update_one(self, query: dict, update: dict):
        for document in self.documents:
            if self._matches(document, query):
                document.update(update["$set"])
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    async def delete_one(self, query: dict):
        for document in self.documents:
            if self._matches(document, query):
                self.documents.remove(document)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def find(self, query: dict):
        return FakeCursor([dict(d) for d in self.documents if self._matches(d, query)])


class FakeCursor:
    def __init__(self, documents: list[dict]):
        self._documents = documents

    def sort(self, key: str, direction: int):
        self._documents.sort(key=lambda d: (d.get(key) is not None, d.get(key)), reverse=direction < 0)
        return self

    def skip(self, count: int):
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int):
        self._documents = self._documents[:count]
        return self

    async def to_list(self, length: int):
        return self._documents[:length]


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_resume():
    def _factory(filename: str = "jane_doe.pdf", content: bytes = b"%PDF-1.4 resume", **kwargs):
        return ResumeFile(filename=filename, content=content, content_type=kwargs.get("content_type", "application/pdf"))

    return _factory


@pytest.fixture
def make_job():
    def _factory(title: str = "Backend Engineer", user_id: str = USER_ID, **kwargs) -> JobPosting:
        return JobPosting(id=ObjectId(), title=title, user_id=user_id, **kwargs)

    return _factory


# ---------------------------------------------------------------------------
# Sample fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_analysis() -> dict[str, Any]:
    """A complete snake_case analysis as the workflow returns it."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "location": "Berlin",
        "match_score": 84,
        "predictive_score": 78,
        "bias_score": 12,
        "skills_analysis": [
            {"name": "Python", "match": 95},
            {"name": "Kubernetes", "match": 40},
        ],
        "robust_points": ["Strong API design", "Mentoring"],
        "lacking_points": ["Limited cloud exposure"],
        "growth_potential": "High",
        "total_experience": "6 years",
        "relevant_experience": "4 years",
    }


@pytest.fixture
def storage():
    return InMemoryResumeStorage()


@pytest.fixture
def screening():
    return FakeScreeningClient()


@pytest.fixture
def candidate_store():
    return FakeCandidateStore()


@pytest.fixture
def pipeline(storage, screening, candidate_store):
    return ResumeUploadPipeline(storage, screening, candidate_store, step_timeout=5)


@pytest.fixture
def session():
    return UploadSession(max_file_size_mb=5)


@pytest.fixture
def make_storage():
    return InMemoryResumeStorage


@pytest.fixture
def make_screening():
    return FakeScreeningClient


@pytest.fixture
def make_store():
    return FakeCandidateStore


@pytest.fixture
def make_job_lookup():
    return FakeJobLookup


@pytest.fixture
def fake_collection():
    return FakeCollection()
