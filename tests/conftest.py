"""
Shared test fixtures for the ResumeRank test suite.

Sets environment variables before any resumerank imports to prevent config
failures, then provides in-memory fakes for every pipeline collaborator and
a factory that wires them into an orchestrator.
"""

import os

# === Set environment BEFORE any resumerank imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "resumerank_test")

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import pytest
from bson import ObjectId

from resumerank.core.analysis import AIAnalysisClient, AnalysisOrchestrator, InferenceService
from resumerank.core.quota_guard import QuotaGuard
from resumerank.core.rate_limiter import InMemoryRateLimiter, RateLimiter
from resumerank.data.models import (
    ActivityLogEntry,
    AnalysisResult,
    Candidate,
    Job,
    UserQuota,
)
from resumerank.services.activity_logger import ActivityLogger
from resumerank.services.blob_store import BlobNotFound, BlobStore
from resumerank.services.broadcaster import Broadcaster
from resumerank.utils.constants import CandidateStatus

OWNER_ID = "user-owner"
OTHER_USER_ID = "user-other"

STRONG_MATCH_RESPONSE = json.dumps(
    {
        "score": 85,
        "summary": "Strong match",
        "strengths": ["Python", "Distributed systems"],
        "weaknesses": ["No Kubernetes"],
        "recommendation": "HIRE",
    }
)


# ---------------------------------------------------------------------------
# In-memory fakes
# ---------------------------------------------------------------------------


class FakeCandidateRepository:
    """Candidate store keyed by id string."""

    def __init__(self) -> None:
        self.documents: dict[str, Candidate] = {}
        self.reads = 0
        self.writes = 0
        self.fail_writes = False

    def add(self, candidate: Candidate) -> Candidate:
        self.documents[candidate.id_str] = candidate
        return candidate

    async def get_by_id_async(self, id_value) -> Optional[Candidate]:
        self.reads += 1
        candidate = self.documents.get(str(id_value))
        return candidate.model_copy(deep=True) if candidate else None

    async def record_analysis_async(self, candidate_id, result: AnalysisResult) -> bool:
        self.writes += 1
        if self.fail_writes:
            raise ConnectionError("store unavailable")
        key = str(candidate_id)
        if key not in self.documents:
            return False
        self.documents[key] = self.documents[key].model_copy(
            update=result.to_candidate_update()
        )
        return True


class FakeJobRepository:
    def __init__(self) -> None:
        self.documents: dict[str, Job] = {}
        self.reads = 0

    def add(self, job: Job) -> Job:
        self.documents[job.id_str] = job
        return job

    async def get_by_id_async(self, id_value) -> Optional[Job]:
        self.reads += 1
        return self.documents.get(str(id_value))


class FakeQuotaRepository:
    def __init__(self) -> None:
        self.quotas: dict[str, UserQuota] = {}
        self.reads = 0
        self.increments = 0
        self.fail_increments = False

    def set(self, user_id: str, ai_credits: int = 100, used_credits: int = 0) -> UserQuota:
        quota = UserQuota(user_id=user_id, ai_credits=ai_credits, used_credits=used_credits)
        self.quotas[user_id] = quota
        return quota

    async def get_by_user_async(self, user_id: str) -> Optional[UserQuota]:
        self.reads += 1
        return self.quotas.get(user_id)

    async def increment_used_credits_async(self, user_id: str) -> Optional[UserQuota]:
        self.increments += 1
        if self.fail_increments:
            raise ConnectionError("quota store unavailable")
        quota = self.quotas.get(user_id)
        if quota is None:
            return None
        quota.used_credits += 1
        return quota


class FakeActivityRepository:
    def __init__(self) -> None:
        self.entries: list[ActivityLogEntry] = []
        self.fail = False

    async def append_async(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        if self.fail:
            raise ConnectionError("activity store unavailable")
        entry.id = ObjectId()
        self.entries.append(entry)
        return entry


class ScriptedRateLimiter(RateLimiter):
    """Rate limiter answering from a script of decisions; allows once exhausted."""

    def __init__(self, decisions: Optional[list[bool]] = None) -> None:
        super().__init__({"ai_analysis": 3, "upload": 5, "api": 10})
        self.decisions = list(decisions or [])
        self.calls: list[tuple[str, str]] = []

    async def _hit(self, user_id: str, action: str, limit: int) -> bool:
        self.calls.append((user_id, action))
        if self.decisions:
            return self.decisions.pop(0)
        return True


class FakeBlobStore(BlobStore):
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.reads: list[str] = []
        self.error: Optional[Exception] = None

    async def _read(self, path: str) -> bytes:
        self.reads.append(path)
        if self.error is not None:
            raise self.error
        if path not in self.blobs:
            raise BlobNotFound(path)
        return self.blobs[path]


class RecordingBroadcaster(Broadcaster):
    def __init__(self) -> None:
        self.published: list[tuple[str, dict[str, Any]]] = []
        self.fail = False

    async def publish(self, topic: str, event: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("broadcast channel closed")
        self.published.append((topic, event))


class FakeInference(InferenceService):
    """
    Returns scripted responses in order; an Exception entry is raised instead.

    ``delays`` are consumed one per call and awaited before responding.
    """

    def __init__(
        self,
        responses: Optional[list[Union[str, Exception]]] = None,
        delays: Optional[list[float]] = None,
    ) -> None:
        self.responses = list(responses) if responses is not None else []
        self.delays = list(delays) if delays is not None else []
        self.default_response = STRONG_MATCH_RESPONSE
        self.calls: list[tuple[bytes, str, str]] = []

    async def infer(self, data: bytes, mime_type: str, prompt: str) -> str:
        self.calls.append((data, mime_type, prompt))
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        response = self.responses.pop(0) if self.responses else self.default_response
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# ---------------------------------------------------------------------------
# Minimal Motor stand-ins for repository tests
# ---------------------------------------------------------------------------


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            for op, arg in condition.items():
                if op == "$gt" and not (value is not None and value > arg):
                    return False
                if op == "$lte" and not (value is not None and value <= arg):
                    return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    def skip(self, count: int) -> "FakeCursor":
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._documents = sorted(
            self._documents, key=lambda d: d.get(key), reverse=direction == -1
        )
        return self

    async def to_list(self, length: Optional[int] = None) -> list[dict[str, Any]]:
        return list(self._documents[:length] if length else self._documents)


@dataclass
class FakeResult:
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    inserted_id: Any = None


class FakeCollection:
    """Single-process stand-in for an AsyncIOMotorCollection."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []

    def _find(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        return [doc for doc in self.documents if _matches(doc, query)]

    @staticmethod
    def _apply(document: dict[str, Any], update: dict[str, Any], inserting: bool) -> None:
        for key, value in update.get("$set", {}).items():
            document[key] = value
        for key, value in update.get("$inc", {}).items():
            document[key] = document.get(key, 0) + value
        if inserting:
            for key, value in update.get("$setOnInsert", {}).items():
                document[key] = value

    async def insert_one(self, document: dict[str, Any]) -> FakeResult:
        stored = dict(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return FakeResult(inserted_id=stored["_id"])

    async def find_one(self, query: dict[str, Any]) -> Optional[dict[str, Any]]:
        found = self._find(query)
        return dict(found[0]) if found else None

    def find(self, query: dict[str, Any]) -> FakeCursor:
        return FakeCursor([dict(doc) for doc in self._find(query)])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> FakeResult:
        found = self._find(query)
        if not found:
            return FakeResult()
        self._apply(found[0], update, inserting=False)
        return FakeResult(matched_count=1, modified_count=1)

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
        return_document: Any = None,
    ) -> Optional[dict[str, Any]]:
        found = self._find(query)
        if found:
            self._apply(found[0], update, inserting=False)
            return dict(found[0])
        if not upsert:
            return None
        document = {k: v for k, v in query.items() if not isinstance(v, dict)}
        document["_id"] = ObjectId()
        self._apply(document, update, inserting=True)
        self.documents.append(document)
        return dict(document)

    async def delete_many(self, query: dict[str, Any]) -> FakeResult:
        doomed = self._find(query)
        self.documents = [doc for doc in self.documents if doc not in doomed]
        return FakeResult(deleted_count=len(doomed))

    async def count_documents(self, query: dict[str, Any], limit: Optional[int] = None) -> int:
        count = len(self._find(query))
        return min(count, limit) if limit else count


class FakeDatabaseManager:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.closed = False

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_db() -> FakeDatabaseManager:
    return FakeDatabaseManager()


# ---------------------------------------------------------------------------
# Pipeline factory
# ---------------------------------------------------------------------------


@dataclass
class Pipeline:
    """An orchestrator wired to in-memory fakes, plus handles on each fake."""

    candidates: FakeCandidateRepository = field(default_factory=FakeCandidateRepository)
    jobs: FakeJobRepository = field(default_factory=FakeJobRepository)
    quotas: FakeQuotaRepository = field(default_factory=FakeQuotaRepository)
    activity: FakeActivityRepository = field(default_factory=FakeActivityRepository)
    rate_limiter: RateLimiter = field(default_factory=ScriptedRateLimiter)
    blob_store: FakeBlobStore = field(default_factory=FakeBlobStore)
    broadcaster: RecordingBroadcaster = field(default_factory=RecordingBroadcaster)
    inference: FakeInference = field(default_factory=FakeInference)
    sleep: RecordingSleep = field(default_factory=RecordingSleep)
    bulk_concurrency: int = 1
    orchestrator: Optional[AnalysisOrchestrator] = None

    def __post_init__(self) -> None:
        self.orchestrator = AnalysisOrchestrator(
            candidates=self.candidates,
            jobs=self.jobs,
            rate_limiter=self.rate_limiter,
            quota_guard=QuotaGuard(self.quotas),
            blob_store=self.blob_store,
            ai_client=AIAnalysisClient(self.inference, sleep=self.sleep),
            broadcaster=self.broadcaster,
            activity_logger=ActivityLogger(self.activity),
            bulk_concurrency=self.bulk_concurrency,
        )

    def add_job(self, user_id: str = OWNER_ID, description: str = "Build backend services in Python") -> Job:
        return self.jobs.add(
            Job(
                id=ObjectId(),
                user_id=user_id,
                title="Backend Engineer",
                description=description,
                requirements="5+ years Python",
                location="Remote",
            )
        )

    def add_candidate(
        self,
        job: Optional[Job] = None,
        resume_ref: Optional[str] = "job-uploads/jane-smith.pdf",
        store_resume: bool = True,
    ) -> Candidate:
        job = job or self.add_job()
        candidate = self.candidates.add(
            Candidate(
                id=ObjectId(),
                job_id=job.id,
                user_id=job.user_id,
                name="Jane Smith",
                email="jane.smith@example.com",
                resume_ref=resume_ref,
            )
        )
        if resume_ref and store_resume:
            self.blob_store.blobs[candidate.resume_path] = b"%PDF-1.7 resume"
        return candidate

    def stored(self, candidate: Candidate) -> Candidate:
        return self.candidates.documents[candidate.id_str]

    @property
    def collaborator_calls(self) -> int:
        calls = 0
        calls += self.candidates.reads + self.candidates.writes
        calls += self.jobs.reads
        calls += self.quotas.reads + self.quotas.increments
        calls += len(self.activity.entries)
        calls += len(self.blob_store.reads)
        calls += len(self.broadcaster.published)
        calls += len(self.inference.calls)
        if isinstance(self.rate_limiter, ScriptedRateLimiter):
            calls += len(self.rate_limiter.calls)
        return calls


@pytest.fixture
def make_pipeline():
    """Factory that returns a callable to build a Pipeline with optional overrides."""

    def _factory(**kwargs) -> Pipeline:
        pipeline = Pipeline(**kwargs)
        pipeline.quotas.set(OWNER_ID, ai_credits=100, used_credits=0)
        return pipeline

    return _factory


@pytest.fixture
def pipeline(make_pipeline) -> Pipeline:
    return make_pipeline()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_inference():
    """Factory for scripted inference backends."""

    def _factory(*responses: Union[str, Exception]) -> FakeInference:
        return FakeInference(list(responses))

    return _factory


@pytest.fixture
def make_rate_limiter():
    """Factory for rate limiters that answer from a script of decisions."""

    def _factory(*decisions: bool) -> ScriptedRateLimiter:
        return ScriptedRateLimiter(list(decisions))

    return _factory


@pytest.fixture
def strong_match_response() -> str:
    return STRONG_MATCH_RESPONSE


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID


# ---------------------------------------------------------------------------
# Sample model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_job() -> Job:
    return Job(
        id=ObjectId(),
        user_id=OWNER_ID,
        title="Senior Python Developer",
        description="Design and build data pipelines.",
        requirements="Python, MongoDB",
        location="Berlin",
    )


@pytest.fixture
def sample_candidate(sample_job) -> Candidate:
    return Candidate(
        id=ObjectId(),
        job_id=sample_job.id,
        user_id=OWNER_ID,
        name="Jane Smith",
        email="jane.smith@example.com",
        resume_ref="https://storage.example.com/storage/v1/object/public/resumes/abc/jane.pdf",
        status=CandidateStatus.PENDING_REVIEW,
    )


@pytest.fixture
def in_memory_rate_limiter():
    """In-memory limiter with a controllable clock."""
    clock = {"now": 1000.0}
    limiter = InMemoryRateLimiter(
        {"ai_analysis": 3, "upload": 5, "api": 10},
        window_seconds=60,
        clock=lambda: clock["now"],
    )
    return limiter, clock
