"""Pytest fixtures and configuration."""
import json
import pytest
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Any, Optional
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, AsyncMock, patch
import fakeredis
import httpx

from app.config import get_settings
from app.models import (
    ChallengeLogEntry,
    ChallengeStatus,
    ReadinessScores,
    SurveyResponseCreate,
    UseCase,
    Workshop,
    WorkshopCreate,
    WorkshopStatus,
    WorkshopSummary,
)
from app.pipelines.source_importer import SourceImporter
from app.pipelines.workshop_pipeline import WorkshopPipeline
from app.services.llm_client import GenerationClient
from app.services.redis_cache import RedisCache
from app.services.workshop_repository import WorkshopRepository, to_storage


class InMemoryWorkshopRepository(WorkshopRepository):
    """Repository that round-trips through JSON like the Snowflake one does."""

    def __init__(self):
        self.workshops: dict[UUID, dict] = {}
        self.use_cases: dict[UUID, list[dict]] = {}
        self.challenges: list[dict] = []
        self.survey_responses: list[dict] = []

    def create_workshop(self, data: WorkshopCreate) -> Workshop:
        now = datetime.now(timezone.utc)
        workshop = Workshop(
            id=uuid4(), **data.model_dump(), status=WorkshopStatus.DRAFT,
            created_at=now, updated_at=now,
        )
        self.workshops[workshop.id] = workshop.model_dump(mode="json")
        return workshop

    def get_workshop(self, workshop_id: UUID) -> Optional[Workshop]:
        row = self.workshops.get(workshop_id)
        return Workshop.model_validate(row) if row else None

    def list_workshops(self, status=None, limit=20, offset=0) -> list[WorkshopSummary]:
        rows = [r for r in self.workshops.values() if status is None or r["status"] == status.value]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [WorkshopSummary.model_validate(r) for r in rows[offset:offset + limit]]

    def count_workshops(self, status=None) -> int:
        return len([r for r in self.workshops.values() if status is None or r["status"] == status.value])

    def update_workshop(self, workshop_id: UUID, **fields: Any) -> Workshop:
        row = self.workshops[workshop_id]
        row.update({k: to_storage(v) for k, v in fields.items()})
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        return Workshop.model_validate(row)

    def replace_use_cases(self, workshop_id: UUID, use_cases: list[UseCase]) -> None:
        self.use_cases[workshop_id] = [uc.model_dump(mode="json") for uc in use_cases]

    def list_use_cases(self, workshop_id: UUID) -> list[UseCase]:
        return [UseCase.model_validate(d) for d in self.use_cases.get(workshop_id, [])]

    def save_use_case(self, use_case: UseCase) -> None:
        rows = self.use_cases[use_case.workshop_id]
        for i, row in enumerate(rows):
            if row["id"] == use_case.id:
                rows[i] = use_case.model_dump(mode="json")

    def append_challenges(self, entries: list[ChallengeLogEntry]) -> None:
        self.challenges.extend(e.model_dump(mode="json") for e in entries)

    def list_challenges(self, workshop_id: UUID, status=None, batch_id=None) -> list[ChallengeLogEntry]:
        return [
            ChallengeLogEntry.model_validate(r)
            for r in self.challenges
            if r["workshop_id"] == str(workshop_id)
            and (status is None or r["status"] == status.value)
            and (batch_id is None or r["batch_id"] == str(batch_id))
        ]

    def get_challenge(self, workshop_id: UUID, challenge_id: UUID) -> Optional[ChallengeLogEntry]:
        for r in self.challenges:
            if r["workshop_id"] == str(workshop_id) and r["id"] == str(challenge_id):
                return ChallengeLogEntry.model_validate(r)
        return None

    def resolve_challenge(self, resolved: ChallengeLogEntry) -> bool:
        for i, r in enumerate(self.challenges):
            if r["id"] == str(resolved.id):
                if r["status"] != ChallengeStatus.PENDING.value:
                    return False
                self.challenges[i] = resolved.model_dump(mode="json")
                return True
        return False

    def add_survey_response(self, workshop_id: UUID, response: SurveyResponseCreate,
                            scores: ReadinessScores) -> None:
        self.survey_responses.append({
            "workshop_id": str(workshop_id),
            "response": response.model_dump(mode="json"),
            "scores": scores.model_dump(mode="json"),
        })


# ── source payloads ──────────────────────────────────────────────────────────

@pytest.fixture
def research_payload():
    """ResearchApp report with two use cases; analysisData is a JSON string."""
    analysis = {
        "steps": [
            {"step": 4, "data": [
                {"ID": "UC-01", "Use Case Name": "Invoice Processing Automation",
                 "Description": "Extract and match supplier invoices against purchase orders",
                 "Function": "Finance", "Target Friction": "Manual three-way match"},
                {"ID": "UC-02", "Use Case Name": "Demand Forecasting",
                 "Description": "Predict weekly SKU demand from sales history",
                 "Function": "Supply Chain"},
            ]},
            {"step": 5, "data": [
                {"ID": "UC-01", "Cost Benefit ($)": "$500,000", "Risk Benefit ($)": "50K",
                 "Cash Flow Benefit ($)": 100000},
                {"ID": "UC-02", "Revenue Benefit ($)": "$1.2M"},
            ]},
            {"step": 6, "data": [
                {"ID": "UC-01", "Effort Score (1-5)": 2, "Data Readiness (1-5)": 4,
                 "Integration Complexity (1-5)": 3},
                {"ID": "UC-02", "Effort Score (1-5)": 4, "Data Readiness (1-5)": 2,
                 "Integration Complexity (1-5)": 4},
            ]},
        ]
    }
    return {"id": "rpt-1", "companyName": "Acme Corp", "analysisData": json.dumps(analysis)}


@pytest.fixture
def cognition_payload():
    """CognitionTwo analysis: one use case shared with ResearchApp, one unique."""
    return {
        "id": "an-1",
        "useCases": [
            {"id": "c1", "title": "Invoice Processing Automation",
             "description": "Agent reconciles invoices and routes exceptions",
             "agenticPattern": "orchestrator", "implementationRisk": 6,
             "legacyProcess": {"steps": ["Receive invoice", "Key into ERP", "Match PO"],
                               "painPoints": ["Manual keying", "Slow approvals"]}},
            {"id": "c2", "title": "Customer Support Triage",
             "description": "Classify inbound tickets and draft first replies",
             "agenticPattern": "router", "frictionPoint": "Ticket backlog"},
        ],
    }


def _source_handler(research_payload, cognition_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/reports/rpt-1":
            return httpx.Response(200, json=research_payload)
        if request.url.path == "/api/analyses/an-1":
            return httpx.Response(200, json=cognition_payload)
        return httpx.Response(404, json={"error": "not found"})
    return handler


# ── services ─────────────────────────────────────────────────────────────────

@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(redis_server):
    """In-process Redis (Lua support is needed for locks)."""
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def fake_async_redis(redis_server):
    """Async client on the same in-process server, for locks taken in the event loop."""
    return fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def cache(fake_redis, fake_async_redis):
    return RedisCache(client=fake_redis, async_client=fake_async_redis)


@pytest.fixture
def repository():
    return InMemoryWorkshopRepository()


@pytest.fixture
def generator():
    """Generation client without an API key (demo mode)."""
    return GenerationClient(api_key=None, model="test-model")


@pytest.fixture
def importer(research_payload, cognition_payload):
    transport = httpx.MockTransport(_source_handler(research_payload, cognition_payload))
    return SourceImporter(
        research_base_url="http://research.test",
        cognition_base_url="http://cognition.test",
        client=httpx.Client(transport=transport),
    )


@pytest.fixture
def pipeline(repository, cache, generator, importer):
    return WorkshopPipeline(
        repository=repository,
        cache=cache,
        generator=generator,
        importer=importer,
        settings=get_settings(),
    )


@pytest.fixture
def mock_snowflake():
    """Mock Snowflake service."""
    mock = MagicMock()
    mock.health_check = AsyncMock(return_value=(True, None))
    mock.execute_query = MagicMock(return_value=[])
    mock.execute_one = MagicMock(return_value=None)
    mock.execute_write = MagicMock(return_value=1)
    return mock


@pytest.fixture
def mock_redis():
    """Mock Redis service for the health endpoint."""
    mock = MagicMock()
    mock.health_check = AsyncMock(return_value=(True, None))
    return mock


@pytest.fixture
def client(pipeline, mock_snowflake, mock_redis):
    """Create test client around the in-memory pipeline."""
    with patch("app.routers.health.get_snowflake_service", return_value=mock_snowflake):
        with patch("app.routers.health.get_redis_cache", return_value=mock_redis):
            from app.main import create_app
            with TestClient(create_app(pipeline=pipeline)) as test_client:
                yield test_client


# ── sample data ──────────────────────────────────────────────────────────────

@pytest.fixture
def sample_workshop_data():
    """Sample workshop creation data."""
    return {
        "company_name": "Acme Corp",
        "industry": "Manufacturing",
        "facilitator_name": "Jordan Lee",
    }


@pytest.fixture
def workshop_id(client, sample_workshop_data):
    """Id of a freshly created workshop."""
    response = client.post("/api/v1/workshops", json=sample_workshop_data)
    return response.json()["id"]


@pytest.fixture
def reconciled_workshop_id(client, workshop_id, research_payload, cognition_payload):
    """Workshop with both sources imported inline and reconciled."""
    client.post(f"/api/v1/workshops/{workshop_id}/import/research", json={"data": research_payload})
    client.post(f"/api/v1/workshops/{workshop_id}/import/cognition", json={"data": cognition_payload})
    client.post(f"/api/v1/workshops/{workshop_id}/reconcile")
    return workshop_id


def make_use_case(uc_id: str = "UC-001", **overrides) -> UseCase:
    """UseCase with sensible defaults for engine tests."""
    fields = {
        "id": uc_id,
        "workshop_id": UUID("00000000-0000-0000-0000-000000000001"),
        "title": f"Use case {uc_id}",
        "cost_savings": 100000.0,
    }
    fields.update(overrides)
    return UseCase(**fields)


def make_readiness(level: float = 3.0) -> ReadinessScores:
    return ReadinessScores(
        data=level, process=level, organizational=level, technical=level, overall=level,
    )
