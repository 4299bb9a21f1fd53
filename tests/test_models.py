"""Tests for Pydantic models."""
import pytest
from uuid import uuid4
from datetime import datetime, timezone
from pydantic import ValidationError
from app.models import (
    WorkshopCreate, Workshop, WorkshopStatus, VALID_STATUS_TRANSITIONS,
    ResearchImportRequest, CognitionImportRequest,
    UseCase, UseCaseUpdate, RawUseCase, SourceSystem, BenefitCategory,
    ChatRequest, ChatMessage, PaginatedResponse, READINESS_WEIGHTS,
)


class TestWorkshopModels:
    """Tests for Workshop models."""

    def test_workshop_create_valid(self):
        """Test valid workshop creation."""
        workshop = WorkshopCreate(company_name="Acme Corp", industry="Manufacturing")
        assert workshop.company_name == "Acme Corp"
        assert workshop.facilitator_name is None

    def test_company_name_stripped(self):
        """Test company name whitespace is stripped."""
        assert WorkshopCreate(company_name="  Acme Corp ").company_name == "Acme Corp"

    def test_blank_company_name_rejected(self):
        """Test blank company name is rejected."""
        with pytest.raises(ValidationError):
            WorkshopCreate(company_name="   ")

    def test_company_name_length(self):
        """Test company name max length."""
        with pytest.raises(ValidationError):
            WorkshopCreate(company_name="x" * 256)

    def test_has_imports(self):
        """Test import detection on a full workshop."""
        now = datetime.now(timezone.utc)
        workshop = Workshop(
            id=uuid4(), company_name="Acme Corp", created_at=now, updated_at=now,
        )
        assert workshop.status == WorkshopStatus.DRAFT
        assert not workshop.has_imports
        assert workshop.model_copy(update={"cognition_two_data": {}}).has_imports


class TestStatusTransitions:
    """Tests for the workshop status table."""

    def test_every_status_has_entry(self):
        """Test every status appears in the transition table."""
        assert set(VALID_STATUS_TRANSITIONS) == set(WorkshopStatus)

    def test_draft_cannot_complete(self):
        """Test draft workshops cannot jump to completed."""
        assert WorkshopStatus.COMPLETED not in VALID_STATUS_TRANSITIONS[WorkshopStatus.DRAFT]


class TestImportRequests:
    """Tests for import request models."""

    def test_research_by_id(self):
        assert ResearchImportRequest(report_id="rpt-1").data is None

    def test_research_inline(self):
        assert ResearchImportRequest(data={"analysisData": {}}).report_id is None

    def test_research_requires_something(self):
        """Test an empty research import is rejected."""
        with pytest.raises(ValidationError):
            ResearchImportRequest()

    def test_cognition_requires_something(self):
        """Test an empty cognition import is rejected."""
        with pytest.raises(ValidationError):
            CognitionImportRequest()


class TestUseCaseModels:
    """Tests for use case models."""

    def test_total_benefit(self):
        """Test total benefit sums the four categories."""
        use_case = UseCase(
            id="UC-001", workshop_id=uuid4(), title="Invoice Processing",
            cost_savings=100.0, risk_reduction=20.0, revenue_impact=300.0,
            cash_flow_improvement=5.0,
        )
        assert use_case.total_benefit == 425.0
        assert use_case.benefit_breakdown()[BenefitCategory.REVENUE_IMPACT] == 300.0
        assert "total_benefit" in use_case.model_dump()

    def test_negative_benefit_rejected(self):
        """Test benefits must be non-negative."""
        with pytest.raises(ValidationError):
            RawUseCase(source=SourceSystem.RESEARCH_APP, title="X", cost_savings=-1)

    def test_effort_range(self):
        """Test effort fields are bounded to 1-10."""
        with pytest.raises(ValidationError):
            RawUseCase(source=SourceSystem.RESEARCH_APP, title="X", complexity=11)
        with pytest.raises(ValidationError):
            UseCaseUpdate(data_readiness=0)

    def test_scores_default_to_minimum(self):
        """Test unscored use cases sit at the bottom of the matrix."""
        use_case = UseCase(id="UC-001", workshop_id=uuid4(), title="X")
        assert use_case.value_score == 1.0
        assert use_case.readiness_score == 1.0

    def test_update_is_partial(self):
        """Test updates only carry the fields that were sent."""
        update = UseCaseUpdate(complexity=6)
        assert update.model_dump(exclude_unset=True) == {"complexity": 6}


class TestChatModels:
    """Tests for chat models."""

    def test_message_role(self):
        with pytest.raises(ValidationError):
            ChatMessage(role="system", content="hi")

    def test_history_limit(self):
        """Test chat history is capped at 20 turns."""
        history = [{"role": "user", "content": "hi"}] * 21
        with pytest.raises(ValidationError):
            ChatRequest(message="hello", history=history)


class TestCommonModels:
    """Tests for shared models and constants."""

    def test_paginated_response(self):
        page = PaginatedResponse[int](items=[1, 2], total=2, page=1, page_size=20, total_pages=1)
        assert page.items == [1, 2]

    def test_readiness_weights_sum_to_one(self):
        """Test readiness weights sum to 1.0."""
        assert sum(READINESS_WEIGHTS.values()) == pytest.approx(1.0)


class TestOrmModels:
    """Tests for the SQLAlchemy schema behind the Snowflake service."""

    def test_tables_registered(self):
        """Test every table is registered on the shared metadata."""
        from app.database.orm import Base
        assert set(Base.metadata.tables) == {
            "workshops", "use_cases", "challenge_logs", "survey_responses",
        }

    def test_workshop_columns_match_service(self):
        """Test the service only writes columns the schema defines."""
        from app.database.orm import Workshop as WorkshopRow
        from app.services.snowflake import WORKSHOP_JSON_COLUMNS, WORKSHOP_SCALAR_COLUMNS
        columns = set(WorkshopRow.__table__.columns.keys())
        assert set(WORKSHOP_JSON_COLUMNS) <= columns
        assert set(WORKSHOP_SCALAR_COLUMNS) <= columns

    def test_use_case_key_is_workshop_scoped(self):
        """Test use case ids are unique per workshop, not globally."""
        from app.database.orm import UseCase as UseCaseRow
        assert [c.name for c in UseCaseRow.__table__.primary_key] == ["workshop_id", "id"]
