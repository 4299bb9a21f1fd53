"""Use case Pydantic models."""
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, Field, computed_field
from .enums import BenefitCategory, SourceSystem


class UseCaseFields(BaseModel):
    """Descriptive, financial and effort fields shared by raw and reconciled use cases."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    business_function: str = ""
    sub_function: str = ""
    friction_point: str = ""
    strategic_theme: str = ""
    ai_primitives: list[str] = Field(default_factory=list)
    hitl_checkpoint: str = ""

    # Financial benefits (USD per year)
    cost_savings: float = Field(default=0.0, ge=0)
    risk_reduction: float = Field(default=0.0, ge=0)
    revenue_impact: float = Field(default=0.0, ge=0)
    cash_flow_improvement: float = Field(default=0.0, ge=0)
    three_year_npv: float = Field(default=0.0, ge=0)
    time_to_value_months: Optional[float] = Field(default=None, ge=0)

    # Effort (1 = easiest/worst data, 10 = hardest/best data)
    complexity: Optional[float] = Field(default=None, ge=1, le=10)
    data_readiness: Optional[float] = Field(default=None, ge=1, le=10)
    integration_effort: Optional[float] = Field(default=None, ge=1, le=10)

    # Behavioral / agentic pattern fields
    agentic_pattern: str = ""
    horizon: str = ""
    automation_level: str = ""
    legacy_process_steps: list[str] = Field(default_factory=list)
    legacy_pain_points: list[str] = Field(default_factory=list)
    legacy_annual_cost: float = Field(default=0.0, ge=0)
    business_value: Optional[float] = Field(default=None, ge=0)
    trust_tax_percent: Optional[float] = Field(default=None, ge=0)

    @computed_field
    @property
    def total_benefit(self) -> float:
        return (
            self.cost_savings
            + self.risk_reduction
            + self.revenue_impact
            + self.cash_flow_improvement
        )

    def benefit_breakdown(self) -> dict[BenefitCategory, float]:
        """Benefit amount per category."""
        return {category: getattr(self, category.value) for category in BenefitCategory}


class RawUseCase(UseCaseFields):
    """A use case as normalized from one import source, before reconciliation."""
    source: SourceSystem
    source_id: str = ""


class UseCase(UseCaseFields):
    """A reconciled use case owned by one workshop."""
    id: str = Field(..., description="Workshop-scoped identifier, e.g. UC-001")
    workshop_id: UUID
    sources: list[SourceSystem] = Field(default_factory=list)
    provenance: dict[str, SourceSystem] = Field(
        default_factory=dict,
        description="Field name -> source that supplied its value"
    )
    value_score: float = Field(default=1.0, ge=1, le=10)
    readiness_score: float = Field(default=1.0, ge=1, le=10)


class UseCaseUpdate(BaseModel):
    """Facilitator edits to a use case. Scores are recomputed, never set directly."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    cost_savings: Optional[float] = Field(None, ge=0)
    risk_reduction: Optional[float] = Field(None, ge=0)
    revenue_impact: Optional[float] = Field(None, ge=0)
    cash_flow_improvement: Optional[float] = Field(None, ge=0)
    complexity: Optional[float] = Field(None, ge=1, le=10)
    data_readiness: Optional[float] = Field(None, ge=1, le=10)
    integration_effort: Optional[float] = Field(None, ge=1, le=10)


class ReconciliationConflict(BaseModel):
    """A field both sources supplied with different values."""
    use_case_id: str
    field: str
    research_value: Any = None
    cognition_value: Any = None
    resolved_value: Any = None


class ReconciliationResponse(BaseModel):
    """Summary returned by the reconcile step."""
    workshop_id: UUID
    use_case_count: int
    matched_count: int
    research_only_count: int
    cognition_only_count: int
    conflicts: list[ReconciliationConflict] = Field(default_factory=list)
    use_cases: list[UseCase] = Field(default_factory=list)
