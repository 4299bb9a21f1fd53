"""Workshop Pydantic models."""
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from .challenge import ChallengeBatchSummary
from .enums import SourceSystem, WorkshopStatus
from .lineage import DataLineageEntry, WorkflowMap
from .prioritization import PrioritizationMatrix
from .survey import ReadinessScores, Survey
from .synthesis import WorkshopSynthesis
from .validation import ValidationSummary


class WorkshopBase(BaseModel):
    """Base workshop model."""
    company_name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=255)
    facilitator_name: Optional[str] = Field(None, max_length=255)

    @field_validator("company_name")
    @classmethod
    def company_name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("company_name must not be blank")
        return v


class WorkshopCreate(WorkshopBase):
    """Model for starting a workshop."""
    pass


class WorkshopStatusUpdate(BaseModel):
    """Model for a soft status transition."""
    status: WorkshopStatus


class WorkshopSummary(WorkshopBase):
    """Workshop row as shown in listings."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: WorkshopStatus = WorkshopStatus.DRAFT
    created_at: datetime
    updated_at: datetime


class Workshop(WorkshopSummary):
    """Full workshop state, including every step's stored output."""
    research_app_report_id: Optional[str] = None
    cognition_two_analysis_id: Optional[str] = None
    research_app_data: Optional[dict[str, Any]] = None
    cognition_two_data: Optional[dict[str, Any]] = None
    survey: Optional[Survey] = None
    readiness_scores: Optional[ReadinessScores] = None
    challenge_results: Optional[ChallengeBatchSummary] = None
    validation_results: Optional[ValidationSummary] = None
    prioritization_matrix: Optional[PrioritizationMatrix] = None
    workflow_maps: List[WorkflowMap] = Field(default_factory=list)
    data_lineage: List[DataLineageEntry] = Field(default_factory=list)
    synthesis: Optional[WorkshopSynthesis] = None

    @property
    def has_imports(self) -> bool:
        return self.research_app_data is not None or self.cognition_two_data is not None


class ResearchImportRequest(BaseModel):
    """Attach a ResearchApp report by id, or post its payload inline."""
    report_id: Optional[str] = Field(None, min_length=1, max_length=255)
    data: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def require_id_or_data(self) -> "ResearchImportRequest":
        if self.report_id is None and self.data is None:
            raise ValueError("either report_id or data is required")
        return self


class CognitionImportRequest(BaseModel):
    """Attach a CognitionTwo analysis by id, or post its payload inline."""
    analysis_id: Optional[str] = Field(None, min_length=1, max_length=255)
    data: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def require_id_or_data(self) -> "CognitionImportRequest":
        if self.analysis_id is None and self.data is None:
            raise ValueError("either analysis_id or data is required")
        return self


class ImportResponse(BaseModel):
    """Result of attaching a source payload to a workshop."""
    workshop_id: UUID
    source: SourceSystem
    source_id: Optional[str] = None
    use_case_count: int = Field(..., ge=0)
