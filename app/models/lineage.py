"""Workflow map and data lineage Pydantic models."""
from typing import List, Literal
from pydantic import BaseModel, Field
from .enums import GenerationMode


class WorkflowStep(BaseModel):
    """A single step of a current or target process."""
    order: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    actor: Literal["human", "agent", "system"] = "human"
    description: str = ""
    pain_point: str = ""


class WorkflowMap(BaseModel):
    """Legacy vs agentic process for one use case."""
    use_case_id: str
    use_case_title: str = ""
    agentic_pattern: str = ""
    current_state: List[WorkflowStep] = Field(default_factory=list)
    target_state: List[WorkflowStep] = Field(default_factory=list)
    comparison_metrics: dict[str, str] = Field(default_factory=dict)


class DataLineageEntry(BaseModel):
    """Where a use case's data comes from and how it is governed."""
    use_case_id: str
    use_case_title: str = ""
    data_sources: List[str] = Field(default_factory=list)
    inputs: List[str] = Field(default_factory=list)
    outputs: List[str] = Field(default_factory=list)
    explainability: str = ""
    observability: str = ""
    governance: str = ""


class WorkflowRunResponse(BaseModel):
    """Result of the workflow visualization step."""
    workflow_maps: List[WorkflowMap] = Field(default_factory=list)
    data_lineage: List[DataLineageEntry] = Field(default_factory=list)
    mode: GenerationMode = GenerationMode.DEMO
