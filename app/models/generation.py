"""Shapes expected back from the text-generation collaborator.

Every reply is parsed as JSON and validated against one of these models
before the pipeline uses it. Numbers the engines own (benefits, scores,
severities) are never taken from here as-is.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from .enums import ChallengeType, ReadinessDimension, Severity
from .lineage import WorkflowStep
from .synthesis import Roadmap, RiskItem


class GeneratedSurveyQuestion(BaseModel):
    dimension: ReadinessDimension
    category: str = ""
    question: str = Field(..., min_length=1)
    hint: str = ""
    weight: int = Field(default=1, ge=1, le=2)
    use_case_ids: List[str] = Field(default_factory=list)


class GeneratedSurvey(BaseModel):
    questions: List[GeneratedSurveyQuestion] = Field(..., min_length=1)


class GeneratedChallenge(BaseModel):
    use_case_id: str
    challenge_type: ChallengeType
    field_name: str = ""
    original_value: Any = None
    challenged_value: Any = None
    evidence: str = ""
    severity: Optional[Severity] = None


class GeneratedChallenges(BaseModel):
    challenges: List[GeneratedChallenge] = Field(default_factory=list)


class GeneratedValidationNote(BaseModel):
    use_case_id: str
    adjustment_reason: str = ""
    benchmark_source: str = ""
    risk_flags: List[str] = Field(default_factory=list)


class GeneratedValidation(BaseModel):
    results: List[GeneratedValidationNote] = Field(default_factory=list)


class GeneratedLineage(BaseModel):
    data_sources: List[str] = Field(default_factory=list)
    inputs: List[str] = Field(default_factory=list)
    outputs: List[str] = Field(default_factory=list)
    explainability: str = ""
    observability: str = ""
    governance: str = ""


class GeneratedWorkflow(BaseModel):
    use_case_id: str
    agentic_pattern: str = ""
    current_state: List[WorkflowStep] = Field(default_factory=list)
    target_state: List[WorkflowStep] = Field(default_factory=list)
    comparison_metrics: dict[str, str] = Field(default_factory=dict)
    data_lineage: GeneratedLineage = Field(default_factory=GeneratedLineage)


class GeneratedWorkflows(BaseModel):
    workflows: List[GeneratedWorkflow] = Field(default_factory=list)


class GeneratedSynthesis(BaseModel):
    executive_summary: str = Field(..., min_length=1)
    top_recommendations: List[str] = Field(default_factory=list)
    roadmap: Roadmap = Field(default_factory=Roadmap)
    risk_register: List[RiskItem] = Field(default_factory=list)
