"""Pydantic models for the AI Catalyst workshop platform."""

# Common Models
from app.models.common import (
    HealthResponse,
    PaginatedResponse,
    ErrorResponse,
    MessageResponse,
)

# Enums
from app.models.enums import (
    WorkshopStatus,
    SourceSystem,
    ChallengeType,
    Severity,
    ChallengeStatus,
    ReadinessDimension,
    BenefitCategory,
    Quadrant,
    Track,
    GenerationMode,
    READINESS_WEIGHTS,
    VALID_STATUS_TRANSITIONS,
    VALID_CHALLENGE_TRANSITIONS,
)

# Use cases and reconciliation
from app.models.use_case import (
    UseCaseFields,
    RawUseCase,
    UseCase,
    UseCaseUpdate,
    ReconciliationConflict,
    ReconciliationResponse,
)

# Survey
from app.models.survey import (
    SurveyQuestion,
    Survey,
    SurveyAnswer,
    SurveyResponseCreate,
    ReadinessScores,
    SurveyState,
)

# Challenges
from app.models.challenge import (
    ChallengeLogEntry,
    ChallengeResolution,
    ChallengeBatchSummary,
    ChallengeRunResponse,
)

# Validation and prioritization
from app.models.validation import ValidationResult, ValidationSummary
from app.models.prioritization import PriorityAssignment, PrioritizationMatrix

# Workflows, lineage, synthesis, chat
from app.models.lineage import (
    WorkflowStep,
    WorkflowMap,
    DataLineageEntry,
    WorkflowRunResponse,
)
from app.models.synthesis import Roadmap, RiskItem, WorkshopSynthesis
from app.models.chat import ChatMessage, ChatRequest, ChatResponse

# Workshop
from app.models.workshop import (
    WorkshopBase,
    WorkshopCreate,
    WorkshopStatusUpdate,
    WorkshopSummary,
    Workshop,
    ResearchImportRequest,
    CognitionImportRequest,
    ImportResponse,
)

__all__ = [
    # Common
    "HealthResponse",
    "PaginatedResponse",
    "ErrorResponse",
    "MessageResponse",
    # Enums
    "WorkshopStatus",
    "SourceSystem",
    "ChallengeType",
    "Severity",
    "ChallengeStatus",
    "ReadinessDimension",
    "BenefitCategory",
    "Quadrant",
    "Track",
    "GenerationMode",
    "READINESS_WEIGHTS",
    "VALID_STATUS_TRANSITIONS",
    "VALID_CHALLENGE_TRANSITIONS",
    # Use cases
    "UseCaseFields",
    "RawUseCase",
    "UseCase",
    "UseCaseUpdate",
    "ReconciliationConflict",
    "ReconciliationResponse",
    # Survey
    "SurveyQuestion",
    "Survey",
    "SurveyAnswer",
    "SurveyResponseCreate",
    "ReadinessScores",
    "SurveyState",
    # Challenges
    "ChallengeLogEntry",
    "ChallengeResolution",
    "ChallengeBatchSummary",
    "ChallengeRunResponse",
    # Validation / prioritization
    "ValidationResult",
    "ValidationSummary",
    "PriorityAssignment",
    "PrioritizationMatrix",
    # Workflows / synthesis / chat
    "WorkflowStep",
    "WorkflowMap",
    "DataLineageEntry",
    "WorkflowRunResponse",
    "Roadmap",
    "RiskItem",
    "WorkshopSynthesis",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    # Workshop
    "WorkshopBase",
    "WorkshopCreate",
    "WorkshopStatusUpdate",
    "WorkshopSummary",
    "Workshop",
    "ResearchImportRequest",
    "CognitionImportRequest",
    "ImportResponse",
]
