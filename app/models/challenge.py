"""Challenge log Pydantic models."""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict, field_validator
from .enums import ChallengeStatus, ChallengeType, GenerationMode, Severity


class ChallengeLogEntry(BaseModel):
    """One challenged assumption awaiting (or holding) a human response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workshop_id: UUID
    use_case_id: str
    batch_id: UUID
    challenge_type: ChallengeType
    field_name: str = ""
    severity: Severity = Severity.MEDIUM
    original_value: Any = None
    challenged_value: Any = None
    evidence: str = ""
    status: ChallengeStatus = ChallengeStatus.PENDING
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime


class ChallengeResolution(BaseModel):
    """Human response to a challenge."""
    status: ChallengeStatus
    responded_by: str = Field(..., min_length=1, max_length=255)

    @field_validator("status")
    @classmethod
    def status_must_be_terminal(cls, v: ChallengeStatus) -> ChallengeStatus:
        """A response either accepts or rejects; pending is not a response."""
        if v == ChallengeStatus.PENDING:
            raise ValueError("status must be 'accepted' or 'rejected'")
        return v

    @field_validator("responded_by")
    @classmethod
    def responded_by_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("responded_by is required")
        return v


class ChallengeBatchSummary(BaseModel):
    """Summary of the latest challenge run, stored on the workshop."""
    batch_id: UUID
    total_challenges: int
    high_severity_count: int
    by_type: dict[str, int] = Field(default_factory=dict)
    mode: GenerationMode
    generated_at: datetime


class ChallengeRunResponse(ChallengeBatchSummary):
    """Challenge step response including the new entries."""
    entries: list[ChallengeLogEntry] = Field(default_factory=list)
