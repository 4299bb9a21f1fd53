"""Prioritization matrix Pydantic models."""
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field
from .enums import Quadrant, Track


class PriorityAssignment(BaseModel):
    """Quadrant and track placement of one use case."""
    use_case_id: str
    title: str
    value_score: float = Field(..., ge=1, le=10)
    readiness_score: float = Field(..., ge=1, le=10)
    quadrant: Quadrant
    track: Track
    benefit_basis: Literal["validated", "original"] = "original"
    benefit: float = Field(default=0.0, ge=0)


class PrioritizationMatrix(BaseModel):
    """Derived value vs readiness matrix for a workshop."""
    assignments: list[PriorityAssignment] = Field(default_factory=list)
    quadrant_counts: dict[str, int] = Field(default_factory=dict)
    track_counts: dict[str, int] = Field(default_factory=dict)
    threshold: float
    generated_at: datetime

    def ranked(self) -> list[PriorityAssignment]:
        """Assignments ordered by combined score, highest first (stable)."""
        return sorted(
            self.assignments,
            key=lambda a: a.value_score + a.readiness_score,
            reverse=True,
        )
