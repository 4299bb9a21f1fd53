"""Executive synthesis Pydantic models."""
from datetime import datetime, timezone
from typing import List
from pydantic import BaseModel, Field
from .enums import GenerationMode, Severity


class Roadmap(BaseModel):
    """30/60/90-day action plan."""
    thirty_day: List[str] = Field(default_factory=list)
    sixty_day: List[str] = Field(default_factory=list)
    ninety_day: List[str] = Field(default_factory=list)


class RiskItem(BaseModel):
    risk: str
    mitigation: str = ""
    severity: Severity = Severity.MEDIUM


class WorkshopSynthesis(BaseModel):
    """Executive summary of a finished workshop."""
    executive_summary: str
    top_recommendations: List[str] = Field(default_factory=list)
    roadmap: Roadmap = Field(default_factory=Roadmap)
    risk_register: List[RiskItem] = Field(default_factory=list)
    total_estimated_value: float = Field(default=0.0, ge=0)
    top_quick_wins: List[str] = Field(default_factory=list)
    mode: GenerationMode = GenerationMode.DEMO
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
