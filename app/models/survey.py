"""Readiness survey Pydantic models."""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from .enums import GenerationMode, ReadinessDimension


class SurveyQuestion(BaseModel):
    """One maturity question, answered on a 1-5 scale."""
    id: str = Field(..., min_length=1)
    dimension: ReadinessDimension
    category: str = ""
    question: str = Field(..., min_length=1)
    hint: str = ""
    weight: int = Field(default=1, ge=1, le=2)
    use_case_ids: List[str] = Field(default_factory=list)


class Survey(BaseModel):
    """Generated survey template for a workshop."""
    questions: List[SurveyQuestion] = Field(default_factory=list)
    mode: GenerationMode = GenerationMode.DEMO
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def question(self, question_id: str) -> Optional[SurveyQuestion]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class SurveyAnswer(BaseModel):
    """Participant answer to a survey question."""
    question_id: str = Field(..., min_length=1)
    maturity_level: int = Field(..., ge=1, le=5)
    notes: str = ""


class SurveyResponseCreate(BaseModel):
    """Submitted answers for a workshop survey."""
    respondent: Optional[str] = Field(None, max_length=255)
    answers: List[SurveyAnswer] = Field(..., min_length=1)

    @field_validator("answers")
    @classmethod
    def unique_questions(cls, v: List[SurveyAnswer]) -> List[SurveyAnswer]:
        """Each question may be answered at most once per submission."""
        ids = [a.question_id for a in v]
        if len(ids) != len(set(ids)):
            raise ValueError("each question_id may appear only once")
        return v


class ReadinessScores(BaseModel):
    """Per-dimension and overall maturity (1-5) derived from survey answers."""
    data: float = Field(..., ge=1, le=5)
    process: float = Field(..., ge=1, le=5)
    organizational: float = Field(..., ge=1, le=5)
    technical: float = Field(..., ge=1, le=5)
    overall: float = Field(..., ge=1, le=5)
    answered_count: int = Field(default=0, ge=0)
    scored_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def for_dimension(self, dimension: ReadinessDimension) -> float:
        return getattr(self, dimension.value)


class SurveyState(BaseModel):
    """Survey template together with the latest scores."""
    survey: Optional[Survey] = None
    readiness_scores: Optional[ReadinessScores] = None
