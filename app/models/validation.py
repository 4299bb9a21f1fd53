"""Benefit validation Pydantic models."""
from datetime import datetime
from pydantic import BaseModel, Field
from .enums import GenerationMode


class ValidationResult(BaseModel):
    """Confidence-adjusted benefit for one use case."""
    use_case_id: str
    original_benefit: float = Field(..., ge=0)
    validated_benefit: float = Field(..., ge=0)
    confidence_level: float = Field(..., ge=0, le=100)
    confidence_factor: float = Field(..., ge=0, le=1)
    adjustment_reason: str = ""
    benchmark_source: str = ""
    risk_flags: list[str] = Field(default_factory=list)


class ValidationSummary(BaseModel):
    """Portfolio-level validation results for a workshop."""
    results: list[ValidationResult] = Field(default_factory=list)
    total_original_value: float = 0.0
    total_validated_value: float = 0.0
    average_confidence: float = 0.0
    overall_discount: float = 0.0
    mode: GenerationMode = GenerationMode.DEMO
    generated_at: datetime

    def result_for(self, use_case_id: str) -> ValidationResult | None:
        """Return the validation result for one use case, if any."""
        for result in self.results:
            if result.use_case_id == use_case_id:
                return result
        return None
