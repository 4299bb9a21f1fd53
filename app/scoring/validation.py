"""Benefit validation engine.

  validated_benefit = original_benefit × confidence_factor(C)
  overall_discount  = 1 − Σ validated / Σ original        (0 when Σ original = 0)

All arithmetic is Decimal, so repeated runs over unchanged inputs yield
identical totals. Narrative text may be supplied by the generation
collaborator; amounts and flags are always computed here.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import structlog

from app.models.enums import BenefitCategory, GenerationMode
from app.models.generation import GeneratedValidationNote
from app.models.survey import ReadinessScores
from app.models.use_case import UseCase
from app.models.validation import ValidationResult, ValidationSummary
from app.scoring.confidence import ConfidenceAssessment, ConfidenceCalculator
from app.scoring.utils import mean, safe_ratio, to_decimal, to_money

logger = structlog.get_logger(__name__)

LOW_CONFIDENCE_THRESHOLD: Decimal = Decimal("60")
CONCENTRATION_THRESHOLD: Decimal = Decimal("0.70")
HIGH_COMPLEXITY_THRESHOLD: float = 8.0

FLAG_LOW_CONFIDENCE = "low_confidence"
FLAG_ZERO_BENEFIT = "zero_benefit"
FLAG_HIGH_COMPLEXITY = "high_complexity"
FLAG_NO_SURVEY = "no_readiness_survey"


def risk_flags(
    use_case: UseCase,
    assessment: ConfidenceAssessment,
    extra: Optional[List[str]] = None,
) -> List[str]:
    """Sorted, de-duplicated risk flags for one use case."""
    flags: set[str] = set()
    original = to_money(use_case.total_benefit)

    if assessment.confidence_level < LOW_CONFIDENCE_THRESHOLD:
        flags.add(FLAG_LOW_CONFIDENCE)
    if original == Decimal(0):
        flags.add(FLAG_ZERO_BENEFIT)
    else:
        for category, amount in use_case.benefit_breakdown().items():
            if safe_ratio(to_money(amount), original) > CONCENTRATION_THRESHOLD:
                flags.add(f"benefit_concentration:{category.value}")
    if use_case.complexity is not None and use_case.complexity >= HIGH_COMPLEXITY_THRESHOLD:
        flags.add(FLAG_HIGH_COMPLEXITY)
    if not assessment.survey_based:
        flags.add(FLAG_NO_SURVEY)
    for flag in extra or []:
        flag = flag.strip()
        if flag:
            flags.add(flag)
    return sorted(flags)


class ValidationEngine:
    """Apply confidence-based adjustments to use case benefits."""

    def __init__(self, calculator: Optional[ConfidenceCalculator] = None) -> None:
        self.calculator = calculator or ConfidenceCalculator()

    def validate_use_case(
        self,
        use_case: UseCase,
        readiness: Optional[ReadinessScores],
        note: Optional[GeneratedValidationNote] = None,
    ) -> ValidationResult:
        assessment = self.calculator.assess(readiness, use_case.data_readiness)
        original = to_money(use_case.total_benefit)
        validated = to_money(original * assessment.confidence_factor)

        retained = to_decimal(assessment.confidence_factor * Decimal(100), 1)
        reason = (
            note.adjustment_reason
            if note is not None and note.adjustment_reason
            else f"{retained}% of the estimate retained at "
                 f"{assessment.confidence_level} confidence"
        )
        source = (
            note.benchmark_source
            if note is not None and note.benchmark_source
            else ("Workshop readiness survey" if assessment.survey_based
                  else "Neutral maturity assumption (no readiness survey)")
        )

        return ValidationResult(
            use_case_id=use_case.id,
            original_benefit=float(original),
            validated_benefit=float(validated),
            confidence_level=float(assessment.confidence_level),
            confidence_factor=float(assessment.confidence_factor),
            adjustment_reason=reason,
            benchmark_source=source,
            risk_flags=risk_flags(use_case, assessment, note.risk_flags if note else None),
        )

    def validate(
        self,
        use_cases: List[UseCase],
        readiness: Optional[ReadinessScores],
        notes: Optional[Dict[str, GeneratedValidationNote]] = None,
        mode: GenerationMode = GenerationMode.DEMO,
    ) -> ValidationSummary:
        """Validate every use case and aggregate portfolio totals."""
        notes = notes or {}
        results = [
            self.validate_use_case(uc, readiness, notes.get(uc.id)) for uc in use_cases
        ]

        total_original = sum((to_money(r.original_benefit) for r in results), Decimal(0))
        total_validated = sum((to_money(r.validated_benefit) for r in results), Decimal(0))
        average = mean([to_decimal(r.confidence_level, 2) for r in results]) or Decimal(0)
        discount = (
            Decimal(1) - safe_ratio(total_validated, total_original)
            if total_original > Decimal(0)
            else Decimal(0)
        )

        summary = ValidationSummary(
            results=results,
            total_original_value=float(total_original),
            total_validated_value=float(total_validated),
            average_confidence=float(to_decimal(average, 2)),
            overall_discount=float(to_decimal(discount, 4)),
            mode=mode,
            generated_at=datetime.now(timezone.utc),
        )
        logger.info(
            "validation_completed",
            use_cases=len(results),
            total_original=summary.total_original_value,
            total_validated=summary.total_validated_value,
            average_confidence=summary.average_confidence,
            overall_discount=summary.overall_discount,
            survey_based=readiness is not None,
            mode=mode.value,
        )
        return summary
