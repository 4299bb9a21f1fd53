"""Value vs readiness prioritization.

Scores (both clamped to [1, 10])
--------------------------------
  value     = 1 + 9 × (ln B − ln floor) / (ln ceiling − ln floor)
              B = validated benefit when available, else original total
  readiness = 0.4 × DR + 0.3 × (11 − CX) + 0.3 × (11 − IE)     missing inputs = 5
              blended 0.7 / 0.3 with survey maturity mapped to 1–10

Quadrants split at the threshold (default 7, inclusive on the high side).
Tracks: Champion T1 (T2 when CX ≥ 8), Quick Win T1 (T2 when CX > 5),
Strategic T2 (T3 when CX > 6), Foundation T3 (T2 when CX ≤ 3).
"""
from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import structlog

from app.models.enums import Quadrant, Track
from app.models.prioritization import PrioritizationMatrix, PriorityAssignment
from app.models.survey import ReadinessScores
from app.models.use_case import UseCase
from app.models.validation import ValidationSummary
from app.scoring.utils import clamp, log_scale, to_decimal, to_money

logger = structlog.get_logger(__name__)

DEFAULT_THRESHOLD: float = 7.0
DEFAULT_FLOOR: float = 50_000.0
DEFAULT_CEILING: float = 10_000_000.0
MISSING_INPUT: Decimal = Decimal("5")

W_DATA: Decimal = Decimal("0.4")
W_COMPLEXITY: Decimal = Decimal("0.3")
W_INTEGRATION: Decimal = Decimal("0.3")
W_USE_CASE: Decimal = Decimal("0.7")
W_SURVEY: Decimal = Decimal("0.3")

SCORE_MIN: Decimal = Decimal(1)
SCORE_MAX: Decimal = Decimal(10)


def _input(value: Optional[float]) -> Decimal:
    return to_decimal(value) if value is not None else MISSING_INPUT


def assign_quadrant(value_score: float, readiness_score: float,
                    threshold: float = DEFAULT_THRESHOLD) -> Quadrant:
    high_value = value_score >= threshold
    high_readiness = readiness_score >= threshold
    if high_value and high_readiness:
        return Quadrant.CHAMPION
    if high_readiness:
        return Quadrant.QUICK_WIN
    if high_value:
        return Quadrant.STRATEGIC
    return Quadrant.FOUNDATION


def assign_track(quadrant: Quadrant, complexity: Optional[float]) -> Track:
    cx = float(complexity) if complexity is not None else float(MISSING_INPUT)
    if quadrant == Quadrant.CHAMPION:
        return Track.T2 if cx >= 8 else Track.T1
    if quadrant == Quadrant.QUICK_WIN:
        return Track.T2 if cx > 5 else Track.T1
    if quadrant == Quadrant.STRATEGIC:
        return Track.T3 if cx > 6 else Track.T2
    return Track.T2 if cx <= 3 else Track.T3


class PrioritizationEngine:
    """Score use cases and place them on the value / readiness matrix.

    Parameters
    ----------
    threshold:
        Quadrant split point on both axes (default 7).
    value_floor, value_ceiling:
        Benefit (USD) mapped to value score 1 and 10 respectively.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        value_floor: float = DEFAULT_FLOOR,
        value_ceiling: float = DEFAULT_CEILING,
    ) -> None:
        if value_floor <= 0 or value_ceiling <= value_floor:
            raise ValueError("value_floor must be positive and below value_ceiling")
        self.threshold = threshold
        self.floor = to_money(value_floor)
        self.ceiling = to_money(value_ceiling)

    # ── scores ────────────────────────────────────────────────────────────────

    def value_score(self, benefit: float) -> float:
        score = log_scale(to_money(max(benefit, 0.0)), self.floor, self.ceiling,
                          SCORE_MIN, SCORE_MAX)
        return float(to_decimal(score, 2))

    def readiness_score(self, use_case: UseCase,
                        readiness: Optional[ReadinessScores] = None) -> float:
        dr = _input(use_case.data_readiness)
        cx = _input(use_case.complexity)
        ie = _input(use_case.integration_effort)
        score = (
            W_DATA * dr
            + W_COMPLEXITY * (Decimal(11) - cx)
            + W_INTEGRATION * (Decimal(11) - ie)
        )
        if readiness is not None:
            survey_score = Decimal(1) + (to_decimal(readiness.overall) - Decimal(1)) * Decimal(9) / Decimal(4)
            score = W_USE_CASE * score + W_SURVEY * survey_score
        return float(to_decimal(clamp(score, SCORE_MIN, SCORE_MAX), 2))

    def score_use_cases(
        self,
        use_cases: List[UseCase],
        readiness: Optional[ReadinessScores] = None,
        validation: Optional[ValidationSummary] = None,
    ) -> List[UseCase]:
        """Copies of ``use_cases`` with value and readiness scores recomputed."""
        scored = []
        for uc in use_cases:
            benefit, _ = self._benefit(uc, validation)
            scored.append(uc.model_copy(update={
                "value_score": self.value_score(benefit),
                "readiness_score": self.readiness_score(uc, readiness),
            }))
        return scored

    # ── matrix ────────────────────────────────────────────────────────────────

    def build_matrix(
        self,
        use_cases: List[UseCase],
        readiness: Optional[ReadinessScores] = None,
        validation: Optional[ValidationSummary] = None,
    ) -> PrioritizationMatrix:
        assignments: List[PriorityAssignment] = []
        for uc in use_cases:
            benefit, basis = self._benefit(uc, validation)
            value = self.value_score(benefit)
            ready = self.readiness_score(uc, readiness)
            quadrant = assign_quadrant(value, ready, self.threshold)
            assignments.append(PriorityAssignment(
                use_case_id=uc.id,
                title=uc.title,
                value_score=value,
                readiness_score=ready,
                quadrant=quadrant,
                track=assign_track(quadrant, uc.complexity),
                benefit_basis=basis,
                benefit=benefit,
            ))

        quadrant_counts = Counter(a.quadrant.value for a in assignments)
        track_counts = Counter(a.track.value for a in assignments)
        matrix = PrioritizationMatrix(
            assignments=assignments,
            quadrant_counts={q.value: quadrant_counts.get(q.value, 0) for q in Quadrant},
            track_counts={t.value: track_counts.get(t.value, 0) for t in Track},
            threshold=self.threshold,
            generated_at=datetime.now(timezone.utc),
        )
        logger.info(
            "prioritization_completed",
            use_cases=len(assignments),
            quadrants=matrix.quadrant_counts,
            tracks=matrix.track_counts,
            survey_based=readiness is not None,
            validated=validation is not None,
        )
        return matrix

    @staticmethod
    def _benefit(use_case: UseCase,
                 validation: Optional[ValidationSummary]) -> tuple[float, str]:
        if validation is not None:
            result = validation.result_for(use_case.id)
            if result is not None:
                return result.validated_benefit, "validated"
        return use_case.total_benefit, "original"
