"""Benefit confidence model.

Formulas
--------
  Survey confidence:
      C_s = 100 × (M − 1) / 4          M = overall maturity (1–5), 3 if no survey

  Use-case blend (when the use case carries its own data readiness D, 1–10):
      C = 0.8 × C_s + 0.2 × 100 × (D − 1) / 9

  Confidence factor (piecewise linear, non-decreasing, bounded in [0, 1]):
      C:  0     25    50    75    100
      f:  0.35  0.55  0.75  0.90  0.975
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog

from app.models.survey import ReadinessScores
from app.scoring.utils import clamp, interpolate, to_decimal

logger = structlog.get_logger(__name__)

NEUTRAL_MATURITY: Decimal = Decimal("3")
SURVEY_WEIGHT: Decimal = Decimal("0.8")
USE_CASE_WEIGHT: Decimal = Decimal("0.2")

CONFIDENCE_CURVE: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("0"), Decimal("0.35")),
    (Decimal("25"), Decimal("0.55")),
    (Decimal("50"), Decimal("0.75")),
    (Decimal("75"), Decimal("0.90")),
    (Decimal("100"), Decimal("0.975")),
)


def maturity_to_confidence(maturity: Decimal) -> Decimal:
    """Map 1–5 maturity onto 0–100 confidence."""
    maturity = clamp(maturity, Decimal(1), Decimal(5))
    return to_decimal(Decimal(100) * (maturity - Decimal(1)) / Decimal(4), 2)


def confidence_factor(confidence_level: float) -> Decimal:
    """Share of an estimated benefit retained at the given confidence (0–100)."""
    level = clamp(to_decimal(confidence_level, 2))
    return clamp(
        to_decimal(interpolate(level, CONFIDENCE_CURVE), 4),
        Decimal(0),
        Decimal(1),
    )


@dataclass
class ConfidenceAssessment:
    """Confidence for one use case with its inputs."""

    confidence_level: Decimal
    confidence_factor: Decimal
    maturity: Decimal
    survey_based: bool
    data_readiness: Optional[Decimal]

    def to_dict(self) -> dict:
        return {
            "confidence_level": float(self.confidence_level),
            "confidence_factor": float(self.confidence_factor),
            "maturity": float(self.maturity),
            "survey_based": self.survey_based,
            "data_readiness": (
                float(self.data_readiness) if self.data_readiness is not None else None
            ),
        }


class ConfidenceCalculator:
    """Derive benefit confidence from survey maturity and use case data readiness."""

    def assess(
        self,
        readiness: Optional[ReadinessScores],
        data_readiness: Optional[float] = None,
    ) -> ConfidenceAssessment:
        maturity = (
            to_decimal(readiness.overall) if readiness is not None else NEUTRAL_MATURITY
        )
        level = maturity_to_confidence(maturity)

        dr: Optional[Decimal] = None
        if data_readiness is not None:
            dr = clamp(to_decimal(data_readiness), Decimal(1), Decimal(10))
            use_case_level = Decimal(100) * (dr - Decimal(1)) / Decimal(9)
            level = SURVEY_WEIGHT * level + USE_CASE_WEIGHT * use_case_level

        level = clamp(to_decimal(level, 2))
        return ConfidenceAssessment(
            confidence_level=level,
            confidence_factor=confidence_factor(level),
            maturity=maturity,
            survey_based=readiness is not None,
            data_readiness=dr,
        )
