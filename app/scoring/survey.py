"""Readiness survey scoring.

  dimension maturity = Σ(weight_q × level_q) / Σ weight_q   over answered questions
  overall            = Σ(W_d × maturity_d)                   W = READINESS_WEIGHTS

Dimensions without any answer take the neutral maturity 3.
"""
from decimal import Decimal
from typing import Dict, List

import structlog

from app.errors import ValidationInputMissing
from app.models.enums import READINESS_WEIGHTS, ReadinessDimension
from app.models.survey import ReadinessScores, Survey, SurveyAnswer
from app.scoring.confidence import NEUTRAL_MATURITY
from app.scoring.utils import to_decimal, weighted_mean

logger = structlog.get_logger(__name__)


class SurveyScorer:
    """Turn survey answers into per-dimension and overall readiness."""

    def score(self, survey: Survey, answers: List[SurveyAnswer]) -> ReadinessScores:
        """Score answers against the survey's questions.

        Raises:
            ValidationInputMissing: An answer references an unknown question.
        """
        levels: Dict[ReadinessDimension, List[Decimal]] = {d: [] for d in ReadinessDimension}
        weights: Dict[ReadinessDimension, List[Decimal]] = {d: [] for d in ReadinessDimension}

        for answer in answers:
            question = survey.question(answer.question_id)
            if question is None:
                raise ValidationInputMissing(
                    f"Unknown survey question: {answer.question_id}"
                )
            levels[question.dimension].append(Decimal(answer.maturity_level))
            weights[question.dimension].append(Decimal(question.weight))

        maturity: Dict[ReadinessDimension, Decimal] = {}
        for dimension in ReadinessDimension:
            if levels[dimension]:
                maturity[dimension] = weighted_mean(levels[dimension], weights[dimension])
            else:
                maturity[dimension] = NEUTRAL_MATURITY

        overall = weighted_mean(
            [maturity[d] for d in READINESS_WEIGHTS],
            [to_decimal(w) for w in READINESS_WEIGHTS.values()],
        )

        scores = ReadinessScores(
            data=float(to_decimal(maturity[ReadinessDimension.DATA], 2)),
            process=float(to_decimal(maturity[ReadinessDimension.PROCESS], 2)),
            organizational=float(to_decimal(maturity[ReadinessDimension.ORGANIZATIONAL], 2)),
            technical=float(to_decimal(maturity[ReadinessDimension.TECHNICAL], 2)),
            overall=float(to_decimal(overall, 2)),
            answered_count=len(answers),
        )
        logger.info(
            "survey_scored",
            answered=len(answers),
            overall=scores.overall,
            **{d.value: scores.for_dimension(d) for d in ReadinessDimension},
        )
        return scores
