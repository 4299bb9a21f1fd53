"""Challenge engine: dispute optimistic assumptions behind use case estimates.

Severity from relative deviation d = |challenged − original| / |original|:
  d > 0.40 → high,  0.15 ≤ d ≤ 0.40 → medium,  d < 0.15 → low
An original of 0 with a non-zero challenged value is high. Non-numeric
values keep the proposed severity (medium when none is given).

Entries are append-only: each run is a new batch, and an entry leaves
``pending`` exactly once.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from uuid import UUID, uuid4

import structlog

from app.errors import AlreadyResolved, ValidationInputMissing
from app.models.challenge import ChallengeLogEntry
from app.models.enums import (
    VALID_CHALLENGE_TRANSITIONS,
    ChallengeStatus,
    ChallengeType,
    Severity,
)
from app.models.generation import GeneratedChallenge
from app.models.survey import ReadinessScores
from app.models.use_case import UseCase
from app.scoring.utils import to_decimal, to_money

logger = structlog.get_logger(__name__)

HIGH_DEVIATION: Decimal = Decimal("0.40")
MEDIUM_DEVIATION: Decimal = Decimal("0.15")

# Share of an estimate typically not realized, by overall maturity (1–5)
_HAIRCUT_BASE: Decimal = Decimal("0.10")
_HAIRCUT_PER_LEVEL: Decimal = Decimal("0.10")
_REVENUE_SHARE_LIMIT: Decimal = Decimal("0.5")
_REVENUE_ATTRIBUTION: Decimal = Decimal("0.6")


def _numeric(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return to_decimal(value) if Decimal(str(value)).is_finite() else None
    if isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        try:
            parsed = Decimal(cleaned)
        except InvalidOperation:
            return None
        return to_decimal(parsed) if parsed.is_finite() else None
    return None


def severity_for(original: Any, challenged: Any,
                 proposed: Optional[Severity] = None) -> Severity:
    """Severity band for a challenged value."""
    o = _numeric(original)
    c = _numeric(challenged)
    if o is None or c is None:
        return proposed or Severity.MEDIUM
    if o == Decimal(0):
        return Severity.HIGH if c != Decimal(0) else Severity.LOW
    deviation = abs(c - o) / abs(o)
    if deviation > HIGH_DEVIATION:
        return Severity.HIGH
    if deviation >= MEDIUM_DEVIATION:
        return Severity.MEDIUM
    return Severity.LOW


class ChallengeEngine:
    """Build challenge batches and apply human responses."""

    # ── batch creation ────────────────────────────────────────────────────────

    def build_batch(
        self,
        workshop_id: UUID,
        use_cases: List[UseCase],
        readiness: Optional[ReadinessScores] = None,
        candidates: Optional[List[GeneratedChallenge]] = None,
        batch_id: Optional[UUID] = None,
    ) -> List[ChallengeLogEntry]:
        """Pending entries for a new batch.

        Collaborator candidates are kept only when they reference a known use
        case; their severity is recomputed. Without usable candidates the
        heuristic set is produced.
        """
        batch_id = batch_id or uuid4()
        now = datetime.now(timezone.utc)
        known = {uc.id for uc in use_cases}

        usable = []
        for candidate in candidates or []:
            if candidate.use_case_id not in known:
                logger.warning("challenge_candidate_dropped",
                               use_case_id=candidate.use_case_id,
                               reason="unknown_use_case")
                continue
            usable.append(candidate)
        if not usable:
            usable = self.heuristic_candidates(use_cases, readiness)

        entries = [
            ChallengeLogEntry(
                id=uuid4(),
                workshop_id=workshop_id,
                use_case_id=c.use_case_id,
                batch_id=batch_id,
                challenge_type=c.challenge_type,
                field_name=c.field_name,
                severity=severity_for(c.original_value, c.challenged_value, c.severity),
                original_value=c.original_value,
                challenged_value=c.challenged_value,
                evidence=c.evidence,
                status=ChallengeStatus.PENDING,
                created_at=now,
            )
            for c in usable
        ]
        logger.info(
            "challenge_batch_built",
            workshop_id=str(workshop_id),
            batch_id=str(batch_id),
            entries=len(entries),
            high=sum(1 for e in entries if e.severity == Severity.HIGH),
        )
        return entries

    def heuristic_candidates(
        self,
        use_cases: List[UseCase],
        readiness: Optional[ReadinessScores] = None,
    ) -> List[GeneratedChallenge]:
        """Deterministic challenges derived from the use case data alone."""
        maturity = to_decimal(readiness.overall) if readiness is not None else Decimal(3)
        haircut = _HAIRCUT_BASE + _HAIRCUT_PER_LEVEL * (Decimal(5) - maturity)
        out: List[GeneratedChallenge] = []

        for uc in use_cases:
            total = to_money(uc.total_benefit)
            if total > Decimal(0):
                out.append(GeneratedChallenge(
                    use_case_id=uc.id,
                    challenge_type=ChallengeType.BENEFIT,
                    field_name="total_benefit",
                    original_value=float(total),
                    challenged_value=float(to_money(total * (Decimal(1) - haircut))),
                    evidence=(
                        f"At readiness maturity {to_decimal(maturity, 1)} of 5, roughly "
                        f"{to_decimal(haircut * 100, 0)}% of estimated benefit typically "
                        f"goes unrealized in the first year."
                    ),
                ))

            if uc.data_readiness is not None:
                if readiness is not None:
                    survey_dr = to_decimal(
                        Decimal(1) + (to_decimal(readiness.data) - Decimal(1)) * Decimal(9) / Decimal(4), 1
                    )
                    basis = f"survey data maturity of {readiness.data} / 5"
                else:
                    survey_dr = Decimal(5)
                    basis = "no readiness survey (neutral assumption)"
                if abs(to_decimal(uc.data_readiness) - survey_dr) >= Decimal(1):
                    out.append(GeneratedChallenge(
                        use_case_id=uc.id,
                        challenge_type=ChallengeType.ASSUMPTION,
                        field_name="data_readiness",
                        original_value=uc.data_readiness,
                        challenged_value=float(survey_dr),
                        evidence=f"Assumed data readiness differs from the {basis}.",
                    ))

            revenue = to_money(uc.revenue_impact)
            if total > Decimal(0) and revenue / total > _REVENUE_SHARE_LIMIT:
                out.append(GeneratedChallenge(
                    use_case_id=uc.id,
                    challenge_type=ChallengeType.KPI,
                    field_name="revenue_impact",
                    original_value=float(revenue),
                    challenged_value=float(to_money(revenue * _REVENUE_ATTRIBUTION)),
                    evidence=(
                        f"Revenue uplift is {to_decimal(revenue / total * 100, 0)}% of the "
                        f"benefit; attribution needs a measurable KPI and baseline."
                    ),
                ))

            if (
                uc.complexity is not None
                and uc.integration_effort is not None
                and uc.integration_effort - uc.complexity >= 2
            ):
                out.append(GeneratedChallenge(
                    use_case_id=uc.id,
                    challenge_type=ChallengeType.FRICTION,
                    field_name="complexity",
                    original_value=uc.complexity,
                    challenged_value=uc.integration_effort,
                    evidence=(
                        "Integration effort exceeds the stated complexity; "
                        "system integration friction is likely underestimated."
                    ),
                ))
        return out

    # ── responses ─────────────────────────────────────────────────────────────

    def resolve(
        self,
        entry: ChallengeLogEntry,
        status: ChallengeStatus,
        responded_by: str,
    ) -> ChallengeLogEntry:
        """Resolved copy of ``entry``. The input entry is never modified.

        Raises:
            AlreadyResolved: The entry is no longer pending.
            ValidationInputMissing: Blank responder or a non-terminal status.
        """
        if entry.status != ChallengeStatus.PENDING:
            raise AlreadyResolved(
                f"Challenge {entry.id} was already {entry.status.value}"
            )
        if status not in VALID_CHALLENGE_TRANSITIONS[entry.status]:
            raise ValidationInputMissing(
                f"Challenge status must move to accepted or rejected, not {status.value}"
            )
        if not responded_by or not responded_by.strip():
            raise ValidationInputMissing("responded_by is required")

        resolved = entry.model_copy(update={
            "status": status,
            "responded_by": responded_by.strip(),
            "responded_at": datetime.now(timezone.utc),
        })
        logger.info("challenge_resolved", challenge_id=str(entry.id),
                    status=status.value, responded_by=resolved.responded_by)
        return resolved
