"""Reconciliation of ResearchApp and CognitionTwo use cases.

Merge policy
------------
  * Duplicates are detected with ``SimilarityMatcher`` both within a source
    and across sources.
  * Empty values never overwrite present ones.
  * Financial benefit fields: ResearchApp wins when both supply a value.
  * Behavioral / agentic pattern fields: CognitionTwo wins.
  * Effort fields: averaged when both are present.
  * Remaining text fields keep the first non-empty value (ResearchApp first).
  * Every disagreement between two present values is recorded as a conflict.

Output order follows first appearance (ResearchApp entries, then unmatched
CognitionTwo entries) and ids are assigned ``UC-001``, ``UC-002``, ... in that
order. On a re-run, a survivor matching a previously reconciled use case keeps
that use case's id; new survivors number on from the highest id in use.
A collapse pass merges any survivors that still match so that no two returned
use cases are similar above the threshold.
"""
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog

from app.models.enums import SourceSystem
from app.models.use_case import (
    RawUseCase,
    ReconciliationConflict,
    UseCase,
    UseCaseFields,
)
from app.scoring.similarity import DEFAULT_MATCH_THRESHOLD, SimilarityMatcher
from app.scoring.utils import to_decimal

logger = structlog.get_logger(__name__)

FINANCIAL_FIELDS = (
    "cost_savings",
    "risk_reduction",
    "revenue_impact",
    "cash_flow_improvement",
    "three_year_npv",
    "time_to_value_months",
)
BEHAVIORAL_FIELDS = (
    "agentic_pattern",
    "horizon",
    "automation_level",
    "ai_primitives",
    "friction_point",
    "legacy_process_steps",
    "legacy_pain_points",
    "legacy_annual_cost",
    "business_value",
    "trust_tax_percent",
)
EFFORT_FIELDS = ("complexity", "data_readiness", "integration_effort")
_ID_PATTERN = re.compile(r"UC-(\d+)")
FIELD_NAMES: tuple[str, ...] = tuple(UseCaseFields.model_fields)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == 0


def use_case_id(position: int) -> str:
    """Workshop-scoped id for the use case at 0-based ``position``."""
    return f"UC-{position + 1:03d}"


def _id_number(uc_id: str) -> int:
    match = _ID_PATTERN.fullmatch(uc_id)
    return int(match.group(1)) if match else 0


@dataclass
class _Cluster:
    """Working state for one surviving use case during reconciliation."""

    values: Dict[str, Any]
    sources: List[SourceSystem]
    provenance: Dict[str, SourceSystem]
    conflicts: List[ReconciliationConflict] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: RawUseCase) -> "_Cluster":
        values = {name: getattr(raw, name) for name in FIELD_NAMES}
        provenance = {
            name: raw.source for name, value in values.items() if not _is_empty(value)
        }
        return cls(values=values, sources=[raw.source], provenance=provenance)

    def as_fields(self) -> UseCaseFields:
        return UseCaseFields(**self.values)

    def absorb(self, other: "_Cluster") -> None:
        """Fill empty fields from ``other``; present values are kept."""
        for name in FIELD_NAMES:
            if _is_empty(self.values[name]) and not _is_empty(other.values[name]):
                self.values[name] = other.values[name]
                if name in other.provenance:
                    self.provenance[name] = other.provenance[name]
        for source in other.sources:
            if source not in self.sources:
                self.sources.append(source)
        self.conflicts.extend(other.conflicts)


@dataclass
class ReconciliationResult:
    """Reconciled use cases with counts and conflicts."""

    use_cases: List[UseCase]
    conflicts: List[ReconciliationConflict]
    matched_count: int
    research_only_count: int
    cognition_only_count: int

    @classmethod
    def empty(cls) -> "ReconciliationResult":
        return cls(use_cases=[], conflicts=[], matched_count=0,
                   research_only_count=0, cognition_only_count=0)

    def to_dict(self) -> dict:
        return {
            "use_case_count": len(self.use_cases),
            "matched_count": self.matched_count,
            "research_only_count": self.research_only_count,
            "cognition_only_count": self.cognition_only_count,
            "conflict_count": len(self.conflicts),
        }


class ReconciliationEngine:
    """Merge two raw use case collections into one deduplicated list.

    Parameters
    ----------
    threshold:
        Similarity at or above which two use cases are the same (default 0.8).
    """

    def __init__(self, threshold: float = DEFAULT_MATCH_THRESHOLD) -> None:
        self.matcher = SimilarityMatcher(threshold)
        logger.info("reconciliation_engine_initialized", threshold=threshold)

    # ── public API ────────────────────────────────────────────────────────────

    def reconcile(
        self,
        workshop_id: UUID,
        research: Optional[List[RawUseCase]],
        cognition: Optional[List[RawUseCase]],
        previous: Optional[List[UseCase]] = None,
    ) -> ReconciliationResult:
        """Reconcile the two sources. Neither present returns an empty result.

        ``previous`` holds the use cases of an earlier run whose ids should be
        kept for matching survivors.
        """
        if research is None and cognition is None:
            logger.info("reconciliation_skipped", workshop_id=str(workshop_id),
                        reason="no_sources")
            return ReconciliationResult.empty()

        clusters = self._dedupe(research or [])
        cognition_clusters = self._dedupe(cognition or [])

        # Cross-source matching: each ResearchApp cluster pairs with at most one
        # CognitionTwo cluster
        paired: set[int] = set()
        research_count = len(clusters)
        for c_cluster in cognition_clusters:
            match = self.matcher.find_best_match(
                c_cluster.as_fields(),
                [cl.as_fields() for cl in clusters[:research_count]],
                exclude=paired,
            )
            if match.is_match:
                paired.add(match.index)
                self._merge_sources(clusters[match.index], c_cluster)
            else:
                clusters.append(c_cluster)

        clusters = self._collapse(clusters)
        ids = self._assign_ids(clusters, previous or [])

        use_cases: List[UseCase] = []
        conflicts: List[ReconciliationConflict] = []
        for cluster, uc_id in zip(clusters, ids):
            use_cases.append(
                UseCase(
                    **cluster.values,
                    id=uc_id,
                    workshop_id=workshop_id,
                    sources=cluster.sources,
                    provenance=cluster.provenance,
                )
            )
            conflicts.extend(
                c.model_copy(update={"use_case_id": uc_id}) for c in cluster.conflicts
            )

        result = ReconciliationResult(
            use_cases=use_cases,
            conflicts=conflicts,
            matched_count=sum(1 for cl in clusters if len(cl.sources) > 1),
            research_only_count=sum(
                1 for cl in clusters if cl.sources == [SourceSystem.RESEARCH_APP]
            ),
            cognition_only_count=sum(
                1 for cl in clusters if cl.sources == [SourceSystem.COGNITION_TWO]
            ),
        )
        logger.info("reconciliation_completed", workshop_id=str(workshop_id),
                    **result.to_dict())
        return result

    # ── internals ─────────────────────────────────────────────────────────────

    def _assign_ids(self, clusters: List[_Cluster], previous: List[UseCase]) -> List[str]:
        """Ids for ``clusters`` in order, reusing those of matching earlier use cases."""
        claimed: set[int] = set()
        reused: List[Optional[str]] = []
        for cluster in clusters:
            match = self.matcher.find_best_match(cluster.as_fields(), previous, exclude=claimed)
            if match.is_match:
                claimed.add(match.index)
                reused.append(previous[match.index].id)
            else:
                reused.append(None)

        next_number = max((_id_number(uc.id) for uc in previous), default=0)
        ids: List[str] = []
        for uc_id in reused:
            if uc_id is None:
                uc_id = use_case_id(next_number)
                next_number += 1
            ids.append(uc_id)
        return ids

    def _dedupe(self, raws: List[RawUseCase]) -> List[_Cluster]:
        """Collapse duplicates within a single source."""
        clusters: List[_Cluster] = []
        for raw in raws:
            candidate = _Cluster.from_raw(raw)
            match = self.matcher.find_best_match(
                candidate.as_fields(), [cl.as_fields() for cl in clusters]
            )
            if match.is_match:
                clusters[match.index].absorb(candidate)
            else:
                clusters.append(candidate)
        return clusters

    def _collapse(self, clusters: List[_Cluster]) -> List[_Cluster]:
        """Merge survivors until no pair is at or above the threshold."""
        merged = True
        while merged:
            merged = False
            for i in range(len(clusters)):
                for j in range(i + 1, len(clusters)):
                    if self.matcher.matches(clusters[i].as_fields(), clusters[j].as_fields()):
                        clusters[i].absorb(clusters[j])
                        del clusters[j]
                        merged = True
                        break
                if merged:
                    break
        return clusters

    def _merge_sources(self, target: _Cluster, cognition: _Cluster) -> None:
        """Merge a CognitionTwo cluster into a ResearchApp cluster in place."""
        for name in FIELD_NAMES:
            r_value = target.values[name]
            c_value = cognition.values[name]
            if _is_empty(c_value):
                continue
            if _is_empty(r_value):
                target.values[name] = c_value
                target.provenance[name] = SourceSystem.COGNITION_TWO
                continue
            if r_value == c_value:
                target.provenance[name] = SourceSystem.MERGED
                continue

            if name in FINANCIAL_FIELDS:
                resolved = r_value
            elif name in BEHAVIORAL_FIELDS:
                resolved = c_value
                target.provenance[name] = SourceSystem.COGNITION_TWO
            elif name in EFFORT_FIELDS:
                resolved = float(
                    to_decimal((to_decimal(r_value) + to_decimal(c_value)) / Decimal(2), 2)
                )
                target.provenance[name] = SourceSystem.MERGED
            else:
                resolved = r_value

            target.values[name] = resolved
            target.conflicts.append(
                ReconciliationConflict(
                    use_case_id="",
                    field=name,
                    research_value=r_value,
                    cognition_value=c_value,
                    resolved_value=resolved,
                )
            )
        for source in cognition.sources:
            if source not in target.sources:
                target.sources.append(source)
        target.conflicts.extend(cognition.conflicts)
