"""Deterministic stand-ins for generated workshop content.

Used when no API key is configured (demo mode) or when the generation
collaborator fails (fallback mode). Everything here is a pure function of
the workshop data.
"""
from typing import List, Optional

from app.models.enums import ReadinessDimension, Quadrant, Severity
from app.models.lineage import DataLineageEntry, WorkflowMap, WorkflowStep
from app.models.prioritization import PrioritizationMatrix
from app.models.survey import SurveyQuestion
from app.models.synthesis import Roadmap, RiskItem, WorkshopSynthesis
from app.models.use_case import UseCase
from app.models.validation import ValidationSummary
from app.models.workshop import Workshop

# (category, question, hint, weight) per dimension
_SURVEY_BANK: dict[ReadinessDimension, list[tuple[str, str, str, int]]] = {
    ReadinessDimension.DATA: [
        ("Availability", "How accessible is the data these use cases depend on?",
         "Look for: documented sources, API or warehouse access, no manual extracts.", 2),
        ("Quality", "How consistently is that data validated and cleaned?",
         "Look for: data quality checks, ownership, known error rates.", 2),
        ("Governance", "How mature are data ownership and access controls?",
         "Look for: named data owners, access reviews, retention policies.", 1),
    ],
    ReadinessDimension.PROCESS: [
        ("Documentation", "How well documented are the processes targeted for automation?",
         "Look for: current-state process maps, SOPs, known exception paths.", 2),
        ("Measurement", "How are process KPIs baselined today?",
         "Look for: cycle time, cost per transaction, error rate tracked over time.", 1),
        ("Exception Handling", "How are exceptions and escalations handled?",
         "Look for: defined escalation paths and human review checkpoints.", 1),
    ],
    ReadinessDimension.ORGANIZATIONAL: [
        ("Sponsorship", "How committed is leadership to funding and sponsoring AI initiatives?",
         "Look for: named executive sponsor, approved budget, roadmap ownership.", 2),
        ("Skills", "How experienced is the team with AI/ML delivery?",
         "Look for: in-house ML engineers, upskilling programs, delivered pilots.", 1),
        ("Change Readiness", "How prepared are affected teams for workflow change?",
         "Look for: change management plans, early adopter groups, training.", 1),
    ],
    ReadinessDimension.TECHNICAL: [
        ("Integration", "How easily can new services integrate with core systems?",
         "Look for: documented APIs, event streams, integration platform.", 2),
        ("Infrastructure", "How mature is the cloud and MLOps foundation?",
         "Look for: managed compute, CI/CD, model monitoring.", 1),
        ("Security", "How mature are security reviews for AI vendors and models?",
         "Look for: vendor risk assessments, data processing agreements, red-teaming.", 1),
    ],
}

_DIMENSION_PREFIX = {
    ReadinessDimension.DATA: "D",
    ReadinessDimension.PROCESS: "P",
    ReadinessDimension.ORGANIZATIONAL: "O",
    ReadinessDimension.TECHNICAL: "T",
}


def question_id(dimension: ReadinessDimension, index: int) -> str:
    return f"{_DIMENSION_PREFIX[dimension]}-{index + 1:03d}"


def fallback_survey_questions(use_cases: List[UseCase]) -> List[SurveyQuestion]:
    """Three questions per dimension, each linked to every use case."""
    ids = [uc.id for uc in use_cases]
    questions = []
    for dimension, bank in _SURVEY_BANK.items():
        for i, (category, text, hint, weight) in enumerate(bank):
            questions.append(SurveyQuestion(
                id=question_id(dimension, i),
                dimension=dimension,
                category=category,
                question=text,
                hint=hint,
                weight=weight,
                use_case_ids=list(ids),
            ))
    return questions


def fallback_workflow(use_case: UseCase) -> tuple[WorkflowMap, DataLineageEntry]:
    """Generic legacy vs agentic workflow and lineage for one use case."""
    legacy_steps = use_case.legacy_process_steps or [
        "Collect inputs from source systems",
        "Manually review and reconcile",
        "Prepare output for approval",
        "Approve and distribute",
    ]
    pain_points = use_case.legacy_pain_points
    current = [
        WorkflowStep(
            order=i + 1,
            name=step,
            actor="human",
            pain_point=pain_points[i] if i < len(pain_points) else "",
        )
        for i, step in enumerate(legacy_steps)
    ]
    target = [
        WorkflowStep(order=1, name="Ingest inputs automatically", actor="system"),
        WorkflowStep(order=2, name=f"Agent drafts {use_case.title.lower()} output", actor="agent"),
        WorkflowStep(order=3, name="Agent validates against business rules", actor="agent"),
        WorkflowStep(order=4, name="Human reviews exceptions and approves", actor="human"),
    ]
    workflow = WorkflowMap(
        use_case_id=use_case.id,
        use_case_title=use_case.title,
        agentic_pattern=use_case.agentic_pattern or "tool-user",
        current_state=current,
        target_state=target,
        comparison_metrics={
            "steps": f"{len(current)} -> {len(target)}",
            "human_touchpoints": f"{len(current)} -> 1",
        },
    )

    function = use_case.business_function or "business"
    lineage = DataLineageEntry(
        use_case_id=use_case.id,
        use_case_title=use_case.title,
        data_sources=[f"{function} system of record", "Shared document repository"],
        inputs=[f"{function} transaction records", "Reference and policy documents"],
        outputs=[f"Draft {use_case.title.lower()} output", "Exception queue for review"],
        explainability="Each output links to the source records and rules applied.",
        observability="Volumes, latency and exception rates tracked per run.",
        governance="Human approval required before outputs leave the workflow.",
    )
    return workflow, lineage


def fallback_synthesis(
    workshop: Workshop,
    use_cases: List[UseCase],
    matrix: Optional[PrioritizationMatrix],
    validation: Optional[ValidationSummary],
) -> WorkshopSynthesis:
    """Executive synthesis assembled from validation and prioritization data."""
    total_value = (
        validation.total_validated_value if validation is not None
        else sum(uc.total_benefit for uc in use_cases)
    )
    ranked = matrix.ranked() if matrix is not None else []

    quick_wins = [a.title for a in ranked if a.quadrant == Quadrant.QUICK_WIN][:3]
    champions = [a.title for a in ranked if a.quadrant == Quadrant.CHAMPION]
    strategic = [a.title for a in ranked if a.quadrant == Quadrant.STRATEGIC]
    top = [a.title for a in ranked[:5]] or [uc.title for uc in use_cases[:5]]

    summary = (
        f"{workshop.company_name} reviewed {len(use_cases)} AI use cases with an "
        f"estimated annual value of ${total_value:,.0f}"
        + (" after confidence adjustment." if validation is not None else ".")
    )
    if champions:
        summary += f" {len(champions)} use case(s) combine high value with high readiness."

    risks = []
    if workshop.readiness_scores is None:
        risks.append(RiskItem(
            risk="Readiness has not been assessed",
            mitigation="Complete the readiness survey before committing budget.",
            severity=Severity.HIGH,
        ))
    elif workshop.readiness_scores.data < 3:
        risks.append(RiskItem(
            risk="Data readiness below defined maturity",
            mitigation="Fund data quality and access work ahead of model delivery.",
            severity=Severity.HIGH,
        ))
    if validation is not None and validation.overall_discount > 0.25:
        risks.append(RiskItem(
            risk="Benefit estimates carry a large confidence discount",
            mitigation="Baseline KPIs and validate benefits in a pilot.",
            severity=Severity.MEDIUM,
        ))

    return WorkshopSynthesis(
        executive_summary=summary,
        top_recommendations=[f"Advance {title}" for title in top],
        roadmap=Roadmap(
            thirty_day=[f"Launch pilot: {t}" for t in (quick_wins or top[:1])],
            sixty_day=[f"Scale: {t}" for t in champions[:3]] or ["Baseline KPIs for pilots"],
            ninety_day=[f"Business case: {t}" for t in strategic[:3]] or ["Review portfolio results"],
        ),
        risk_register=risks,
        total_estimated_value=total_value,
        top_quick_wins=quick_wins,
    )


def fallback_chat_reply(workshop: Workshop, use_cases: List[UseCase], message: str) -> str:
    """Canned assistant reply summarizing workshop state."""
    parts = [
        f"The {workshop.company_name} workshop is {workshop.status.value.replace('_', ' ')} "
        f"with {len(use_cases)} use case(s)."
    ]
    if workshop.validation_results is not None:
        v = workshop.validation_results
        parts.append(
            f"Validated value is ${v.total_validated_value:,.0f} of "
            f"${v.total_original_value:,.0f} estimated."
        )
    if workshop.prioritization_matrix is not None:
        counts = workshop.prioritization_matrix.quadrant_counts
        placed = ", ".join(f"{q} {n}" for q, n in counts.items() if n)
        if placed:
            parts.append(f"Matrix: {placed}.")
    parts.append("Configure an API key for detailed answers to questions like this one.")
    return " ".join(parts)
