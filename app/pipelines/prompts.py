"""Role instructions and context payloads for the generation collaborator."""
import json
from typing import Any, List, Optional

from app.models.survey import ReadinessScores
from app.models.use_case import UseCase
from app.models.workshop import Workshop

JSON_ONLY = "Respond with a single JSON object only, no commentary."

SURVEY_SYSTEM = (
    "You design AI readiness surveys for enterprise workshops. Questions are rated "
    "on a 1-5 maturity scale across the data, process, organizational and technical "
    "dimensions. " + JSON_ONLY
)
CHALLENGE_SYSTEM = (
    "You challenge optimistic assumptions behind AI use case estimates: benefits, "
    "KPIs, friction points and readiness assumptions. " + JSON_ONLY
)
VALIDATION_SYSTEM = (
    "You explain benefit adjustments for AI use cases with industry benchmarks and "
    "risk flags. Do not restate or change any amounts. " + JSON_ONLY
)
WORKFLOW_SYSTEM = (
    "You map legacy processes to agentic target workflows and describe the data "
    "lineage, explainability, observability and governance of each. " + JSON_ONLY
)
SYNTHESIS_SYSTEM = (
    "You write the executive synthesis of an AI use case workshop for private "
    "equity stakeholders: summary, recommendations, 30/60/90-day roadmap and "
    "risk register. " + JSON_ONLY
)
CHAT_SYSTEM = (
    "You are the assistant of an AI use case workshop. Answer concisely using the "
    "workshop context provided."
)


def _use_case_context(use_cases: List[UseCase]) -> list[dict[str, Any]]:
    return [
        {
            "id": uc.id,
            "title": uc.title,
            "description": uc.description,
            "business_function": uc.business_function,
            "total_benefit": uc.total_benefit,
            "benefits": {k.value: v for k, v in uc.benefit_breakdown().items()},
            "complexity": uc.complexity,
            "data_readiness": uc.data_readiness,
            "integration_effort": uc.integration_effort,
            "agentic_pattern": uc.agentic_pattern,
            "friction_point": uc.friction_point,
            "legacy_process_steps": uc.legacy_process_steps,
            "time_to_value_months": uc.time_to_value_months,
            "hitl_checkpoint": uc.hitl_checkpoint,
        }
        for uc in use_cases
    ]


def _header(workshop: Workshop) -> str:
    return f"Company: {workshop.company_name}\nIndustry: {workshop.industry or 'n/a'}\n"


def survey_prompt(workshop: Workshop, use_cases: List[UseCase]) -> str:
    return (
        _header(workshop)
        + "Use cases:\n" + json.dumps(_use_case_context(use_cases), indent=2)
        + '\n\nReturn {"questions": [{"dimension", "category", "question", "hint", '
          '"weight" (1 or 2), "use_case_ids"}]} with 3-5 questions per dimension.'
    )


def challenge_prompt(workshop: Workshop, use_cases: List[UseCase],
                     readiness: Optional[ReadinessScores]) -> str:
    return (
        _header(workshop)
        + "Readiness: " + (readiness.model_dump_json() if readiness else "not assessed")
        + "\nUse cases:\n" + json.dumps(_use_case_context(use_cases), indent=2)
        + '\n\nReturn {"challenges": [{"use_case_id", "challenge_type" '
          '(assumption|kpi|friction|benefit), "field_name", "original_value", '
          '"challenged_value", "evidence", "severity"}]}.'
    )


def validation_prompt(workshop: Workshop, use_cases: List[UseCase],
                      readiness: Optional[ReadinessScores]) -> str:
    return (
        _header(workshop)
        + "Readiness: " + (readiness.model_dump_json() if readiness else "not assessed")
        + "\nUse cases:\n" + json.dumps(_use_case_context(use_cases), indent=2)
        + '\n\nReturn {"results": [{"use_case_id", "adjustment_reason", '
          '"benchmark_source", "risk_flags"}]}.'
    )


def workflow_prompt(workshop: Workshop, use_cases: List[UseCase]) -> str:
    return (
        _header(workshop)
        + "Use cases:\n" + json.dumps(_use_case_context(use_cases), indent=2)
        + '\n\nReturn {"workflows": [{"use_case_id", "agentic_pattern", '
          '"current_state": [{"order", "name", "actor" (human|agent|system), '
          '"description", "pain_point"}], "target_state": [...], '
          '"comparison_metrics": {}, "data_lineage": {"data_sources", "inputs", '
          '"outputs", "explainability", "observability", "governance"}}]}.'
    )


def synthesis_prompt(workshop: Workshop, use_cases: List[UseCase]) -> str:
    context = {
        "readiness": workshop.readiness_scores.model_dump(mode="json")
        if workshop.readiness_scores else None,
        "validation": workshop.validation_results.model_dump(mode="json", exclude={"results"})
        if workshop.validation_results else None,
        "matrix": [a.model_dump(mode="json") for a in workshop.prioritization_matrix.ranked()]
        if workshop.prioritization_matrix else None,
    }
    return (
        _header(workshop)
        + "Use cases:\n" + json.dumps(_use_case_context(use_cases), indent=2)
        + "\nResults:\n" + json.dumps(context, indent=2)
        + '\n\nReturn {"executive_summary", "top_recommendations", "roadmap": '
          '{"thirty_day", "sixty_day", "ninety_day"}, "risk_register": '
          '[{"risk", "mitigation", "severity" (low|medium|high)}]}.'
    )


def chat_context(workshop: Workshop, use_cases: List[UseCase]) -> str:
    context = {
        "company": workshop.company_name,
        "industry": workshop.industry,
        "status": workshop.status.value,
        "use_cases": _use_case_context(use_cases),
        "readiness": workshop.readiness_scores.model_dump(mode="json")
        if workshop.readiness_scores else None,
        "validation_totals": workshop.validation_results.model_dump(mode="json", exclude={"results"})
        if workshop.validation_results else None,
        "quadrants": workshop.prioritization_matrix.quadrant_counts
        if workshop.prioritization_matrix else None,
    }
    return CHAT_SYSTEM + "\n\nWorkshop context:\n" + json.dumps(context, indent=2)
