"""ResearchApp / CognitionTwo source import: fetch payloads and normalize use cases.

ResearchApp reports carry an ``analysisData`` document (object or JSON string)
with numbered ``steps``: step 4 lists use cases, step 5 their benefits and
step 6 their effort scores (1-5), joined on ``ID``. CognitionTwo analyses carry
a ``useCases`` list with agentic pattern and legacy process detail.
"""
import json
import logging
import re
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from app.config import get_settings
from app.errors import UpstreamFetchFailure
from app.models.enums import SourceSystem
from app.models.use_case import RawUseCase

logger = logging.getLogger(__name__)

_MONEY_SUFFIX = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}
_MONEY_RE = re.compile(r"^(-?[\d.]+)\s*([KMB])?$", re.IGNORECASE)


def parse_money(value: Any) -> float:
    """Parse '$1,234', '1.2M', '500K' or a plain number into USD. Unparseable -> 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return max(float(value), 0.0)
    if not isinstance(value, str):
        return 0.0
    cleaned = value.replace("$", "").replace(",", "").strip()
    match = _MONEY_RE.match(cleaned)
    if not match:
        return 0.0
    try:
        amount = float(match.group(1))
    except ValueError:
        return 0.0
    suffix = match.group(2)
    if suffix:
        amount *= _MONEY_SUFFIX[suffix.upper()]
    return max(amount, 0.0)


def _five_to_ten(value: Any) -> Optional[float]:
    """Rescale a 1-5 score onto 1-10."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if score <= 0:
        return None
    return min(max(score * 2, 1.0), 10.0)


def _ten_scale(value: Any) -> Optional[float]:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    if score <= 0:
        return None
    return min(max(score, 1.0), 10.0)


def _non_negative(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _first(item: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return default


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, list):
        return [str(p).strip() for p in value if str(p).strip()]
    return []


def _step_data(steps: list, number: int) -> list:
    for step in steps:
        if isinstance(step, dict) and step.get("step") == number:
            data = step.get("data")
            return data if isinstance(data, list) else []
    return []


def _by_id(rows: list) -> dict:
    out = {}
    for row in rows:
        if isinstance(row, dict):
            row_id = _first(row, "ID", "id", "Use Case ID")
            if row_id is not None:
                out[str(row_id)] = row
    return out


def normalize_research(payload: dict[str, Any]) -> List[RawUseCase]:
    """Use cases from a ResearchApp report payload."""
    analysis = payload.get("analysisData", payload)
    if isinstance(analysis, str):
        try:
            analysis = json.loads(analysis)
        except json.JSONDecodeError:
            logger.warning("ResearchApp analysisData is not valid JSON")
            return []
    if not isinstance(analysis, dict):
        return []

    steps = analysis.get("steps") or []
    benefits = _by_id(_step_data(steps, 5))
    efforts = _by_id(_step_data(steps, 6))

    use_cases: List[RawUseCase] = []
    for uc in _step_data(steps, 4):
        if not isinstance(uc, dict):
            continue
        uc_id = str(_first(uc, "ID", "id", "Use Case ID", default=""))
        benefit = benefits.get(uc_id, {})
        effort = efforts.get(uc_id, {})
        title = str(_first(uc, "Use Case Name", "useCaseName", "title", default="")).strip()
        if not title:
            logger.warning(f"Skipping ResearchApp use case {uc_id or '?'} without a name")
            continue
        try:
            use_cases.append(RawUseCase(
                source=SourceSystem.RESEARCH_APP,
                source_id=uc_id,
                title=title,
                description=str(_first(uc, "Description", "description", default="")),
                business_function=str(_first(uc, "Function", "function", default="")),
                sub_function=str(_first(uc, "Sub-Function", "subFunction", default="")),
                friction_point=str(_first(
                    uc, "Target Friction", "Target Friction Point", "targetFriction", default=""
                )),
                strategic_theme=str(_first(uc, "Strategic Theme", "strategicTheme", default="")),
                ai_primitives=_string_list(_first(uc, "AI Primitives", "aiPrimitives", default="")),
                hitl_checkpoint=str(_first(
                    uc, "Human-in-the-Loop Checkpoint", "humanCheckpoint", "hitlCheckpoint", default=""
                )),
                cost_savings=parse_money(_first(benefit, "Cost Benefit ($)", "Cost Benefit", "costBenefit")),
                revenue_impact=parse_money(_first(benefit, "Revenue Benefit ($)", "Revenue Benefit", "revenueBenefit")),
                risk_reduction=parse_money(_first(benefit, "Risk Benefit ($)", "Risk Benefit", "riskBenefit")),
                cash_flow_improvement=parse_money(
                    _first(benefit, "Cash Flow Benefit ($)", "Cash Flow Benefit", "cashFlowBenefit")
                ),
                three_year_npv=parse_money(_first(benefit, "3-Year NPV ($)", "3-Year NPV", "threeYearNPV")),
                time_to_value_months=_non_negative(
                    _first(effort, "Time-to-Value (months)", "timeToValueMonths", "timeToValue")
                ),
                complexity=_five_to_ten(_first(effort, "Effort Score (1-5)", "Effort Score", "effortScore")),
                data_readiness=_five_to_ten(_first(effort, "Data Readiness (1-5)", "Data Readiness", "dataReadiness")),
                integration_effort=_five_to_ten(_first(
                    effort, "Integration Complexity (1-5)", "Integration Complexity", "integrationComplexity"
                )),
            ))
        except ValidationError as e:
            logger.warning(f"Skipping invalid ResearchApp use case {uc_id}: {e.error_count()} errors")
    logger.info(f"Normalized {len(use_cases)} ResearchApp use cases")
    return use_cases


def normalize_cognition(payload: dict[str, Any]) -> List[RawUseCase]:
    """Use cases from a CognitionTwo analysis payload."""
    raw_cases = payload.get("useCases") or []
    if not isinstance(raw_cases, list):
        return []

    use_cases: List[RawUseCase] = []
    for i, uc in enumerate(raw_cases):
        if not isinstance(uc, dict):
            continue
        title = str(_first(uc, "title", "name", "useCaseName", default="")).strip()
        if not title:
            logger.warning(f"Skipping CognitionTwo use case #{i} without a title")
            continue
        legacy = uc.get("legacyProcess") if isinstance(uc.get("legacyProcess"), dict) else {}
        agentic = (
            uc.get("agenticTransformation")
            if isinstance(uc.get("agenticTransformation"), dict) else {}
        )
        try:
            use_cases.append(RawUseCase(
                source=SourceSystem.COGNITION_TWO,
                source_id=str(_first(uc, "id", "ID", default=i)),
                title=title,
                description=str(_first(uc, "description", default="")),
                business_function=str(_first(uc, "businessFunction", "function", default="")),
                friction_point=str(_first(uc, "frictionPoint", default="")),
                ai_primitives=_string_list(
                    _first(agentic, "aiPrimitives", "primitives", default=None)
                    or _first(uc, "aiPrimitives", default="")
                ),
                agentic_pattern=str(_first(uc, "agenticPattern", "pattern", default="")),
                horizon=str(_first(uc, "horizon", default="")),
                automation_level=str(
                    _first(agentic, "automationLevel", default=None)
                    or _first(uc, "agenticAutomationLevel", "automationLevel", default="")
                ),
                legacy_process_steps=_string_list(
                    _first(legacy, "steps", default=None) or uc.get("legacyProcessSteps") or []
                ),
                legacy_pain_points=_string_list(
                    _first(legacy, "painPoints", default=None) or uc.get("legacyPainPoints") or []
                ),
                legacy_annual_cost=parse_money(
                    _first(legacy, "annualCost", default=None) or uc.get("legacyAnnualCost")
                ),
                complexity=_ten_scale(_first(uc, "implementationRisk", default=None)),
                business_value=_non_negative(_first(uc, "businessValue", default=None)),
                trust_tax_percent=_non_negative(_first(uc, "trustTaxPercent", "trustTax", default=None)),
            ))
        except ValidationError as e:
            logger.warning(f"Skipping invalid CognitionTwo use case #{i}: {e.error_count()} errors")
    logger.info(f"Normalized {len(use_cases)} CognitionTwo use cases")
    return use_cases


class SourceImporter:
    """Fetches raw payloads from ResearchApp and CognitionTwo."""

    def __init__(
        self,
        research_base_url: Optional[str] = None,
        cognition_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        self.research_base_url = (research_base_url or settings.research_app_url).rstrip("/")
        self.cognition_base_url = (cognition_base_url or settings.cognition_app_url).rstrip("/")
        self.client = client or httpx.Client(
            timeout=timeout or settings.source_fetch_timeout,
            headers={"Accept": "application/json"},
        )

    def _get_json(self, url: str, source: str) -> dict[str, Any]:
        try:
            r = self.client.get(url)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"{source} fetch failed: {url} -> {e.response.status_code}")
            raise UpstreamFetchFailure(
                f"Failed to fetch from {source}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{source} fetch failed: {url} -> {e}")
            raise UpstreamFetchFailure(f"Failed to fetch from {source}: {e}") from e
        except ValueError as e:
            raise UpstreamFetchFailure(f"{source} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise UpstreamFetchFailure(f"{source} returned an unexpected payload")
        return data

    def fetch_research_report(self, report_id: str) -> dict[str, Any]:
        return self._get_json(
            f"{self.research_base_url}/api/reports/{report_id}", "ResearchApp"
        )

    def fetch_cognition_analysis(self, analysis_id: str) -> dict[str, Any]:
        return self._get_json(
            f"{self.cognition_base_url}/api/analyses/{analysis_id}", "CognitionTwo"
        )

    def close(self) -> None:
        self.client.close()
