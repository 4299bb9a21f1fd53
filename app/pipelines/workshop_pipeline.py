"""Workshop orchestrator.

Sequences the engines behind step-gated operations:

  import → reconcile → survey → challenge → validate → prioritize
  → workflows / lineage → synthesize → export

Every mutation runs under the workshop's Redis lock and invalidates the
cached workshop. Engines compute before anything is written, so a failed
step leaves the stored state untouched. Generated content goes through
``GenerationClient``; demo and fallback modes substitute deterministic output.
"""
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator, List, Optional, Type, TypeVar
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.errors import (
    AlreadyResolved,
    InvalidTransition,
    NotFound,
    UpstreamGenerationFailure,
    ValidationInputMissing,
)
from app.models.chat import ChatRequest, ChatResponse
from app.models.challenge import (
    ChallengeBatchSummary,
    ChallengeLogEntry,
    ChallengeResolution,
    ChallengeRunResponse,
)
from app.models.enums import (
    VALID_STATUS_TRANSITIONS,
    ChallengeStatus,
    GenerationMode,
    ReadinessDimension,
    Severity,
    SourceSystem,
    WorkshopStatus,
)
from app.models.generation import (
    GeneratedChallenges,
    GeneratedSurvey,
    GeneratedSynthesis,
    GeneratedValidation,
    GeneratedWorkflows,
)
from app.models.lineage import DataLineageEntry, WorkflowMap, WorkflowRunResponse
from app.models.prioritization import PrioritizationMatrix
from app.models.survey import (
    ReadinessScores,
    Survey,
    SurveyQuestion,
    SurveyResponseCreate,
    SurveyState,
)
from app.models.synthesis import WorkshopSynthesis
from app.models.use_case import ReconciliationResponse, UseCase, UseCaseUpdate
from app.models.validation import ValidationSummary
from app.models.workshop import (
    CognitionImportRequest,
    ImportResponse,
    ResearchImportRequest,
    Workshop,
    WorkshopCreate,
    WorkshopSummary,
)
from app.pipelines import fallbacks, prompts
from app.pipelines.source_importer import (
    SourceImporter,
    normalize_cognition,
    normalize_research,
)
from app.scoring.challenge import ChallengeEngine
from app.scoring.prioritization import PrioritizationEngine
from app.scoring.reconciliation import ReconciliationEngine
from app.scoring.survey import SurveyScorer
from app.scoring.validation import ValidationEngine
from app.services.llm_client import GenerationClient
from app.services.redis_cache import CacheKeys, RedisCache, get_redis_cache
from app.services.snowflake import get_snowflake_service
from app.services.workbook_export import generate_workshop_workbook
from app.services.workshop_repository import SnowflakeWorkshopRepository, WorkshopRepository

logger = structlog.get_logger(__name__)
T = TypeVar("T", bound=BaseModel)

WORKFLOW_USE_CASE_LIMIT = 6

# Fields whose edit invalidates validation and prioritization results
_SCORED_FIELDS = {
    "cost_savings",
    "risk_reduction",
    "revenue_impact",
    "cash_flow_improvement",
    "complexity",
    "data_readiness",
    "integration_effort",
}


class WorkshopPipeline:
    """Run workshop steps against injected storage, cache and generation client."""

    def __init__(
        self,
        repository: WorkshopRepository,
        cache: RedisCache,
        generator: GenerationClient,
        importer: SourceImporter,
        settings: Optional[Settings] = None,
    ) -> None:
        self.repository = repository
        self.cache = cache
        self.generator = generator
        self.importer = importer
        self.settings = settings or get_settings()

        self.reconciliation = ReconciliationEngine(self.settings.reconciliation_match_threshold)
        self.challenges = ChallengeEngine()
        self.validation = ValidationEngine()
        self.prioritization = PrioritizationEngine(
            threshold=self.settings.quadrant_threshold,
            value_floor=self.settings.value_score_floor,
            value_ceiling=self.settings.value_score_ceiling,
        )
        self.survey_scorer = SurveyScorer()

    # ── internals ─────────────────────────────────────────────────────────────

    @contextmanager
    def _locked(self, workshop_id: UUID) -> Generator[None, None, None]:
        with self.cache.lock(
            CacheKeys.workshop_lock(str(workshop_id)),
            timeout=self.settings.workshop_lock_timeout,
            blocking_timeout=self.settings.workshop_lock_wait,
        ):
            yield

    @asynccontextmanager
    async def _alocked(self, workshop_id: UUID) -> AsyncGenerator[None, None]:
        async with self.cache.alock(
            CacheKeys.workshop_lock(str(workshop_id)),
            timeout=self.settings.workshop_lock_timeout,
            blocking_timeout=self.settings.workshop_lock_wait,
        ):
            yield

    def _load(self, workshop_id: UUID) -> Workshop:
        workshop = self.repository.get_workshop(workshop_id)
        if workshop is None:
            raise NotFound(f"Workshop {workshop_id} not found")
        return workshop

    def _update(self, workshop_id: UUID, **fields) -> Workshop:
        workshop = self.repository.update_workshop(workshop_id, **fields)
        self.cache.delete(CacheKeys.workshop(str(workshop_id)))
        return workshop

    def _require_use_cases(self, workshop_id: UUID, step: str) -> List[UseCase]:
        use_cases = self.repository.list_use_cases(workshop_id)
        if not use_cases:
            raise ValidationInputMissing(f"Reconcile use cases before {step}")
        return use_cases

    @staticmethod
    def _started(workshop: Workshop) -> WorkshopStatus:
        if workshop.status == WorkshopStatus.DRAFT:
            return WorkshopStatus.IN_PROGRESS
        return workshop.status

    async def _generate(
        self, system: str, prompt: str, schema: Type[T]
    ) -> tuple[Optional[T], GenerationMode]:
        """Collaborator output, or None with the mode explaining why."""
        if not self.generator.enabled:
            return None, GenerationMode.DEMO
        try:
            return await self.generator.generate_json(system, prompt, schema), GenerationMode.LIVE
        except UpstreamGenerationFailure as e:
            logger.warning("generation_fallback", schema=schema.__name__, error=e.message)
            return None, GenerationMode.FALLBACK

    # ── workshops ─────────────────────────────────────────────────────────────

    def create_workshop(self, data: WorkshopCreate) -> Workshop:
        workshop = self.repository.create_workshop(data)
        logger.info("workshop_created", workshop_id=str(workshop.id),
                    company_name=workshop.company_name)
        return workshop

    def get_workshop(self, workshop_id: UUID) -> Workshop:
        key = CacheKeys.workshop(str(workshop_id))
        cached = self.cache.get(key, Workshop)
        if cached is not None:
            return cached
        workshop = self._load(workshop_id)
        self.cache.set(key, workshop, self.settings.cache_ttl_workshop)
        return workshop

    def list_workshops(
        self,
        status: Optional[WorkshopStatus] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[List[WorkshopSummary], int]:
        total = self.repository.count_workshops(status)
        items = self.repository.list_workshops(
            status=status, limit=page_size, offset=(page - 1) * page_size
        )
        return items, total

    def update_status(self, workshop_id: UUID, new_status: WorkshopStatus) -> Workshop:
        with self._locked(workshop_id):
            workshop = self._load(workshop_id)
            allowed = VALID_STATUS_TRANSITIONS.get(workshop.status, [])
            if new_status not in allowed:
                raise InvalidTransition(
                    f"Cannot transition from {workshop.status.value} to {new_status.value}"
                )
            updated = self._update(workshop_id, status=new_status)
        logger.info("workshop_status_changed", workshop_id=str(workshop_id),
                    old=workshop.status.value, new=new_status.value)
        return updated

    # ── imports ───────────────────────────────────────────────────────────────

    def import_research(self, workshop_id: UUID, request: ResearchImportRequest) -> ImportResponse:
        self._load(workshop_id)
        payload = (
            request.data if request.data is not None
            else self.importer.fetch_research_report(request.report_id)
        )
        count = len(normalize_research(payload))
        with self._locked(workshop_id):
            self._load(workshop_id)
            self._update(
                workshop_id,
                research_app_report_id=request.report_id,
                research_app_data=payload,
            )
        logger.info("source_imported", workshop_id=str(workshop_id),
                    source=SourceSystem.RESEARCH_APP.value, use_cases=count)
        return ImportResponse(
            workshop_id=workshop_id,
            source=SourceSystem.RESEARCH_APP,
            source_id=request.report_id,
            use_case_count=count,
        )

    def import_cognition(self, workshop_id: UUID, request: CognitionImportRequest) -> ImportResponse:
        self._load(workshop_id)
        payload = (
            request.data if request.data is not None
            else self.importer.fetch_cognition_analysis(request.analysis_id)
        )
        count = len(normalize_cognition(payload))
        with self._locked(workshop_id):
            self._load(workshop_id)
            self._update(
                workshop_id,
                cognition_two_analysis_id=request.analysis_id,
                cognition_two_data=payload,
            )
        logger.info("source_imported", workshop_id=str(workshop_id),
                    source=SourceSystem.COGNITION_TWO.value, use_cases=count)
        return ImportResponse(
            workshop_id=workshop_id,
            source=SourceSystem.COGNITION_TWO,
            source_id=request.analysis_id,
            use_case_count=count,
        )

    # ── reconciliation and use cases ──────────────────────────────────────────

    def reconcile(self, workshop_id: UUID) -> ReconciliationResponse:
        with self._locked(workshop_id):
            workshop = self._load(workshop_id)
            if not workshop.has_imports:
                raise ValidationInputMissing(
                    "Import ResearchApp or CognitionTwo data before reconciling"
                )
            research = (
                normalize_research(workshop.research_app_data)
                if workshop.research_app_data is not None else None
            )
            cognition = (
                normalize_cognition(workshop.cognition_two_data)
                if workshop.cognition_two_data is not None else None
            )
            result = self.reconciliation.reconcile(
                workshop_id, research, cognition,
                previous=self.repository.list_use_cases(workshop_id),
            )
            use_cases = self.prioritization.score_use_cases(
                result.use_cases, workshop.readiness_scores
            )

            self.repository.replace_use_cases(workshop_id, use_cases)
            self._update(
                workshop_id,
                status=self._started(workshop),
                challenge_results=None,
                validation_results=None,
                prioritization_matrix=None,
                workflow_maps=[],
                data_lineage=[],
                synthesis=None,
            )
        return ReconciliationResponse(
            workshop_id=workshop_id,
            use_case_count=len(use_cases),
            matched_count=result.matched_count,
            research_only_count=result.research_only_count,
            cognition_only_count=result.cognition_only_count,
            conflicts=result.conflicts,
            use_cases=use_cases,
        )

    def list_use_cases(self, workshop_id: UUID) -> List[UseCase]:
        self._load(workshop_id)
        return self.repository.list_use_cases(workshop_id)

    def update_use_case(
        self, workshop_id: UUID, use_case_id: str, update: UseCaseUpdate
    ) -> UseCase:
        changes = update.model_dump(exclude_unset=True)
        with self._locked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self.repository.list_use_cases(workshop_id)
            current = next((uc for uc in use_cases if uc.id == use_case_id), None)
            if current is None:
                raise NotFound(f"Use case {use_case_id} not found")

            edited = UseCase.model_validate({**current.model_dump(), **changes})
            scored_change = bool(_SCORED_FIELDS & changes.keys())
            if scored_change:
                # Validation is discarded, so every stored score falls back to original benefit
                rescored = self.prioritization.score_use_cases(
                    [edited if uc.id == use_case_id else uc for uc in use_cases],
                    workshop.readiness_scores,
                )
                edited = next(uc for uc in rescored if uc.id == use_case_id)
                self.repository.replace_use_cases(workshop_id, rescored)
                self._update(workshop_id, validation_results=None, prioritization_matrix=None)
            else:
                [edited] = self.prioritization.score_use_cases(
                    [edited], workshop.readiness_scores, workshop.validation_results
                )
                self.repository.save_use_case(edited)
                self.cache.delete(CacheKeys.workshop(str(workshop_id)))
        logger.info("use_case_updated", workshop_id=str(workshop_id),
                    use_case_id=use_case_id, fields=sorted(changes),
                    cleared_results=scored_change)
        return edited

    # ── survey ────────────────────────────────────────────────────────────────

    async def generate_survey(self, workshop_id: UUID) -> Survey:
        async with self._alocked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "generating the survey")
            generated, mode = await self._generate(
                prompts.SURVEY_SYSTEM,
                prompts.survey_prompt(workshop, use_cases),
                GeneratedSurvey,
            )
            if generated is not None:
                questions = self._survey_questions(generated, use_cases)
            else:
                questions = fallbacks.fallback_survey_questions(use_cases)
            survey = Survey(questions=questions, mode=mode)
            self._update(workshop_id, survey=survey)
        logger.info("survey_generated", workshop_id=str(workshop_id),
                    questions=len(questions), mode=mode.value)
        return survey

    @staticmethod
    def _survey_questions(
        generated: GeneratedSurvey, use_cases: List[UseCase]
    ) -> List[SurveyQuestion]:
        known = [uc.id for uc in use_cases]
        counters = {d: 0 for d in ReadinessDimension}
        questions = []
        for q in generated.questions:
            linked = [uc_id for uc_id in q.use_case_ids if uc_id in known]
            questions.append(SurveyQuestion(
                id=fallbacks.question_id(q.dimension, counters[q.dimension]),
                dimension=q.dimension,
                category=q.category,
                question=q.question,
                hint=q.hint,
                weight=q.weight,
                use_case_ids=linked or list(known),
            ))
            counters[q.dimension] += 1
        return questions

    def get_survey(self, workshop_id: UUID) -> SurveyState:
        workshop = self._load(workshop_id)
        return SurveyState(survey=workshop.survey, readiness_scores=workshop.readiness_scores)

    def submit_survey_responses(
        self, workshop_id: UUID, response: SurveyResponseCreate
    ) -> ReadinessScores:
        with self._locked(workshop_id):
            workshop = self._load(workshop_id)
            if workshop.survey is None:
                raise ValidationInputMissing("Generate the survey before submitting responses")
            scores = self.survey_scorer.score(workshop.survey, response.answers)
            use_cases = self.prioritization.score_use_cases(
                self.repository.list_use_cases(workshop_id), scores
            )

            self.repository.add_survey_response(workshop_id, response, scores)
            self.repository.replace_use_cases(workshop_id, use_cases)
            self._update(
                workshop_id,
                readiness_scores=scores,
                status=self._started(workshop),
                validation_results=None,
                prioritization_matrix=None,
            )
        return scores

    # ── challenges ────────────────────────────────────────────────────────────

    async def run_challenges(self, workshop_id: UUID) -> ChallengeRunResponse:
        async with self._alocked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "challenging assumptions")
            generated, mode = await self._generate(
                prompts.CHALLENGE_SYSTEM,
                prompts.challenge_prompt(workshop, use_cases, workshop.readiness_scores),
                GeneratedChallenges,
            )
            entries = self.challenges.build_batch(
                workshop_id,
                use_cases,
                workshop.readiness_scores,
                candidates=generated.challenges if generated is not None else None,
            )
            by_type: dict[str, int] = {}
            for entry in entries:
                by_type[entry.challenge_type.value] = by_type.get(entry.challenge_type.value, 0) + 1
            summary = ChallengeBatchSummary(
                batch_id=entries[0].batch_id if entries else uuid4(),
                total_challenges=len(entries),
                high_severity_count=sum(1 for e in entries if e.severity == Severity.HIGH),
                by_type=by_type,
                mode=mode,
                generated_at=entries[0].created_at if entries else datetime.now(timezone.utc),
            )

            self.repository.append_challenges(entries)
            self._update(workshop_id, challenge_results=summary)
        return ChallengeRunResponse(**summary.model_dump(), entries=entries)

    def list_challenges(
        self,
        workshop_id: UUID,
        status: Optional[ChallengeStatus] = None,
        batch_id: Optional[UUID] = None,
    ) -> List[ChallengeLogEntry]:
        self._load(workshop_id)
        return self.repository.list_challenges(workshop_id, status=status, batch_id=batch_id)

    def resolve_challenge(
        self, workshop_id: UUID, challenge_id: UUID, resolution: ChallengeResolution
    ) -> ChallengeLogEntry:
        with self._locked(workshop_id):
            self._load(workshop_id)
            entry = self.repository.get_challenge(workshop_id, challenge_id)
            if entry is None:
                raise NotFound(f"Challenge {challenge_id} not found")
            resolved = self.challenges.resolve(entry, resolution.status, resolution.responded_by)
            if not self.repository.resolve_challenge(resolved):
                raise AlreadyResolved(f"Challenge {challenge_id} was already resolved")
            self.cache.delete(CacheKeys.workshop(str(workshop_id)))
        return resolved

    # ── validation and prioritization ─────────────────────────────────────────

    async def validate(self, workshop_id: UUID) -> ValidationSummary:
        async with self._alocked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "validating benefits")
            generated, mode = await self._generate(
                prompts.VALIDATION_SYSTEM,
                prompts.validation_prompt(workshop, use_cases, workshop.readiness_scores),
                GeneratedValidation,
            )
            notes = {n.use_case_id: n for n in generated.results} if generated is not None else {}
            summary = self.validation.validate(
                use_cases, workshop.readiness_scores, notes=notes, mode=mode
            )
            rescored = self.prioritization.score_use_cases(
                use_cases, workshop.readiness_scores, summary
            )

            self.repository.replace_use_cases(workshop_id, rescored)
            self._update(workshop_id, validation_results=summary, prioritization_matrix=None)
        return summary

    def _matrix(self, workshop: Workshop, use_cases: List[UseCase]) -> PrioritizationMatrix:
        return self.prioritization.build_matrix(
            use_cases, workshop.readiness_scores, workshop.validation_results
        )

    def prioritize(self, workshop_id: UUID) -> PrioritizationMatrix:
        with self._locked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "prioritizing")
            matrix = self._matrix(workshop, use_cases)
            self._update(workshop_id, prioritization_matrix=matrix)
        return matrix

    def get_matrix(self, workshop_id: UUID) -> PrioritizationMatrix:
        """Recomputed matrix; never reads or writes the stored snapshot."""
        workshop = self._load(workshop_id)
        return self._matrix(workshop, self.repository.list_use_cases(workshop_id))

    # ── workflows and lineage ─────────────────────────────────────────────────

    async def generate_workflows(self, workshop_id: UUID) -> WorkflowRunResponse:
        async with self._alocked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "mapping workflows")
            selected = self._top_use_cases(workshop, use_cases)
            generated, mode = await self._generate(
                prompts.WORKFLOW_SYSTEM,
                prompts.workflow_prompt(workshop, selected),
                GeneratedWorkflows,
            )
            by_id = {w.use_case_id: w for w in generated.workflows} if generated else {}

            maps: List[WorkflowMap] = []
            lineage: List[DataLineageEntry] = []
            for uc in selected:
                g = by_id.get(uc.id)
                if g is None or not g.target_state:
                    workflow, entry = fallbacks.fallback_workflow(uc)
                else:
                    workflow = WorkflowMap(
                        use_case_id=uc.id,
                        use_case_title=uc.title,
                        agentic_pattern=g.agentic_pattern or uc.agentic_pattern,
                        current_state=g.current_state,
                        target_state=g.target_state,
                        comparison_metrics=g.comparison_metrics,
                    )
                    entry = DataLineageEntry(
                        use_case_id=uc.id,
                        use_case_title=uc.title,
                        **g.data_lineage.model_dump(),
                    )
                maps.append(workflow)
                lineage.append(entry)

            self._update(workshop_id, workflow_maps=maps, data_lineage=lineage)
        logger.info("workflows_generated", workshop_id=str(workshop_id),
                    workflows=len(maps), mode=mode.value)
        return WorkflowRunResponse(workflow_maps=maps, data_lineage=lineage, mode=mode)

    @staticmethod
    def _top_use_cases(workshop: Workshop, use_cases: List[UseCase]) -> List[UseCase]:
        if workshop.prioritization_matrix is None:
            return use_cases[:WORKFLOW_USE_CASE_LIMIT]
        by_id = {uc.id: uc for uc in use_cases}
        ranked = [
            by_id[a.use_case_id]
            for a in workshop.prioritization_matrix.ranked()
            if a.use_case_id in by_id
        ]
        return ranked[:WORKFLOW_USE_CASE_LIMIT]

    def get_workflow(self, workshop_id: UUID, use_case_id: str) -> WorkflowMap:
        workshop = self._load(workshop_id)
        for workflow in workshop.workflow_maps:
            if workflow.use_case_id == use_case_id:
                return workflow
        raise NotFound(f"No workflow map for use case {use_case_id}")

    def get_data_lineage(self, workshop_id: UUID) -> List[DataLineageEntry]:
        return self._load(workshop_id).data_lineage

    # ── synthesis, export, chat ───────────────────────────────────────────────

    async def synthesize(self, workshop_id: UUID) -> WorkshopSynthesis:
        async with self._alocked(workshop_id):
            workshop = self._load(workshop_id)
            use_cases = self._require_use_cases(workshop_id, "synthesizing")
            synthesis = fallbacks.fallback_synthesis(
                workshop, use_cases, workshop.prioritization_matrix, workshop.validation_results
            )
            generated, mode = await self._generate(
                prompts.SYNTHESIS_SYSTEM,
                prompts.synthesis_prompt(workshop, use_cases),
                GeneratedSynthesis,
            )
            if generated is not None:
                synthesis = synthesis.model_copy(update={
                    "executive_summary": generated.executive_summary,
                    "top_recommendations": generated.top_recommendations or synthesis.top_recommendations,
                    "roadmap": generated.roadmap,
                    "risk_register": generated.risk_register or synthesis.risk_register,
                })
            synthesis = synthesis.model_copy(update={"mode": mode})
            self._update(workshop_id, synthesis=synthesis, status=WorkshopStatus.COMPLETED)
        logger.info("workshop_synthesized", workshop_id=str(workshop_id),
                    total_estimated_value=synthesis.total_estimated_value, mode=mode.value)
        return synthesis

    def export_workbook(self, workshop_id: UUID) -> tuple[Workshop, bytes]:
        workshop = self._load(workshop_id)
        use_cases = self.repository.list_use_cases(workshop_id)
        challenges = self.repository.list_challenges(workshop_id)
        return workshop, generate_workshop_workbook(workshop, use_cases, challenges)

    async def chat(self, workshop_id: UUID, request: ChatRequest) -> ChatResponse:
        workshop = self._load(workshop_id)
        use_cases = self.repository.list_use_cases(workshop_id)
        if not self.generator.enabled:
            return ChatResponse(
                reply=fallbacks.fallback_chat_reply(workshop, use_cases, request.message),
                mode=GenerationMode.DEMO,
            )

        messages = [m.model_dump() for m in request.history]
        while messages and messages[0]["role"] != "user":
            messages.pop(0)
        messages.append({"role": "user", "content": request.message})
        try:
            reply = await self.generator.complete(
                prompts.chat_context(workshop, use_cases), messages
            )
        except UpstreamGenerationFailure as e:
            logger.warning("chat_fallback", workshop_id=str(workshop_id), error=e.message)
            return ChatResponse(
                reply=fallbacks.fallback_chat_reply(workshop, use_cases, request.message),
                mode=GenerationMode.FALLBACK,
            )
        return ChatResponse(reply=reply, mode=GenerationMode.LIVE)


def build_workshop_pipeline(settings: Optional[Settings] = None) -> WorkshopPipeline:
    """Wire the pipeline to Snowflake, Redis, the source apps and the generation client."""
    settings = settings or get_settings()
    return WorkshopPipeline(
        repository=SnowflakeWorkshopRepository(get_snowflake_service()),
        cache=get_redis_cache(),
        generator=GenerationClient.from_settings(settings),
        importer=SourceImporter(
            research_base_url=settings.research_app_url,
            cognition_base_url=settings.cognition_app_url,
            timeout=settings.source_fetch_timeout,
        ),
        settings=settings,
    )
