"""Readiness survey endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_pipeline
from app.models import ReadinessScores, Survey, SurveyResponseCreate, SurveyState
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Survey"])


@router.post(
    "/{workshop_id}/survey/generate",
    response_model=Survey,
    summary="Generate Readiness Survey"
)
async def generate_survey(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Build maturity questions across data, process, organizational and technical dimensions."""
    return await pipeline.generate_survey(workshop_id)


@router.get(
    "/{workshop_id}/survey",
    response_model=SurveyState,
    summary="Get Survey"
)
def get_survey(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return pipeline.get_survey(workshop_id)


@router.put(
    "/{workshop_id}/survey/responses",
    response_model=ReadinessScores,
    summary="Submit Survey Responses"
)
def submit_survey_responses(
    workshop_id: UUID,
    body: SurveyResponseCreate,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """
    Score answers (1-5 maturity) into readiness scores.

    Clears validation and prioritization results, which depend on readiness.
    """
    return pipeline.submit_survey_responses(workshop_id, body)
