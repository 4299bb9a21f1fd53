"""Validation and prioritization endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_pipeline
from app.models import PrioritizationMatrix, ValidationSummary
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Scoring"])


@router.post(
    "/{workshop_id}/validate",
    response_model=ValidationSummary,
    summary="Validate Benefits"
)
async def validate(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """
    Discount claimed benefits by readiness-driven confidence.

    Amounts are computed deterministically; generated notes only add
    adjustment reasons, benchmark sources and risk flags.
    """
    return await pipeline.validate(workshop_id)


@router.post(
    "/{workshop_id}/prioritize",
    response_model=PrioritizationMatrix,
    summary="Prioritize Use Cases"
)
def prioritize(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Compute the value/readiness matrix and store a snapshot for export and synthesis."""
    return pipeline.prioritize(workshop_id)


@router.get(
    "/{workshop_id}/matrix",
    response_model=PrioritizationMatrix,
    summary="Get Prioritization Matrix"
)
def get_matrix(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Always recomputed from current use cases, readiness and validation."""
    return pipeline.get_matrix(workshop_id)
