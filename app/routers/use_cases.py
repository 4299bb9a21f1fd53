"""Source import, reconciliation and use case endpoints."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_pipeline
from app.models import (
    CognitionImportRequest,
    ImportResponse,
    ReconciliationResponse,
    ResearchImportRequest,
    UseCase,
    UseCaseUpdate,
)
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Use Cases"])


# Source fetches use a blocking httpx client, so these run in the threadpool.
@router.post(
    "/{workshop_id}/import/research",
    response_model=ImportResponse,
    summary="Import ResearchApp Report"
)
def import_research(
    workshop_id: UUID,
    body: ResearchImportRequest,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Attach a ResearchApp report, fetched by id or posted inline."""
    return pipeline.import_research(workshop_id, body)


@router.post(
    "/{workshop_id}/import/cognition",
    response_model=ImportResponse,
    summary="Import CognitionTwo Analysis"
)
def import_cognition(
    workshop_id: UUID,
    body: CognitionImportRequest,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Attach a CognitionTwo analysis, fetched by id or posted inline."""
    return pipeline.import_cognition(workshop_id, body)


@router.post(
    "/{workshop_id}/reconcile",
    response_model=ReconciliationResponse,
    summary="Reconcile Use Cases"
)
def reconcile(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """
    Merge imported use cases into one deduplicated list.

    Replaces any previous use cases and clears downstream results.
    Returns 400 when no source has been imported.
    """
    return pipeline.reconcile(workshop_id)


@router.get(
    "/{workshop_id}/use-cases",
    response_model=List[UseCase],
    summary="List Use Cases"
)
def list_use_cases(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return pipeline.list_use_cases(workshop_id)


@router.patch(
    "/{workshop_id}/use-cases/{use_case_id}",
    response_model=UseCase,
    summary="Edit Use Case"
)
def update_use_case(
    workshop_id: UUID,
    use_case_id: str,
    body: UseCaseUpdate,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Edit title, description, benefit or effort fields. Scores are recomputed."""
    return pipeline.update_use_case(workshop_id, use_case_id, body)
