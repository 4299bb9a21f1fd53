"""Workflow map and data lineage endpoints."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_pipeline
from app.models import DataLineageEntry, WorkflowMap, WorkflowRunResponse
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Workflows"])


@router.post(
    "/{workshop_id}/workflows",
    response_model=WorkflowRunResponse,
    summary="Generate Workflow Maps"
)
async def generate_workflows(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Legacy vs agentic workflow and data lineage for the top use cases."""
    return await pipeline.generate_workflows(workshop_id)


@router.get(
    "/{workshop_id}/workflows/{use_case_id}",
    response_model=WorkflowMap,
    summary="Get Workflow Map"
)
def get_workflow(
    workshop_id: UUID,
    use_case_id: str,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return pipeline.get_workflow(workshop_id, use_case_id)


@router.get(
    "/{workshop_id}/data-lineage",
    response_model=List[DataLineageEntry],
    summary="Get Data Lineage"
)
def get_data_lineage(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return pipeline.get_data_lineage(workshop_id)
