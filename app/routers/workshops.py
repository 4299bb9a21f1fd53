"""Workshop lifecycle endpoints."""
import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_pipeline
from app.models import (
    PaginatedResponse,
    Workshop,
    WorkshopCreate,
    WorkshopStatus,
    WorkshopStatusUpdate,
    WorkshopSummary,
)
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Workshops"])


@router.post(
    "",
    response_model=Workshop,
    status_code=status.HTTP_201_CREATED,
    summary="Create Workshop"
)
def create_workshop(
    workshop: WorkshopCreate,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Create a new workshop in draft status."""
    return pipeline.create_workshop(workshop)


@router.get(
    "",
    response_model=PaginatedResponse[WorkshopSummary],
    summary="List Workshops"
)
def list_workshops(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    status_filter: Optional[WorkshopStatus] = Query(None, alias="status", description="Filter by status"),
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """List workshops, newest first."""
    items, total = pipeline.list_workshops(status=status_filter, page=page, page_size=page_size)
    return PaginatedResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total > 0 else 0
    )


@router.get(
    "/{workshop_id}",
    response_model=Workshop,
    summary="Get Workshop"
)
def get_workshop(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Full workshop state (cached)."""
    return pipeline.get_workshop(workshop_id)


@router.patch(
    "/{workshop_id}/status",
    response_model=Workshop,
    summary="Update Workshop Status"
)
def update_workshop_status(
    workshop_id: UUID,
    body: WorkshopStatusUpdate,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """
    Move a workshop between lifecycle states.

    Valid transitions:
    - draft → in_progress
    - in_progress → completed, draft
    - completed → in_progress
    """
    return pipeline.update_status(workshop_id, body.status)
