"""Challenge log endpoints."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_pipeline
from app.models import (
    ChallengeLogEntry,
    ChallengeResolution,
    ChallengeRunResponse,
    ChallengeStatus,
)
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Challenges"])


@router.post(
    "/{workshop_id}/challenge",
    response_model=ChallengeRunResponse,
    summary="Run Challenge Engine"
)
async def run_challenges(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Append a new batch of pending challenges. Earlier batches are kept."""
    return await pipeline.run_challenges(workshop_id)


@router.get(
    "/{workshop_id}/challenges",
    response_model=List[ChallengeLogEntry],
    summary="List Challenges"
)
def list_challenges(
    workshop_id: UUID,
    status_filter: Optional[ChallengeStatus] = Query(None, alias="status", description="Filter by status"),
    batch_id: Optional[UUID] = Query(None, description="Filter by batch"),
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return pipeline.list_challenges(workshop_id, status=status_filter, batch_id=batch_id)


@router.put(
    "/{workshop_id}/challenge/{challenge_id}",
    response_model=ChallengeLogEntry,
    summary="Resolve Challenge"
)
def resolve_challenge(
    workshop_id: UUID,
    challenge_id: UUID,
    body: ChallengeResolution,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Accept or reject a pending challenge. Returns 409 if already resolved."""
    return pipeline.resolve_challenge(workshop_id, challenge_id, body)
