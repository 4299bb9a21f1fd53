"""Synthesis, workbook export and chat endpoints."""
import re
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.dependencies import get_pipeline
from app.models import ChatRequest, ChatResponse, WorkshopSynthesis
from app.pipelines.workshop_pipeline import WorkshopPipeline

router = APIRouter(prefix="/api/v1/workshops", tags=["Synthesis"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post(
    "/{workshop_id}/synthesize",
    response_model=WorkshopSynthesis,
    summary="Synthesize Workshop"
)
async def synthesize(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    """Executive summary, recommendations, roadmap and risk register. Completes the workshop."""
    return await pipeline.synthesize(workshop_id)


@router.get(
    "/{workshop_id}/export/xlsx",
    summary="Export Workshop Workbook",
    response_class=Response,
)
def export_xlsx(
    workshop_id: UUID,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    workshop, content = pipeline.export_workbook(workshop_id)
    company = re.sub(r"[^A-Za-z0-9]+", "_", workshop.company_name).strip("_") or "Workshop"
    date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
    filename = f"AI_Catalyst_{company}_{date_str}.xlsx"
    return Response(
        content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post(
    "/{workshop_id}/chat",
    response_model=ChatResponse,
    summary="Workshop Chat"
)
async def chat(
    workshop_id: UUID,
    body: ChatRequest,
    pipeline: WorkshopPipeline = Depends(get_pipeline),
):
    return await pipeline.chat(workshop_id, body)
