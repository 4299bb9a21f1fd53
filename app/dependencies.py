"""FastAPI dependencies."""
from fastapi import Request

from app.pipelines.workshop_pipeline import WorkshopPipeline


def get_pipeline(request: Request) -> WorkshopPipeline:
    """The pipeline built by ``create_app()``."""
    return request.app.state.pipeline
