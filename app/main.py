"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.errors import WorkshopError
from app.models import ErrorResponse
from app.pipelines.workshop_pipeline import WorkshopPipeline, build_workshop_pipeline
from app.routers import (
    health_router,
    workshops_router,
    use_cases_router,
    survey_router,
    challenges_router,
    scoring_router,
    workflows_router,
    synthesis_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("Starting AI Catalyst Workshop Platform...")
    settings = get_settings()
    logger.info(f"Environment: {'DEBUG' if settings.debug else 'PRODUCTION'}")
    if not settings.anthropic_api_key:
        logger.info("ANTHROPIC_API_KEY not set: generated steps run in demo mode")
    yield
    # Shutdown
    logger.info("Shutting down AI Catalyst Workshop Platform...")
    app.state.pipeline.importer.close()
    await app.state.pipeline.cache.close()


def create_app(pipeline: Optional[WorkshopPipeline] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## AI Catalyst Workshop Platform API

        Facilitated AI use case workshops for private equity portfolio companies

        ### Workflow:
        - **Import**: ResearchApp financial reports and CognitionTwo agentic analyses
        - **Reconcile**: one deduplicated use case list with field provenance
        - **Survey**: data, process, organizational and technical readiness
        - **Challenge**: auditable challenges to benefit and KPI assumptions
        - **Validate**: confidence-adjusted benefits
        - **Prioritize**: value vs readiness matrix with T1/T2/T3 tracks
        - **Workflows**: agentic target state and data lineage
        - **Synthesize**: executive summary, 30/60/90-day roadmap, Excel export

        Without an Anthropic API key, generated steps run in demo mode.
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )
    app.state.pipeline = pipeline or build_workshop_pipeline(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(workshops_router)
    app.include_router(use_cases_router)
    app.include_router(survey_router)
    app.include_router(challenges_router)
    app.include_router(scoring_router)
    app.include_router(workflows_router)
    app.include_router(synthesis_router)

    @app.exception_handler(WorkshopError)
    async def workshop_error_handler(request: Request, exc: WorkshopError):
        logger.warning(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(detail=exc.message, error_code=exc.error_code).model_dump()
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": str(exc)}
        )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
