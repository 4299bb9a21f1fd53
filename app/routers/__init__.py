"""Routers package - API endpoint routers."""

from .health import router as health_router
from .workshops import router as workshops_router
from .use_cases import router as use_cases_router
from .survey import router as survey_router
from .challenges import router as challenges_router
from .scoring import router as scoring_router
from .workflows import router as workflows_router
from .synthesis import router as synthesis_router

__all__ = [
    "health_router",
    "workshops_router",
    "use_cases_router",
    "survey_router",
    "challenges_router",
    "scoring_router",
    "workflows_router",
    "synthesis_router",
]
