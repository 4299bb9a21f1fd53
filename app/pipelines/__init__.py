"""Workshop pipelines: source import, generated-content fallbacks and orchestration."""
from app.pipelines.source_importer import (
    SourceImporter,
    normalize_research,
    normalize_cognition,
    parse_money,
)
from app.pipelines.workshop_pipeline import WorkshopPipeline, build_workshop_pipeline

__all__ = [
    "SourceImporter",
    "normalize_research",
    "normalize_cognition",
    "parse_money",
    "WorkshopPipeline",
    "build_workshop_pipeline",
]
