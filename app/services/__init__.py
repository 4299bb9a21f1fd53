"""Services package - database, cache, generation and export services."""
from .snowflake import SnowflakeService, get_snowflake_service
from .redis_cache import RedisCache, CacheKeys, get_redis_cache
from .workshop_repository import WorkshopRepository, SnowflakeWorkshopRepository
from .llm_client import GenerationClient, parse_llm_json, strip_llm_fences
from .workbook_export import generate_workshop_workbook

__all__ = [
    "SnowflakeService",
    "get_snowflake_service",
    "RedisCache",
    "CacheKeys",
    "get_redis_cache",
    "WorkshopRepository",
    "SnowflakeWorkshopRepository",
    "GenerationClient",
    "parse_llm_json",
    "strip_llm_fences",
    "generate_workshop_workbook",
]
