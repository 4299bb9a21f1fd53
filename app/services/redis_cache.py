"""Redis caching and per-workshop locking service."""
import logging
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncGenerator, Generator, Optional, Type, TypeVar
import redis
import redis.asyncio as aioredis
from redis.exceptions import LockError
from pydantic import BaseModel
from app.config import get_settings
from app.errors import WorkshopBusy

logger = logging.getLogger(__name__)
T = TypeVar("T", bound=BaseModel)


class RedisCache:
    """Redis caching service with Pydantic model support."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        client: Optional[redis.Redis] = None,
        async_client: Optional[aioredis.Redis] = None,
    ):
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            decode_responses=True
        )
        # Used by locks held inside the event loop
        self.async_client = async_client or aioredis.Redis(
            host=host,
            port=port,
            db=db,
            decode_responses=True
        )
        self._connected = False

    def connect(self) -> bool:
        """Test and establish connection."""
        try:
            self.client.ping()
            self._connected = True
            return True
        except redis.ConnectionError as e:
            logger.error(f"Redis connection failed: {e}")
            self._connected = False
            return False

    async def health_check(self) -> tuple[bool, Optional[str]]:
        """Check if Redis connection is healthy."""
        try:
            self.client.ping()
            return True, None
        except Exception as e:
            return False, str(e)

    def get(self, key: str, model: Type[T]) -> Optional[T]:
        """Get cached item and deserialize to Pydantic model."""
        try:
            data = self.client.get(key)
            if data:
                return model.model_validate_json(data)
            return None
        except Exception as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: BaseModel, ttl_seconds: int) -> bool:
        """Cache Pydantic model with TTL."""
        try:
            self.client.setex(key, ttl_seconds, value.model_dump_json())
            return True
        except Exception as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Invalidate cache entry."""
        try:
            self.client.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Cache delete error for {key}: {e}")
            return False

    @contextmanager
    def lock(
        self,
        key: str,
        timeout: float,
        blocking_timeout: float,
    ) -> Generator[None, None, None]:
        """Hold a Redis lock for the duration of the block.

        Raises:
            WorkshopBusy: The lock was not acquired within ``blocking_timeout``.
        """
        lock = self.client.lock(key, timeout=timeout, blocking_timeout=blocking_timeout)
        if not lock.acquire():
            logger.warning(f"Lock busy: {key}")
            raise WorkshopBusy("Another operation is in progress for this workshop")
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError as e:
                # Expired before release; the next holder already owns the key
                logger.warning(f"Lock release failed for {key}: {e}")

    @asynccontextmanager
    async def alock(
        self,
        key: str,
        timeout: float,
        blocking_timeout: float,
    ) -> AsyncGenerator[None, None]:
        """Async variant of :meth:`lock`; waiting yields to the event loop."""
        lock = self.async_client.lock(key, timeout=timeout, blocking_timeout=blocking_timeout)
        if not await lock.acquire():
            logger.warning(f"Lock busy: {key}")
            raise WorkshopBusy("Another operation is in progress for this workshop")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                logger.warning(f"Lock release failed for {key}: {e}")

    async def close(self) -> None:
        """Close both connection pools."""
        self.client.close()
        await self.async_client.aclose()


# Cache key prefixes
class CacheKeys:
    """Cache key constants and builders."""
    WORKSHOP = "workshop"
    WORKSHOP_LOCK = "workshop-lock"

    @staticmethod
    def workshop(workshop_id: str) -> str:
        return f"workshop:{workshop_id}"

    @staticmethod
    def workshop_lock(workshop_id: str) -> str:
        return f"workshop-lock:{workshop_id}"


# Singleton instance
_redis_cache: Optional[RedisCache] = None


def get_redis_cache() -> RedisCache:
    """Get or create Redis cache singleton."""
    global _redis_cache
    if _redis_cache is None:
        settings = get_settings()
        _redis_cache = RedisCache(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db
        )
    return _redis_cache
