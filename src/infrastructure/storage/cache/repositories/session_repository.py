# Path: src/infrastructure/storage/cache/repositories/session_repository.py
from typing import Dict, Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from src.infrastructure.storage.cache.client import get_cache_client
from src.shared.config.settings import settings
from src.shared.logging.service import LoggingService
from src.shared.logging.config import LogConfig
from src.shared.errors.infrastructure.database import CacheError


class SessionRepository:
    """
    Server-side session hashes in Redis.

    Each session is one hash at ``session:<token>``. Every read or write
    slides its expiry forward by the idle timeout, so an abandoned session
    disappears together with any challenge or signup data it carried.
    """

    def __init__(self, redis: Redis = None, idle_timeout: int = None):
        """Initialize repository with optional Redis client."""
        self._redis = redis
        self.idle_timeout = idle_timeout or settings.SESSION_IDLE_TIMEOUT
        self.logger = LoggingService(LogConfig())

    async def _get_redis(self) -> Redis:
        """Lazily resolve the shared Redis client."""
        if self._redis is None:
            self._redis = await get_cache_client()
        return self._redis

    @staticmethod
    def key_for(token: str) -> str:
        return f"{settings.SESSION_KEY_PREFIX}:{token}"

    def _cache_error(self, operation: str, key: str, error: RedisError) -> CacheError:
        self.logger.error(f"Redis {operation} failed", context={"key": key, "error": str(error)})
        return CacheError(
            operation=operation,
            trace_id=self.logger.tracer.get_trace_id(),
            details={"key": key, "error": str(error)}
        )

    async def create(self, token: str, fields: Dict[str, str]) -> None:
        """Create a session hash with its initial fields."""
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            await redis.hset(key, mapping=fields)
            await redis.expire(key, self.idle_timeout)
        except RedisError as e:
            raise self._cache_error("create", key, e)

    async def exists(self, token: str) -> bool:
        """Check the session is alive, refreshing its idle expiry."""
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            alive = bool(await redis.exists(key))
            if alive:
                await redis.expire(key, self.idle_timeout)
            return alive
        except RedisError as e:
            raise self._cache_error("exists", key, e)

    async def get_field(self, token: str, field: str) -> Optional[str]:
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            value = await redis.hget(key, field)
            await redis.expire(key, self.idle_timeout)
            return value.decode("utf-8") if isinstance(value, bytes) else value
        except RedisError as e:
            raise self._cache_error("hget", key, e)

    async def set_fields(self, token: str, fields: Dict[str, str]) -> None:
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            await redis.hset(key, mapping=fields)
            await redis.expire(key, self.idle_timeout)
        except RedisError as e:
            raise self._cache_error("hset", key, e)

    async def delete_fields(self, token: str, *fields: str) -> None:
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            await redis.hdel(key, *fields)
        except RedisError as e:
            raise self._cache_error("hdel", key, e)

    async def delete(self, token: str) -> None:
        key = self.key_for(token)
        try:
            redis = await self._get_redis()
            await redis.delete(key)
        except RedisError as e:
            raise self._cache_error("delete", key, e)
