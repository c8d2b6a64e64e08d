"""Cache-aside store for user profiles and outstanding password reset tokens."""
import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def user_key(email: str) -> str:
    """Cache key for a user's public profile."""
    return f"user:{email}"


def reset_token_key(email: str) -> str:
    """Cache key for the outstanding password reset token of a user."""
    return f"resetToken:{email}"


class CacheUnavailableError(Exception):
    """Raised when an operation needs an answer the cache cannot give right now."""


class CacheStore:
    """
    Thin read-through/write-through wrapper over Redis.

    The store never talks to the database. Callers check it first, fall back
    to the repository on a miss and write the result back. A miss is returned
    for absent keys, for payloads that no longer parse, and when Redis is
    down, so every caller must stay correct if every lookup misses.
    """

    def __init__(self, redis_client: "RedisClient") -> None:
        """Initialize cache store with Redis client."""
        self._redis = redis_client

    async def get(self, key: str, model: type[ModelT]) -> ModelT | None:
        """
        Get a cached pydantic model.

        Args:
            key: Cache key.
            model: Model class the payload was written from.

        Returns:
            The model on a hit, None on a miss.
        """
        data = await self._redis.get(key)
        if data is None:
            logger.debug("cache_miss key=%s", key)
            return None
        try:
            value = model.model_validate_json(data)
        except ValidationError:
            # Written by an older schema; treat as a miss and let TTL clean it up.
            logger.warning("cache_payload_invalid key=%s", key)
            return None
        logger.debug("cache_hit key=%s", key)
        return value

    async def get_str(self, key: str) -> str | None:
        """Get a cached string value, None on a miss."""
        data = await self._redis.get(key)
        if data is None:
            logger.debug("cache_miss key=%s", key)
            return None
        logger.debug("cache_hit key=%s", key)
        return data.decode("utf-8") if isinstance(data, bytes) else data

    async def set(self, key: str, value: BaseModel | str, ttl_seconds: int) -> bool:
        """
        Write a value with a TTL, overwriting any previous entry.

        Returns:
            True if written, False if Redis was unavailable.
        """
        payload = value if isinstance(value, str) else value.model_dump_json()
        written = await self._redis.setex(key, ttl_seconds, payload)
        logger.debug("cache_set key=%s written=%s", key, written)
        return written

    async def remove(self, key: str) -> None:
        """Delete a key. Deleting an absent key is not an error."""
        await self._redis.delete(key)
        logger.debug("cache_remove key=%s", key)

    async def consume(self, key: str, expected: str) -> bool:
        """
        Atomically delete `key` if, and only if, it holds `expected`.

        Of several concurrent callers presenting the same value, exactly one
        gets True.

        Raises:
            CacheUnavailableError: Redis could not be reached.
        """
        result = await self._redis.compare_and_delete(key, expected)
        if result is None:
            raise CacheUnavailableError(f"Could not consume cache key {key}")
        logger.debug("cache_consume key=%s consumed=%s", key, result)
        return result


# Global cache store instance (set during app startup)
_cache_store: CacheStore | None = None


def get_cache_store() -> CacheStore | None:
    """Get the global cache store instance."""
    return _cache_store


def set_cache_store(store: CacheStore | None) -> None:
    """Set the global cache store instance."""
    global _cache_store  # noqa: PLW0603
    _cache_store = store
