"""
Async Redis access for the profile cache and outstanding reset tokens.

Every call degrades instead of raising: reads miss, writes report False and a
consume reports None when Redis is disabled or unreachable. Callers decide
whether a degraded answer is acceptable.
"""
import logging

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import NoScriptError, RedisError

logger = logging.getLogger(__name__)

# Atomic compare-and-delete: KEYS[1] is removed only while it holds ARGV[1].
# Of several callers racing on the same key and value, one sees 1.
COMPARE_AND_DELETE_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current == ARGV[1] then
    redis.call('DEL', KEYS[1])
    return 1
end
return 0
"""


class RedisClient:
    """Pooled async Redis client that reports unavailability instead of raising."""

    def __init__(self, url: str, enabled: bool = True, pool_size: int = 20) -> None:
        self._url = url
        self._enabled = enabled
        self._pool_size = pool_size
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None
        self._consume_sha: str | None = None

    async def connect(self) -> None:
        """Open the pool, check the server answers and register the consume script."""
        if not self._enabled:
            logger.info("redis_disabled")
            return
        try:
            self._pool = ConnectionPool.from_url(self._url, max_connections=self._pool_size)
            self._client = Redis(connection_pool=self._pool)
            await self._client.ping()
        except RedisError as e:
            logger.warning("redis_connect_failed: %s", e)
            self._client = None
            self._pool = None
            return
        await self._register_consume_script()
        logger.info("redis_connected")

    def attach(self, client: Redis) -> None:
        """
        Use an already constructed Redis client instead of building a pool.

        The consume script is registered on first use. Used by tests to plug
        in an in-process server.
        """
        self._client = client
        self._consume_sha = None

    async def _register_consume_script(self) -> str | None:
        if self._client is None:
            return None
        try:
            self._consume_sha = await self._client.script_load(COMPARE_AND_DELETE_SCRIPT)
        except RedisError as e:
            logger.warning("redis_script_load_failed: %s", e)
            self._consume_sha = None
        return self._consume_sha

    async def close(self) -> None:
        """Release the connection pool."""
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        self._pool = None
        logger.info("redis_closed")

    @property
    def is_connected(self) -> bool:
        """Whether a client is attached. Does not probe the server."""
        return self._client is not None

    async def ping(self) -> bool:
        """Probe the server; False when disabled or unreachable."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def get(self, key: str) -> bytes | None:
        """Raw value of `key`, None when absent or Redis is unavailable."""
        if self._client is None:
            return None
        try:
            return await self._client.get(key)
        except RedisError as e:
            logger.warning("redis_get_failed key=%s: %s", key, e)
            return None

    async def setex(self, key: str, seconds: int, value: str | bytes) -> bool:
        """Store `value` under `key` for `seconds`. False when nothing was written."""
        if self._client is None:
            return False
        try:
            await self._client.setex(key, seconds, value)
        except RedisError as e:
            logger.warning("redis_setex_failed key=%s: %s", key, e)
            return False
        return True

    async def delete(self, *keys: str) -> bool:
        """Remove keys; absent keys are ignored. False when Redis is unavailable."""
        if self._client is None:
            return False
        try:
            await self._client.delete(*keys)
        except RedisError as e:
            logger.warning("redis_delete_failed keys=%s: %s", keys, e)
            return False
        return True

    async def flushdb(self) -> bool:
        """Drop every key in the selected database. Test helper."""
        if self._client is None:
            return False
        try:
            await self._client.flushdb()
        except RedisError as e:
            logger.warning("redis_flushdb_failed: %s", e)
            return False
        return True

    async def compare_and_delete(self, key: str, expected: str) -> bool | None:
        """
        Atomically delete `key` if it holds `expected`.

        A server that lost its script cache (restart, SCRIPT FLUSH) answers
        NOSCRIPT; the script is registered again and the call retried once.

        Args:
            key: Redis key to consume.
            expected: Value the key must currently hold.

        Returns:
            True if the key held `expected` and was deleted, False if it was
            absent or held something else, None if Redis is unavailable.
        """
        if self._client is None:
            return None
        sha = self._consume_sha or await self._register_consume_script()
        if sha is None:
            return None

        try:
            try:
                result = await self._client.evalsha(sha, 1, key, expected)
            except NoScriptError:
                logger.warning("redis_script_missing script=compare_and_delete")
                sha = await self._register_consume_script()
                if sha is None:
                    return None
                result = await self._client.evalsha(sha, 1, key, expected)
        except RedisError as e:
            logger.warning("redis_compare_and_delete_failed key=%s: %s", key, e)
            return None
        return int(result) == 1


# Global Redis client state using a container to avoid global statement
class _RedisState:
    """Container for global Redis client state."""

    client: RedisClient | None = None


_state = _RedisState()


def get_redis_client() -> RedisClient | None:
    """Get the global Redis client instance."""
    return _state.client


def set_redis_client(client: RedisClient | None) -> None:
    """Set the global Redis client instance."""
    _state.client = client
