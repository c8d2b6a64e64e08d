"""
Tests for the Redis client module.

Note: Basic Redis operations (get/set/delete/ping) are not tested here as they
just wrap the redis.asyncio library. We test the compare-and-delete Lua script
and fallback behavior which contain actual business logic.
"""
import asyncio

from core.redis import RedisClient, get_redis_client, set_redis_client


class TestCompareAndDelete:
    """Tests for the atomic compare-and-delete script."""

    async def test__matching_value__deletes_and_returns_true(
        self, redis_client: RedisClient,
    ) -> None:
        """Key holding the expected value is consumed."""
        await redis_client.setex("k", 60, "token-1")

        assert await redis_client.compare_and_delete("k", "token-1") is True
        assert await redis_client.get("k") is None

    async def test__different_value__keeps_key(
        self, redis_client: RedisClient,
    ) -> None:
        """Key holding something else is left alone."""
        await redis_client.setex("k", 60, "token-2")

        assert await redis_client.compare_and_delete("k", "token-1") is False
        assert await redis_client.get("k") == b"token-2"

    async def test__missing_key__returns_false(
        self, redis_client: RedisClient,
    ) -> None:
        """Absent key is simply not consumed."""
        assert await redis_client.compare_and_delete("missing", "token-1") is False

    async def test__second_call__returns_false(
        self, redis_client: RedisClient,
    ) -> None:
        """A value can only be consumed once."""
        await redis_client.setex("k", 60, "token-1")

        assert await redis_client.compare_and_delete("k", "token-1") is True
        assert await redis_client.compare_and_delete("k", "token-1") is False

    async def test__concurrent_calls__exactly_one_wins(
        self, redis_client: RedisClient,
    ) -> None:
        """Racing consumers cannot both succeed."""
        await redis_client.setex("k", 60, "token-1")

        results = await asyncio.gather(
            *(redis_client.compare_and_delete("k", "token-1") for _ in range(10)),
        )

        assert results.count(True) == 1
        assert results.count(False) == 9


class TestRedisClientDisabled:
    """Tests for disabled Redis client."""

    async def test__disabled_client__returns_false_on_ping(self) -> None:
        """Disabled client returns False on ping."""
        client = RedisClient("redis://localhost:6379", enabled=False)
        await client.connect()

        assert client.is_connected is False
        assert await client.ping() is False

        await client.close()

    async def test__disabled_client__returns_none_on_get(self) -> None:
        """Disabled client returns None on get."""
        client = RedisClient("redis://localhost:6379", enabled=False)
        await client.connect()

        assert await client.get("any:key") is None

        await client.close()

    async def test__disabled_client__returns_false_on_setex(self) -> None:
        """Disabled client returns False on setex."""
        client = RedisClient("redis://localhost:6379", enabled=False)
        await client.connect()

        assert await client.setex("any:key", 60, "value") is False

        await client.close()

    async def test__disabled_client__compare_and_delete_returns_none(self) -> None:
        """Disabled client cannot answer a consume, so it reports None."""
        client = RedisClient("redis://localhost:6379", enabled=False)
        await client.connect()

        assert await client.compare_and_delete("any:key", "value") is None

        await client.close()


class TestRedisClientUnavailable:
    """Tests for Redis client when server is unavailable."""

    async def test__unavailable_server__connect_fails_gracefully(self) -> None:
        """Client handles unavailable server gracefully."""
        # Use invalid port
        client = RedisClient("redis://localhost:59999", enabled=True)
        await client.connect()

        # Should not be connected but should not raise
        assert client.is_connected is False
        assert await client.get("any:key") is None
        assert await client.delete("any:key") is False

        await client.close()


class TestGlobalRedisClient:
    """Tests for the process-wide client accessor."""

    def test__set_and_get(self) -> None:
        """The accessor returns whatever was set last."""
        client = RedisClient("redis://localhost:6379", enabled=False)
        try:
            set_redis_client(client)
            assert get_redis_client() is client
        finally:
            set_redis_client(None)
        assert get_redis_client() is None
