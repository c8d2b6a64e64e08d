"""Tests for the cache-aside store."""
import pytest

from core.cache import (
    CacheStore,
    CacheUnavailableError,
    get_cache_store,
    reset_token_key,
    set_cache_store,
    user_key,
)
from core.redis import RedisClient
from schemas.user import UserProfile


@pytest.fixture
def profile() -> UserProfile:
    """A sample public profile."""
    return UserProfile(first_name="Ann", last_name="Lee", email="ann@x.io")


class TestCacheKeys:
    """Tests for key naming."""

    def test__user_key(self) -> None:
        assert user_key("ann@x.io") == "user:ann@x.io"

    def test__reset_token_key(self) -> None:
        assert reset_token_key("ann@x.io") == "resetToken:ann@x.io"


class TestCacheStore:
    """Tests for CacheStore class."""

    async def test__get__returns_none_on_miss(self, cache_store: CacheStore) -> None:
        """Cache miss returns None."""
        assert await cache_store.get(user_key("nobody@x.io"), UserProfile) is None

    async def test__set_then_get__returns_equal_model(
        self, cache_store: CacheStore, profile: UserProfile,
    ) -> None:
        """A written model comes back equal."""
        assert await cache_store.set(user_key(profile.email), profile, 60) is True

        assert await cache_store.get(user_key(profile.email), UserProfile) == profile

    async def test__set__overwrites_previous_value(self, cache_store: CacheStore) -> None:
        """Last write wins."""
        await cache_store.set("resetToken:ann@x.io", "first", 60)
        await cache_store.set("resetToken:ann@x.io", "second", 60)

        assert await cache_store.get_str("resetToken:ann@x.io") == "second"

    async def test__set__applies_ttl(
        self, cache_store: CacheStore, redis_client: RedisClient, profile: UserProfile,
    ) -> None:
        """Entries are written with an expiry."""
        await cache_store.set(user_key(profile.email), profile, 120)

        ttl = await redis_client._client.ttl(user_key(profile.email))
        assert 0 < ttl <= 120

    async def test__get__invalid_payload_is_a_miss(
        self, cache_store: CacheStore, redis_client: RedisClient,
    ) -> None:
        """Payload written by an older schema is ignored instead of raising."""
        await redis_client.setex(user_key("ann@x.io"), 60, '{"unexpected": true}')

        assert await cache_store.get(user_key("ann@x.io"), UserProfile) is None

    async def test__remove__deletes_key(
        self, cache_store: CacheStore, profile: UserProfile,
    ) -> None:
        """Removed entries miss."""
        await cache_store.set(user_key(profile.email), profile, 60)

        await cache_store.remove(user_key(profile.email))

        assert await cache_store.get(user_key(profile.email), UserProfile) is None

    async def test__remove__absent_key_is_not_an_error(self, cache_store: CacheStore) -> None:
        """Deleting twice is fine."""
        await cache_store.remove("user:nobody@x.io")
        await cache_store.remove("user:nobody@x.io")

    async def test__consume__matching_value(self, cache_store: CacheStore) -> None:
        """Matching value is consumed exactly once."""
        await cache_store.set(reset_token_key("ann@x.io"), "tok", 60)

        assert await cache_store.consume(reset_token_key("ann@x.io"), "tok") is True
        assert await cache_store.consume(reset_token_key("ann@x.io"), "tok") is False
        assert await cache_store.get_str(reset_token_key("ann@x.io")) is None

    async def test__consume__other_value_is_left_in_place(
        self, cache_store: CacheStore,
    ) -> None:
        """A stale value cannot remove the current one."""
        await cache_store.set(reset_token_key("ann@x.io"), "new", 60)

        assert await cache_store.consume(reset_token_key("ann@x.io"), "old") is False
        assert await cache_store.get_str(reset_token_key("ann@x.io")) == "new"


class TestCacheStoreRedisUnavailable:
    """Tests for fallback behavior when Redis is down."""

    @pytest.fixture
    def disabled_store(self) -> CacheStore:
        return CacheStore(RedisClient("redis://localhost:6379", enabled=False))

    async def test__get__misses(self, disabled_store: CacheStore) -> None:
        assert await disabled_store.get(user_key("ann@x.io"), UserProfile) is None
        assert await disabled_store.get_str(reset_token_key("ann@x.io")) is None

    async def test__set__reports_not_written(
        self, disabled_store: CacheStore, profile: UserProfile,
    ) -> None:
        assert await disabled_store.set(user_key(profile.email), profile, 60) is False

    async def test__consume__raises(self, disabled_store: CacheStore) -> None:
        """A consume needs a definite answer; a down cache cannot give one."""
        with pytest.raises(CacheUnavailableError):
            await disabled_store.consume(reset_token_key("ann@x.io"), "tok")


class TestGlobalCacheStore:
    """Tests for global cache store functions."""

    def test__get_cache_store__returns_none_when_not_set(self) -> None:
        set_cache_store(None)
        assert get_cache_store() is None

    def test__set_cache_store__sets_global_instance(self, cache_store: CacheStore) -> None:
        try:
            set_cache_store(cache_store)
            assert get_cache_store() is cache_store
        finally:
            set_cache_store(None)
