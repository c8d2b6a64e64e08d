"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from datetime import timedelta

# Must be set before any app imports that trigger Settings validation.
TEST_SECRET_KEY = "test-signing-secret-0123456789abcdef"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = TEST_SECRET_KEY
os.environ["REDIS_ENABLED"] = "false"
os.environ["DEV_MODE"] = "false"

import pytest  # noqa: E402
from fakeredis import FakeAsyncRedis, FakeServer  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.cache import CacheStore  # noqa: E402
from core.passwords import PasswordHasher  # noqa: E402
from core.redis import RedisClient  # noqa: E402
from core.tokens import TokenCodec  # noqa: E402
from models.base import Base  # noqa: E402
from services.credential_service import CredentialPolicy, CredentialService  # noqa: E402
from services.user_repository import UserRepository  # noqa: E402


@dataclass
class SentResetEmail:
    """A reset email captured by FakeEmailSender."""

    recipient: str
    token: str
    base_url: str


@dataclass
class FakeEmailSender:
    """Email sender that records messages instead of delivering them."""

    succeed: bool = True
    sent: list[SentResetEmail] = field(default_factory=list)

    async def send_password_reset(self, recipient: str, token: str, base_url: str) -> bool:
        """Record the message; report the configured outcome."""
        if not self.succeed:
            return False
        self.sent.append(SentResetEmail(recipient=recipient, token=token, base_url=base_url))
        return True


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def redis_client() -> AsyncGenerator[RedisClient]:
    """RedisClient backed by an isolated in-process fake server with Lua support."""
    client = RedisClient("redis://fake:6379", enabled=True)
    client.attach(FakeAsyncRedis(server=FakeServer()))
    yield client
    await client.close()


@pytest.fixture
def cache_store(redis_client: RedisClient) -> CacheStore:
    """Cache store over the fake Redis."""
    return CacheStore(redis_client)


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    """Argon2 hasher with minimal cost parameters to keep tests fast."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def token_codec() -> TokenCodec:
    """Codec keyed with the test secret."""
    return TokenCodec(TEST_SECRET_KEY)


@pytest.fixture
def email_sender() -> FakeEmailSender:
    """Recording email sender."""
    return FakeEmailSender()


@pytest.fixture
def credential_policy() -> CredentialPolicy:
    """Token lifetimes used across tests."""
    return CredentialPolicy(
        session_ttl=timedelta(minutes=30),
        reset_ttl=timedelta(minutes=15),
        profile_cache_ttl_seconds=300,
        base_url="http://frontend.test",
    )


@pytest.fixture
def credential_service(
    db_session: AsyncSession,
    cache_store: CacheStore,
    token_codec: TokenCodec,
    password_hasher: PasswordHasher,
    email_sender: FakeEmailSender,
    credential_policy: CredentialPolicy,
) -> CredentialService:
    """Credential service wired to the test database, fake Redis and fake mailer."""
    return CredentialService(
        repository=UserRepository(db_session),
        cache=cache_store,
        codec=token_codec,
        hasher=password_hasher,
        email_sender=email_sender,
        policy=credential_policy,
    )


@pytest.fixture
async def client(
    db_session: AsyncSession,
    cache_store: CacheStore,
    token_codec: TokenCodec,
    password_hasher: PasswordHasher,
    email_sender: FakeEmailSender,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database, cache, hasher and mailer overrides."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    from core.config import get_settings

    get_settings.cache_clear()

    from api.dependencies import (
        get_cache,
        get_email_sender,
        get_password_hasher,
        get_token_codec,
    )
    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        # Same unit-of-work contract as the real dependency
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_cache] = lambda: cache_store
    app.dependency_overrides[get_token_codec] = lambda: token_codec
    app.dependency_overrides[get_password_hasher] = lambda: password_hasher
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
