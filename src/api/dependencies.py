"""FastAPI dependencies for injection."""
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionPrincipal, get_current_principal, get_token_codec
from core.cache import CacheStore, get_cache_store
from core.config import Settings, get_settings
from core.passwords import PasswordHasher
from core.redis import RedisClient
from core.tokens import TokenCodec
from db.session import get_async_session
from services.credential_service import CredentialPolicy, CredentialService
from services.email_service import EmailSender, SmtpEmailSender
from services.user_repository import UserRepository


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Process-wide password hasher."""
    return PasswordHasher()


def get_cache(settings: Settings = Depends(get_settings)) -> CacheStore:
    """
    Cache store created at startup.

    Falls back to a store over a disabled client (every lookup misses) when
    the app runs without its lifespan, e.g. under a bare ASGI transport.
    """
    store = get_cache_store()
    if store is None:
        store = CacheStore(RedisClient(settings.redis_url, enabled=False))
    return store


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    """SMTP sender configured from settings."""
    return SmtpEmailSender.from_settings(settings)


def get_credential_service(
    db: AsyncSession = Depends(get_async_session),
    cache: CacheStore = Depends(get_cache),
    codec: TokenCodec = Depends(get_token_codec),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email_sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> CredentialService:
    """Credential service bound to the request's database session."""
    return CredentialService(
        repository=UserRepository(db),
        cache=cache,
        codec=codec,
        hasher=hasher,
        email_sender=email_sender,
        policy=CredentialPolicy.from_settings(settings),
    )


__all__ = [
    "SessionPrincipal",
    "get_async_session",
    "get_cache",
    "get_credential_service",
    "get_current_principal",
    "get_email_sender",
    "get_password_hasher",
    "get_settings",
    "get_token_codec",
]
