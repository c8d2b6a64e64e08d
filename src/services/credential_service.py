"""
Service layer for account registration, login and password reset.

Lookups follow the cache-aside pattern: check the cache, fall back to the
repository on a miss and write the result back. The cache is never treated
as proof that an account exists, and every operation stays correct when
every cache lookup misses.
"""
import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from core.auth import SESSION_PURPOSE
from core.cache import CacheStore, CacheUnavailableError, reset_token_key, user_key
from core.config import Settings
from core.passwords import PasswordHasher
from core.tokens import TokenCodec, TokenError
from schemas.user import UserProfile
from schemas.validators import normalize_email, validate_name, validate_password
from services.email_service import EmailSender
from services.exceptions import (
    DependencyFailureError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    ValidationError,
)
from services.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Value of the "purpose" claim on reset tokens; session tokens use SESSION_PURPOSE.
PASSWORD_RESET_PURPOSE = "password_reset"


@dataclass(frozen=True)
class CredentialPolicy:
    """Lifetimes and links used by the credential flows."""

    session_ttl: timedelta
    reset_ttl: timedelta
    profile_cache_ttl_seconds: int
    base_url: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialPolicy":
        """Build the policy from application settings."""
        return cls(
            session_ttl=timedelta(minutes=settings.session_token_ttl_minutes),
            reset_ttl=timedelta(minutes=settings.reset_token_ttl_minutes),
            profile_cache_ttl_seconds=settings.profile_cache_ttl_seconds,
            base_url=settings.app_base_url,
        )

    @property
    def reset_ttl_seconds(self) -> int:
        """Reset token lifetime in whole seconds, for the cache mirror."""
        return int(self.reset_ttl.total_seconds())


class CredentialService:
    """
    Register, Login, ForgotPassword and ResetPassword.

    Holds no per-request state; a new instance per request is cheap. Failures
    are raised as CredentialError subclasses.
    """

    def __init__(
        self,
        repository: UserRepository,
        cache: CacheStore,
        codec: TokenCodec,
        hasher: PasswordHasher,
        email_sender: EmailSender,
        policy: CredentialPolicy,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._codec = codec
        self._hasher = hasher
        self._email_sender = email_sender
        self._policy = policy

    async def _cache_profile(self, profile: UserProfile) -> None:
        await self._cache.set(
            user_key(profile.email), profile, self._policy.profile_cache_ttl_seconds,
        )

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
    ) -> UserProfile:
        """
        Create an account and cache its profile.

        Raises:
            ValidationError: A field is empty or malformed.
            DuplicateEmailError: The email is already registered.
            DependencyFailureError: The user store is unreachable.
        """
        try:
            first_name = validate_name(first_name, "first_name")
            last_name = validate_name(last_name, "last_name")
            email = normalize_email(email)
            validate_password(password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        user = await self._repository.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            password_algo=self._hasher.algorithm,
        )
        profile = UserProfile.model_validate(user)
        # The cache must never hold a profile the store could still lose.
        await self._repository.commit()
        await self._cache_profile(profile)
        logger.info("user_registered user_id=%s", user.id)
        return profile

    async def login(self, email: str, password: str) -> str:
        """
        Verify credentials and issue a session token.

        Unknown email and wrong password raise the same error, and both spend
        one password verification.

        Raises:
            InvalidCredentialsError: No such user, or wrong password.
            DependencyFailureError: The user store is unreachable.
        """
        email = email.strip().lower()
        cached = await self._cache.get(user_key(email), UserProfile)
        # The hash is never cached, so the record is loaded either way.
        user = await self._repository.find_by_email(cached.email if cached else email)

        if user is None:
            if cached is not None:
                # Stale entry for an account the database no longer has.
                await self._cache.remove(user_key(email))
            await asyncio.to_thread(self._hasher.verify_dummy, password)
            logger.info("login_failed reason=unknown_email")
            raise InvalidCredentialsError()

        if cached is None:
            await self._cache_profile(UserProfile.model_validate(user))

        verified = await asyncio.to_thread(self._hasher.verify, password, user.password_hash)
        if not verified:
            logger.info("login_failed reason=bad_password user_id=%s", user.id)
            raise InvalidCredentialsError()

        token = self._codec.encode(
            {"sub": str(user.id), "email": user.email, "purpose": SESSION_PURPOSE},
            self._policy.session_ttl,
        )
        logger.info("login_succeeded user_id=%s", user.id)
        return token

    async def get_profile(self, email: str) -> UserProfile:
        """
        Read a user's public profile through the cache.

        Raises:
            NotFoundError: No user with this email.
        """
        email = email.strip().lower()
        cached = await self._cache.get(user_key(email), UserProfile)
        if cached is not None:
            return cached
        user = await self._repository.find_by_email(email)
        if user is None:
            raise NotFoundError()
        profile = UserProfile.model_validate(user)
        await self._cache_profile(profile)
        return profile

    async def forgot_password(self, email: str) -> bool:
        """
        Email a single-use reset token and record it in the cache.

        Returns:
            True if the email was dispatched and the token recorded, False if
            the mail server rejected it.

        Raises:
            NotFoundError: No user with this email. Unlike login this reveals
                whether the address is registered.
            DependencyFailureError: The user store is unreachable, or the mail
                went out but the token could not be recorded.
        """
        user = await self._repository.find_by_email(email)
        if user is None:
            logger.info("password_reset_unknown_email")
            raise NotFoundError()

        token = self._codec.encode(
            {
                "email": user.email,
                "purpose": PASSWORD_RESET_PURPOSE,
                "jti": secrets.token_urlsafe(16),
            },
            self._policy.reset_ttl,
        )
        sent = await self._email_sender.send_password_reset(
            user.email, token, self._policy.base_url,
        )
        if not sent:
            logger.warning("password_reset_dispatch_failed user_id=%s", user.id)
            return False

        # A newer request overwrites the older token, which stops working.
        recorded = await self._cache.set(
            reset_token_key(user.email), token, self._policy.reset_ttl_seconds,
        )
        if not recorded:
            logger.warning("password_reset_token_not_recorded user_id=%s", user.id)
            raise DependencyFailureError("Password reset is temporarily unavailable")

        logger.info("password_reset_requested user_id=%s", user.id)
        return True

    async def reset_password(self, token: str, new_password: str) -> bool:
        """
        Redeem a reset token and set a new password.

        The token must verify, must not be expired, and must be the one
        currently recorded for its email. Recording is cleared atomically, so
        a token works at most once even under concurrent use.

        Raises:
            ValidationError: The new password is empty or too long.
            InvalidOrExpiredTokenError: Forged, expired, malformed, superseded
                or already used token.
            NotFoundError: The account no longer exists.
            DependencyFailureError: The cache or the user store could not be
                reached.
        """
        try:
            validate_password(new_password)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        try:
            claims = self._codec.decode(token)
        except TokenError as e:
            logger.info("password_reset_token_rejected reason=%s", type(e).__name__)
            raise InvalidOrExpiredTokenError() from None

        email = claims.get("email")
        if claims.get("purpose") != PASSWORD_RESET_PURPOSE or not isinstance(email, str):
            logger.info("password_reset_token_rejected reason=wrong_purpose")
            raise InvalidOrExpiredTokenError()

        try:
            consumed = await self._cache.consume(reset_token_key(email), token)
        except CacheUnavailableError as e:
            raise DependencyFailureError("Password reset is temporarily unavailable") from e
        if not consumed:
            logger.info("password_reset_token_rejected reason=not_outstanding")
            raise InvalidOrExpiredTokenError()

        user = await self._repository.find_by_email(email)
        if user is None:
            raise NotFoundError()

        password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        await self._repository.update_password(user, password_hash, self._hasher.algorithm)
        await self._cache.remove(user_key(user.email))
        logger.info("password_reset_completed user_id=%s", user.id)
        return True
