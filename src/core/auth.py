"""Authentication module for session token validation."""
import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings, get_settings
from core.tokens import TokenCodec, TokenError

logger = logging.getLogger(__name__)

SESSION_PURPOSE = "session"

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionPrincipal:
    """Identity carried by a verified session token. No database lookup involved."""

    user_id: int
    email: str


def get_token_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    """Codec keyed by the configured signing secret."""
    return TokenCodec(settings.secret_key, settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def principal_from_token(token: str, codec: TokenCodec) -> SessionPrincipal:
    """
    Verify a session token and extract its subject.

    Session tokens are stateless: validity is signature plus expiry, there
    is no revocation list.

    Raises:
        HTTPException: 401 "Could not validate credentials" for any token that
            fails to decode or is not a session token.
    """
    try:
        claims = codec.decode(token)
    except TokenError as e:
        # One outcome for every codec failure; the reason is only logged.
        logger.debug("session_token_rejected reason=%s", type(e).__name__)
        raise _unauthorized("Could not validate credentials") from None

    if claims.get("purpose") != SESSION_PURPOSE:
        raise _unauthorized("Could not validate credentials")
    try:
        user_id = int(claims["sub"])
        email = str(claims["email"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Could not validate credentials") from None
    return SessionPrincipal(user_id=user_id, email=email)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionPrincipal:
    """Require a valid bearer session token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return principal_from_token(credentials.credentials, codec)
