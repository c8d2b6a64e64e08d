"""Signed, expiring tokens (HS256 JWTs) for sessions and password resets."""
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.utils import base64url_decode, base64url_encode

REQUIRED_CLAIMS = ["exp", "iat"]


class TokenError(Exception):
    """Base class for token validation failures."""


class BadSignatureError(TokenError):
    """Token was tampered with, or signed with another secret or algorithm."""


class ExpiredTokenError(TokenError):
    """Token signature is valid but its expiry has passed."""


class MalformedTokenError(TokenError):
    """Token cannot be parsed or lacks required claims."""


class TokenCodec:
    """
    Encode claim sets into signed tokens and validate them back.

    The signature is checked before any claim is trusted: PyJWT verifies the
    HMAC over the raw header and payload segments, and only then evaluates
    ``exp``. A single instance is shared by session and reset token flows;
    callers distinguish the two with their own claims.
    """

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def encode(self, claims: dict[str, Any], ttl: timedelta) -> str:
        """
        Sign `claims` with an issued-at and an expiry `ttl` from now.

        Args:
            claims: JSON-serializable claims. Not mutated.
            ttl: Token lifetime.

        Returns:
            Compact token string (``header.payload.signature``).
        """
        issued_at = datetime.now(UTC)
        payload = {**claims, "iat": issued_at, "exp": issued_at + ttl}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify and decode a token.

        Raises:
            MalformedTokenError: Not a dot-separated token at all, or required
                claims missing.
            BadSignatureError: Signature mismatch, undecodable segments, or
                the wrong number of segments.
            ExpiredTokenError: Valid signature, expiry in the past.
        """
        if not isinstance(token, str) or "." not in token:
            raise MalformedTokenError("Token must be a dot-separated string")
        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            # A delimiter was inserted or overwritten: tampering, not garbage.
            raise BadSignatureError("Token must have three non-empty segments")

        # base64 decoding ignores the spare bits of the final character, so
        # two spellings of the same signature would both verify. Only accept
        # the canonical one.
        try:
            signature = base64url_decode(segments[2].encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            raise BadSignatureError("Signature segment is not valid base64url") from e
        if base64url_encode(signature).decode("ascii") != segments[2]:
            raise BadSignatureError("Signature segment is not canonically encoded")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except jwt.MissingRequiredClaimError as e:
            raise MalformedTokenError(str(e)) from e
        except jwt.InvalidTokenError as e:
            # DecodeError, InvalidSignatureError, InvalidAlgorithmError and
            # friends: the bytes are not what this secret signed.
            raise BadSignatureError(str(e)) from e
