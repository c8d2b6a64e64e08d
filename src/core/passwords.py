"""Password hashing with argon2id."""
import logging
import secrets
from functools import cached_property

from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = logging.getLogger(__name__)

ARGON2ID = "argon2id"


class PasswordHasher:
    """
    One-way hashing and verification of plaintext passwords.

    Every hash embeds its own random salt and cost parameters (PHC string
    format, e.g. ``$argon2id$v=19$m=65536,t=3,p=4$<salt>$<digest>``), so hashing
    the same password twice yields different strings and verification needs
    nothing but the stored hash.
    """

    algorithm = ARGON2ID

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh random salt."""
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """
        Check a password against a stored hash.

        Returns False for a wrong password and for a hash that cannot be
        parsed; callers never learn which of the two happened.
        """
        try:
            return self._hasher.verify(password_hash, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError, ValueError):
            logger.warning("password_verify_invalid_hash")
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Whether the hash was produced with different cost parameters."""
        try:
            return self._hasher.check_needs_rehash(password_hash)
        except ValueError:
            return True

    @cached_property
    def _dummy_hash(self) -> str:
        return self._hasher.hash(secrets.token_urlsafe(16))

    def verify_dummy(self, plaintext: str) -> bool:
        """
        Spend the same work as a real verification, always returning False.

        Called when no account exists so that response time does not reveal
        whether an email is registered.
        """
        self.verify(plaintext, self._dummy_hash)
        return False
