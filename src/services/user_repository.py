"""Durable storage for user records."""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from services.exceptions import DependencyFailureError, DuplicateEmailError

logger = logging.getLogger(__name__)

# Driver-level failures meaning the database could not be reached or dropped
# the connection, as opposed to a rejected statement.
STORE_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)


def _normalize(email: str) -> str:
    return email.strip().lower()


@asynccontextmanager
async def _store_call(operation: str) -> AsyncIterator[None]:
    """Report an unreachable database as DependencyFailureError."""
    try:
        yield
    except STORE_UNAVAILABLE_ERRORS as e:
        logger.warning("user_store_unavailable operation=%s: %s", operation, e)
        raise DependencyFailureError("User store is temporarily unavailable") from e


class UserRepository:
    """
    Keyed CRUD over the users table.

    Holds no business rules; the unique index on email is the only
    uniqueness guard. Uses flush(), not commit, except through `commit()`.
    The session generator commits at request end.

    Raises DependencyFailureError from every method when the database is
    unreachable.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_email(self, email: str) -> User | None:
        """Get a user by email (case-insensitive), None if absent."""
        async with _store_call("find_by_email"):
            result = await self._db.execute(
                select(User).where(User.email == _normalize(email)),
            )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> User | None:
        """Get a user by primary key, None if absent."""
        async with _store_call("find_by_id"):
            return await self._db.get(User, user_id)

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        password_algo: str,
    ) -> User:
        """
        Insert a new user.

        Concurrent inserts for the same email race at the unique index;
        the loser gets DuplicateEmailError.

        Important: must be the first write of the request. The rollback on
        IntegrityError discards everything the session holds.

        Raises:
            DuplicateEmailError: The email is already registered.
            DependencyFailureError: The database is unreachable.
        """
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=_normalize(email),
            password_hash=password_hash,
            password_algo=password_algo,
        )
        async with _store_call("create"):
            self._db.add(user)
            try:
                await self._db.flush()
            except IntegrityError:
                await self._db.rollback()
                logger.info("user_create_duplicate_email")
                raise DuplicateEmailError() from None
            await self._db.refresh(user)
        return user

    async def update_password(
        self,
        user: User,
        password_hash: str,
        password_algo: str,
    ) -> User:
        """Replace a user's password hash."""
        async with _store_call("update_password"):
            user.password_hash = password_hash
            user.password_algo = password_algo
            await self._db.flush()
            await self._db.refresh(user)
        return user

    async def commit(self) -> None:
        """
        Commit the unit of work now instead of at request end.

        For callers that must not publish a write (e.g. to the cache) before
        it is durable. The request-end commit then has nothing left to do.
        """
        async with _store_call("commit"):
            await self._db.commit()
