"""Service layer for greeting operations."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.greeting import Greeting
from schemas.greeting import GreetingCreate, GreetingUpdate
from services.exceptions import GreetingNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_GREETING = "Hello, World!"


def personalized_greeting(first_name: str | None = None, last_name: str | None = None) -> str:
    """
    Build a greeting from whichever name parts are present.

    Blank parts are ignored; with no name at all the default greeting is used.
    """
    parts = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    if not parts:
        return DEFAULT_GREETING
    return f"Hello, {' '.join(parts)}!"


async def create_greeting(
    db: AsyncSession,
    user_id: int,
    data: GreetingCreate,
) -> Greeting:
    """
    Save a greeting for a user.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    greeting = Greeting(user_id=user_id, message=data.message)
    db.add(greeting)
    await db.flush()
    await db.refresh(greeting)
    logger.info("greeting_created user_id=%s greeting_id=%s", user_id, greeting.id)
    return greeting


async def get_greeting(
    db: AsyncSession,
    user_id: int,
    greeting_id: int,
) -> Greeting | None:
    """
    Get a greeting by ID, scoped to user.

    Returns:
        The greeting if found and owned by the user, None otherwise.
    """
    result = await db.execute(
        select(Greeting).where(
            Greeting.id == greeting_id,
            Greeting.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def list_greetings(db: AsyncSession, user_id: int) -> list[Greeting]:
    """Get all greetings for a user, oldest first."""
    result = await db.execute(
        select(Greeting)
        .where(Greeting.user_id == user_id)
        .order_by(Greeting.created_at, Greeting.id),
    )
    return list(result.scalars().all())


async def update_greeting(
    db: AsyncSession,
    user_id: int,
    greeting_id: int,
    data: GreetingUpdate,
) -> Greeting:
    """
    Replace the message of a greeting.

    Raises:
        GreetingNotFoundError: Greeting missing or owned by someone else.
    """
    greeting = await get_greeting(db, user_id, greeting_id)
    if greeting is None:
        raise GreetingNotFoundError(greeting_id)
    greeting.message = data.message
    await db.flush()
    await db.refresh(greeting)
    return greeting


async def delete_greeting(
    db: AsyncSession,
    user_id: int,
    greeting_id: int,
) -> bool:
    """
    Delete a greeting.

    Returns:
        True if deleted, False if not found.
    """
    greeting = await get_greeting(db, user_id, greeting_id)
    if greeting is None:
        return False
    await db.delete(greeting)
    await db.flush()
    logger.info("greeting_deleted user_id=%s greeting_id=%s", user_id, greeting_id)
    return True
