"""Tests for greeting service layer functionality."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.greeting import GreetingCreate, GreetingUpdate
from services import greeting_service
from services.exceptions import GreetingNotFoundError


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        first_name="Ann",
        last_name="Lee",
        email="ann@x.io",
        password_hash="$argon2id$stub",
        password_algo="argon2id",
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create a second user for isolation tests."""
    user = User(
        first_name="Bob",
        last_name="Ray",
        email="bob@x.io",
        password_hash="$argon2id$stub",
        password_algo="argon2id",
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.mark.parametrize(
    ("first_name", "last_name", "expected"),
    [
        (None, None, "Hello, World!"),
        ("", "  ", "Hello, World!"),
        ("Ann", None, "Hello, Ann!"),
        (None, "Lee", "Hello, Lee!"),
        (" Ann ", "Lee", "Hello, Ann Lee!"),
    ],
)
def test__personalized_greeting(
    first_name: str | None, last_name: str | None, expected: str,
) -> None:
    assert greeting_service.personalized_greeting(first_name, last_name) == expected


async def test__create_greeting__persists_message(
    db_session: AsyncSession, test_user: User,
) -> None:
    greeting = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="  Hi there  "),
    )

    assert greeting.id is not None
    assert greeting.user_id == test_user.id
    assert greeting.message == "Hi there"


async def test__list_greetings__returns_only_own_in_creation_order(
    db_session: AsyncSession, test_user: User, other_user: User,
) -> None:
    first = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="one"),
    )
    second = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="two"),
    )
    await greeting_service.create_greeting(
        db_session, other_user.id, GreetingCreate(message="not mine"),
    )

    greetings = await greeting_service.list_greetings(db_session, test_user.id)

    assert [g.id for g in greetings] == [first.id, second.id]


async def test__get_greeting__scoped_to_owner(
    db_session: AsyncSession, test_user: User, other_user: User,
) -> None:
    greeting = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="hi"),
    )

    assert await greeting_service.get_greeting(db_session, test_user.id, greeting.id) is greeting
    assert await greeting_service.get_greeting(db_session, other_user.id, greeting.id) is None


async def test__update_greeting__replaces_message(
    db_session: AsyncSession, test_user: User,
) -> None:
    greeting = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="hi"),
    )

    updated = await greeting_service.update_greeting(
        db_session, test_user.id, greeting.id, GreetingUpdate(message="hello"),
    )

    assert updated.message == "hello"


async def test__update_greeting__other_users_greeting_not_found(
    db_session: AsyncSession, test_user: User, other_user: User,
) -> None:
    greeting = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="hi"),
    )

    with pytest.raises(GreetingNotFoundError) as exc_info:
        await greeting_service.update_greeting(
            db_session, other_user.id, greeting.id, GreetingUpdate(message="mine now"),
        )

    assert exc_info.value.greeting_id == greeting.id


async def test__delete_greeting(
    db_session: AsyncSession, test_user: User,
) -> None:
    greeting = await greeting_service.create_greeting(
        db_session, test_user.id, GreetingCreate(message="hi"),
    )

    assert await greeting_service.delete_greeting(db_session, test_user.id, greeting.id) is True
    assert await greeting_service.delete_greeting(db_session, test_user.id, greeting.id) is False
    assert await greeting_service.list_greetings(db_session, test_user.id) == []
