"""User model for registered accounts."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.greeting import Greeting


class User(Base, TimestampMixin):
    """
    Registered user with password credentials.

    Email is stored normalized (trimmed, lower-cased) so the unique index
    doubles as a case-insensitive uniqueness check.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Normalized (lower-case) email, unique login identifier",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        comment="PHC-formatted hash including salt and cost parameters",
    )
    password_algo: Mapped[str] = mapped_column(
        String(32),
        comment="Hash algorithm tag, e.g. 'argon2id'",
    )

    greetings: Mapped[list["Greeting"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
