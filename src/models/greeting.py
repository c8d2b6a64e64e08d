"""Greeting model for user-owned greeting messages."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.user import User


class Greeting(Base, TimestampMixin):
    """A greeting message saved by a user."""

    __tablename__ = "greetings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    message: Mapped[str] = mapped_column(Text)

    user: Mapped["User"] = relationship(back_populates="greetings")
