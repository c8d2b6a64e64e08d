"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.greeting import Greeting
from models.user import User

__all__ = ["Base", "Greeting", "TimestampMixin", "User"]
