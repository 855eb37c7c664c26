"""SQLAlchemy models."""

from crm.models.user import User

__all__ = [
    "User",
]
