"""Domain models."""

from userdb.models.user import User

__all__ = ["User"]
