"""Users module - student accounts."""

from eduhub.modules.users.models import User
from eduhub.modules.users.repository import UserRepository

__all__ = ["User", "UserRepository"]
