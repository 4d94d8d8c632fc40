"""User repository interface.

Extends ``IRepository[User]`` with the look-ups account administration
needs: email uniqueness, the active-admin head count and whether a user
authored records that must keep their author.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional

from modules.core.repositories.interfaces import IRepository


class IUserRepository(IRepository[Any]):
    """Repository contract for users and their role profile."""

    @abstractmethod
    def create_user(self, email: str, password: str, role: str) -> Any:
        """Create a login (username = email) with a hashed password."""

    @abstractmethod
    def set_role(self, id: int, role: str) -> None:
        """Record *role* on the user's profile, creating it when missing."""

    @abstractmethod
    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """``True`` when another user already logs in with *email*."""

    @abstractmethod
    def count_active_admins(self, exclude_id: Optional[int] = None) -> int:
        """Active users holding the admin role, optionally excluding one."""

    @abstractmethod
    def has_authored_records(self, id: int) -> bool:
        """``True`` when customers, orders or history entries name this user."""
