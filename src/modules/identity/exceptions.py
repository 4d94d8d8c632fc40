"""Identity domain exceptions.

Raised by ``UserService``; the views translate them into HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed


class UserNotFound(NotFound):
    """The requested user does not exist."""


class UserAlreadyExists(Conflict):
    """Another account already uses this email address."""

    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email {email} already exists.", field="email")


class UserManagementForbidden(Forbidden):
    """Only administrators may list, create, edit or remove users."""

    def __init__(self) -> None:
        super().__init__("Only administrators may manage users.")


class LastAdministrator(Conflict):
    """The change would leave the organisation without an active admin."""

    def __init__(self) -> None:
        super().__init__("At least one active administrator is required.")


class WeakPassword(ValidationFailed):
    """The password fails the configured password validators."""
