"""User administration service (Use Cases).

Admins manage the organisation's logins and their roles.

Business rules enforced here:
- Every operation requires ``can_manage_users`` on the caller, whatever
  the transport layer already checked.
- Emails are unique (case-insensitive) and double as the login username.
- Passwords go through Django's ``AUTH_PASSWORD_VALIDATORS``.
- The organisation always keeps at least one active administrator.
- Removing a user who authored customers, orders or history entries
  deactivates the login instead, so those records keep their author.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

import structlog
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError

from modules.core.repositories.atomic import atomic_unit
from modules.identity.constants import Role
from modules.identity.context import CallerContext, role_of
from modules.identity.exceptions import (
    LastAdministrator,
    UserAlreadyExists,
    UserManagementForbidden,
    UserNotFound,
    WeakPassword,
)
from modules.identity.permissions import can_manage_users

if TYPE_CHECKING:
    from modules.identity.dtos import CreateUserDTO, UpdateUserDTO
    from modules.identity.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserService:
    """Application service for account and role administration."""

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    def _require_manager(self, caller: CallerContext) -> None:
        if not can_manage_users(caller.role):
            raise UserManagementForbidden()

    def _get(self, id: Any) -> Any:
        user = self._repo.get_by_id(id)
        if user is None:
            raise UserNotFound(f"User {id} not found.")
        return user

    def _keep_an_admin(self, user: Any) -> None:
        if (
            user.is_active
            and role_of(user) == Role.ADMIN
            and self._repo.count_active_admins(exclude_id=user.pk) == 0
        ):
            raise LastAdministrator()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_user(self, dto: CreateUserDTO, caller: CallerContext) -> Any:
        """Create a login with *dto.role*.

        Raises:
            UserManagementForbidden: caller is not an administrator.
            UserAlreadyExists: the email is already in use.
            WeakPassword: the password fails a password validator.
        """
        self._require_manager(caller)
        try:
            candidate = get_user_model()(username=dto.email, email=dto.email)
            validate_password(dto.password, user=candidate)
        except DjangoValidationError as exc:
            raise WeakPassword(" ".join(exc.messages), field="password") from exc

        with atomic_unit("user.create"):
            if self._repo.email_taken(dto.email):
                raise UserAlreadyExists(dto.email)
            user = self._repo.create_user(dto.email, dto.password, dto.role.value)

        logger.info(
            "user.created", user_id=user.pk, role=dto.role.value, created_by=caller.user_id
        )
        return user

    def update_user(self, id: Any, dto: UpdateUserDTO, caller: CallerContext) -> Any:
        """Change a user's email, role or active flag.

        Raises:
            UserManagementForbidden: caller is not an administrator.
            UserNotFound: no such user.
            UserAlreadyExists: the new email belongs to someone else.
            LastAdministrator: the change would leave no active admin.
        """
        self._require_manager(caller)
        changes = dto.changes()
        with atomic_unit("user.update"):
            user = self._get(id)

            demoted = "role" in changes and changes["role"] != Role.ADMIN
            deactivated = changes.get("is_active") is False
            if demoted or deactivated:
                self._keep_an_admin(user)

            if "email" in changes:
                if self._repo.email_taken(changes["email"], exclude_id=user.pk):
                    raise UserAlreadyExists(changes["email"])
                user.email = user.username = changes["email"]
            if "is_active" in changes:
                user.is_active = changes["is_active"]
            user = self._repo.save(user)
            if "role" in changes:
                self._repo.set_role(user.pk, changes["role"])

        logger.info(
            "user.updated",
            user_id=user.pk,
            fields=sorted(changes),
            updated_by=caller.user_id,
        )
        return self._get(user.pk)

    def delete_user(self, id: Any, caller: CallerContext) -> bool:
        """Remove a user; returns ``False`` when the login was only deactivated.

        Raises:
            UserManagementForbidden: caller is not an administrator.
            UserNotFound: no such user.
            LastAdministrator: the user is the last active admin.
        """
        self._require_manager(caller)
        with atomic_unit("user.delete"):
            user = self._get(id)
            self._keep_an_admin(user)
            if self._repo.has_authored_records(user.pk):
                user.is_active = False
                self._repo.save(user)
                removed = False
            else:
                removed = self._repo.delete(user.pk)

        logger.info(
            "user.deleted" if removed else "user.deactivated",
            user_id=user.pk,
            deleted_by=caller.user_id,
        )
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_users(self, caller: CallerContext) -> List[Any]:
        self._require_manager(caller)
        return list(self._repo.list())

    def get_user(self, id: Any, caller: CallerContext) -> Any:
        self._require_manager(caller)
        return self._get(id)
