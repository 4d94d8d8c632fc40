"""Explicit caller context.

Every core operation receives the caller as a value instead of reading a
process-wide "current user".  ``resolve_caller`` is the single bridge
between the transport layer's authenticated user and that value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from modules.identity.constants import Role
from modules.identity.permissions import can_mutate_financials


@dataclass(frozen=True)
class CallerContext:
    """``(user_id, role)`` pair supplied by the Identity Context."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def financials_visible(self) -> bool:
        return can_mutate_financials(self.role)


def role_of(user: Any) -> str:
    """The role recorded on *user*'s profile.

    Users without a profile row (created before the profile signal was
    installed) fall back to ``admin`` for superusers, ``employee`` otherwise.
    """
    profile = getattr(user, "profile", None)
    if profile is not None:
        return profile.role
    return Role.ADMIN if getattr(user, "is_superuser", False) else Role.EMPLOYEE


def resolve_caller(user: Any) -> CallerContext:
    """Build a ``CallerContext`` from an authenticated Django user."""
    return CallerContext(user_id=user.pk, role=role_of(user))
