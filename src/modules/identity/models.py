"""Caller profile: maps an authenticated user to an organisation role.

The identity provider authenticates users; this table only records which
of the two roles (``admin`` / ``employee``) a user holds.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.identity.constants import Role


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.EMPLOYEE,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "profiles"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.user} ({self.role})"
