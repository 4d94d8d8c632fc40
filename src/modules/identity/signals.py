"""Create a Profile for every new user."""

from __future__ import annotations

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from modules.identity.constants import Role
from modules.identity.models import Profile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def _ensure_profile(sender, instance, created: bool, **kwargs) -> None:
    if not created:
        return
    role = Role.ADMIN if instance.is_superuser else Role.EMPLOYEE
    Profile.objects.get_or_create(user=instance, defaults={"role": role})
