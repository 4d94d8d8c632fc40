"""Django ORM implementation of the User repository.

Users come from ``AUTH_USER_MODEL``; the role lives on the one-to-one
``Profile``.  Look-ups return ``None`` instead of raising, and transaction
boundaries belong to the Service Layer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.contrib.auth import get_user_model
from django.db.models import Q, QuerySet

from modules.customers.models import Customer
from modules.identity.constants import Role
from modules.identity.models import Profile
from modules.identity.repositories.interfaces import IUserRepository
from modules.orders.models import Order, OrderHistory

logger = structlog.get_logger(__name__)

User = get_user_model()


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    def _base_queryset(self) -> QuerySet:
        return User.objects.select_related("profile")

    def get_by_id(self, id: Any) -> Optional[Any]:
        try:
            return self._base_queryset().filter(pk=int(id)).first()
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Users newest first."""
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset.order_by("-date_joined", "-pk"))

    def create_user(self, email: str, password: str, role: str) -> Any:
        user = User.objects.create_user(username=email, email=email, password=password)
        # The post_save signal already created an employee profile.
        self.set_role(user.pk, role)
        logger.info("user.saved", user_id=user.pk, is_new=True)
        return self.get_by_id(user.pk)

    def save(self, entity: Any) -> Any:
        entity.save()
        logger.info("user.saved", user_id=entity.pk, is_new=False)
        return entity

    def set_role(self, id: int, role: str) -> None:
        Profile.objects.update_or_create(user_id=id, defaults={"role": role})

    def delete(self, id: Any) -> bool:
        try:
            deleted, _ = User.objects.filter(pk=int(id)).delete()
        except (TypeError, ValueError):
            return False
        if deleted:
            logger.info("user.row_deleted", user_id=id)
        return bool(deleted)

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        queryset = User.objects.filter(Q(email__iexact=email) | Q(username__iexact=email))
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def count_active_admins(self, exclude_id: Optional[int] = None) -> int:
        queryset = User.objects.filter(is_active=True, profile__role=Role.ADMIN)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.count()

    def has_authored_records(self, id: int) -> bool:
        return (
            Customer.objects.filter(created_by_id=id).exists()
            or Order.objects.filter(created_by_id=id).exists()
            or OrderHistory.objects.filter(created_by_id=id).exists()
        )
