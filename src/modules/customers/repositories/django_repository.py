"""Django ORM implementation of the Customer repository.

Satisfies ``ICustomerRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising; the Service Layer decides how to translate a missing
entity.  Transaction boundaries belong to the Service Layer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Count, Q, QuerySet

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)

SEARCH_FIELDS = ("first_name", "last_name", "email", "phone")


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def _base_queryset(self) -> QuerySet[Customer]:
        return Customer.objects.annotate(orders_count=Count("orders"))

    def get_by_id(self, id: str) -> Optional[Customer]:
        """Retrieve a customer by primary key.

        Returns ``None`` for non-existent or invalid IDs (e.g. malformed UUID).
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Customer.objects.filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        """List customers with optional Django ORM look-ups, newest first."""
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset.order_by("-created_at", "-id"))

    def search(self, term: Optional[str] = None) -> List[Customer]:
        queryset = self._base_queryset()
        term = (term or "").strip()
        if term:
            condition = Q()
            for field in SEARCH_FIELDS:
                condition |= Q(**{f"{field}__icontains": term})
            queryset = queryset.filter(condition)
        return list(queryset.order_by("-created_at", "-id"))

    def save(self, entity: Customer) -> Customer:
        """Persist (create or update) a customer."""
        is_new = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), is_new=is_new)
        return entity

    def delete(self, id: str) -> bool:
        """Physically delete a customer row.

        Orders must already be gone: the ``orders`` FK is PROTECT, so a
        premature delete raises ``ProtectedError`` inside the caller's
        transaction.
        """
        try:
            deleted, _ = Customer.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("customer.row_deleted", customer_id=str(id))
        return bool(deleted)
