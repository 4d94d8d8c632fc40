"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Look-ups
return ``None`` for missing or malformed ids; the Service Layer decides
how to translate a missing entity.

Tracking-number uniqueness is enforced by the ``UNIQUE`` constraint: each
insert attempt runs in its own savepoint so a collision rolls back only
that attempt and the caller's transaction stays usable.

Deletes are bulk ``DELETE ... WHERE`` statements issued history first;
the PROTECT foreign keys make storage reject any other order.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from modules.core.periods import Period, period_start
from modules.orders.exceptions import TrackingNumberConflict
from modules.orders.models import Order, OrderHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (
    "tracking_number",
    "product_name",
    "customer__first_name",
    "customer__last_name",
)
CREATOR_SEARCH_FIELDS = ("created_by__username", "created_by__email")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _base_queryset(self) -> QuerySet[Order]:
        return Order.objects.select_related("customer", "created_by")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        order: Order,
        generate_tracking_number: Callable[[], str],
        max_attempts: int,
    ) -> Order:
        for attempt in range(1, max_attempts + 1):
            candidate = generate_tracking_number()
            if Order.objects.filter(tracking_number=candidate).exists():
                logger.warning(
                    "order.tracking_number_collision",
                    tracking_number=candidate,
                    attempt=attempt,
                )
                continue

            order.tracking_number = candidate
            try:
                with transaction.atomic():
                    order.save(force_insert=True)
            except IntegrityError:
                # Lost a race for the same number; anything else is a real error.
                if not Order.objects.filter(tracking_number=candidate).exists():
                    raise
                logger.warning(
                    "order.tracking_number_collision",
                    tracking_number=candidate,
                    attempt=attempt,
                )
                continue

            logger.info(
                "order.inserted",
                order_id=str(order.id),
                tracking_number=candidate,
                attempts=attempt,
            )
            return order

        logger.error("order.tracking_number_exhausted", attempts=max_attempts)
        raise TrackingNumberConflict(
            f"Could not assign a unique tracking number after {max_attempts} attempts."
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its customer and creator (single JOIN)."""
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return (
                Order.objects.select_for_update()
                .select_related("customer", "created_by")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_tracking_number(self, tracking_number: str) -> Optional[Order]:
        return self._base_queryset().filter(tracking_number=tracking_number).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional Django ORM look-ups, newest first."""
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset.order_by("-created_at", "-id"))

    def query(
        self, filters, created_by=None, search_creator=False, limit=None
    ) -> List[Order]:
        queryset = self._base_queryset()

        if created_by is not None:
            queryset = queryset.filter(created_by_id=created_by)
        if filters.status:
            queryset = queryset.filter(status=filters.status)
        if filters.customer_id:
            queryset = queryset.filter(customer_id=filters.customer_id)
        if filters.start_date:
            queryset = queryset.filter(created_at__date__gte=filters.start_date)
        if filters.end_date:
            queryset = queryset.filter(created_at__date__lte=filters.end_date)
        if filters.date and filters.date != Period.ALL:
            queryset = queryset.filter(created_at__gte=period_start(filters.date))
        # NULL never satisfies a comparison, so unpriced orders drop out.
        if filters.min_price is not None:
            queryset = queryset.filter(total_price__gte=filters.min_price)
        if filters.max_price is not None:
            queryset = queryset.filter(total_price__lte=filters.max_price)
        if filters.advance_paid is not None:
            queryset = queryset.filter(advance_paid=filters.advance_paid)
        if filters.search:
            fields = SEARCH_FIELDS + (CREATOR_SEARCH_FIELDS if search_creator else ())
            condition = Q()
            for field in fields:
                condition |= Q(**{f"{field}__icontains": filters.search})
            queryset = queryset.filter(condition)

        queryset = queryset.order_by("-created_at", "-id")
        if limit is not None:
            queryset = queryset[:limit]
        return list(queryset)

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist changes to an existing order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    def delete(self, id: str) -> bool:
        """Physically delete an order and its history entries."""
        try:
            history_deleted, _ = OrderHistory.objects.filter(order_id=id).delete()
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info(
                "order.row_deleted",
                order_id=str(id),
                history_deleted=history_deleted,
            )
        return bool(deleted)

    def delete_by_customer(self, customer_id: str) -> List[UUID]:
        order_ids = list(
            Order.objects.filter(customer_id=customer_id).values_list("id", flat=True)
        )
        if not order_ids:
            return []
        history_deleted, _ = OrderHistory.objects.filter(
            order_id__in=order_ids
        ).delete()
        deleted, _ = Order.objects.filter(id__in=order_ids).delete()
        logger.info(
            "order.bulk_deleted",
            customer_id=str(customer_id),
            orders_deleted=deleted,
            history_deleted=history_deleted,
        )
        return order_ids

    # ------------------------------------------------------------------
    # History trail
    # ------------------------------------------------------------------

    def add_history(self, order_id, status, comment, created_by) -> OrderHistory:
        entry = OrderHistory.objects.create(
            order_id=order_id,
            status=status,
            comment=comment,
            created_by_id=created_by,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            status=status,
            history_id=str(entry.id),
        )
        return entry

    def list_history(self, order_id: str) -> List[OrderHistory]:
        return list(
            OrderHistory.objects.select_related("created_by")
            .filter(order_id=order_id)
            .order_by("-created_at", "-id")
        )
