"""Order and OrderHistory models.

Business rules implemented:
- ``tracking_number`` is assigned once at creation, globally unique
  (``UNIQUE`` constraint) and never edited afterwards.
- ``customer`` FK uses PROTECT: an order always references a live
  customer; deleting a customer goes through the explicit cascade.
- ``quantity >= 1``, ``total_price >= 0``, ``0 <= advance_percentage <= 100``
  are enforced by check constraints as well as by the DTOs.
- Status may move between any two values; the nominal progression is
  informational (see ``constants.NOMINAL_PROGRESSION``).
- History entries are append-only and owned by their order (PROTECT FK:
  they must be removed before the order, in the same transaction).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    NOMINAL_PROGRESSION,
    TERMINAL_STATES,
    OrderStatus,
)


class Order(BaseModel):
    """Order aggregate root.

    ``tracking_number`` is the externally shared identifier; the UUIDv7
    ``id`` is used for internal references and API look-ups.
    """

    tracking_number: models.CharField = models.CharField(
        max_length=32, unique=True, editable=False
    )
    customer: models.ForeignKey = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING_PRICE,
    )
    product_name: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    technical_details: models.TextField = models.TextField(blank=True, default="")
    comments: models.TextField = models.TextField(blank=True, default="")
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    advance_percentage: models.PositiveSmallIntegerField = (
        models.PositiveSmallIntegerField(
            null=True,
            blank=True,
            validators=[MaxValueValidator(100)],
        )
    )
    advance_paid: models.BooleanField = models.BooleanField(default=False)
    created_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_created",
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["created_by", "-created_at"], name="orders_creator_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="orders_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__isnull=True)
                | models.Q(total_price__gte=0),
                name="orders_total_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(advance_percentage__isnull=True)
                | models.Q(advance_percentage__lte=100),
                name="orders_advance_percentage_range",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def advance_amount(self) -> Optional[Decimal]:
        """``total_price * advance_percentage / 100``; ``None`` if either is unset or zero."""
        if not self.total_price or not self.advance_percentage:
            return None
        amount = self.total_price * Decimal(self.advance_percentage) / Decimal(100)
        return amount.quantize(Decimal("0.01"))

    @property
    def progress_index(self) -> Optional[int]:
        """Position in the nominal progression; ``None`` when cancelled."""
        try:
            return NOMINAL_PROGRESSION.index(self.status)
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.tracking_number} ({self.status})"


class OrderHistory(BaseModel):
    """Append-only audit trail entry: the status recorded at one point in time.

    Never updated; deleted only as part of deleting its order.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="history",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    comment: models.TextField = models.TextField(  # noqa: DJ01
        null=True,
        blank=True,
        default=None,
    )
    created_by: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="order_history_entries",
    )

    class Meta:
        db_table = "order_history"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="order_history_order_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} -> {self.status}"
