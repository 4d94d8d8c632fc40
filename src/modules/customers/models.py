"""Customer model.

Business rules implemented:
- First and last name are required, non-empty and at most 150 characters
  (input serializers + service DTOs).
- Email, phone and address are optional.
- ``created_by`` records the authenticated caller who registered the
  customer; any authenticated caller may edit customer fields.
- Deletion is physical and cascades through the Order Ledger
  (history -> orders -> customer), orchestrated by ``CustomerService``.
  The ``orders`` FK uses PROTECT so storage refuses a partial cascade.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Customer(BaseModel):
    """Customer record owned by the Customer Registry."""

    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    email = models.EmailField(max_length=254, blank=True, default="")
    phone = models.CharField(max_length=30, blank=True, default="")
    address = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="customers_created",
    )

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["last_name", "first_name"], name="customers_name_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name
