"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer and the Service layer.  DTOs are
immutable (``frozen=True``).

- ``CreateOrderDTO``: input for order creation.
- ``UpdateOrderDTO``: partial update; ``model_fields_set`` tells which
  fields the caller actually sent (and therefore which role rules apply).
- ``UpdateStatusDTO``: input for a status change + history comment.
- ``OrderListFilters``: predicates accepted by ``OrderService.list_orders``.
- ``VisibleOrder`` / ``VisibleOrders``: read results carrying the
  financial-visibility flag the ledger used.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.core.periods import Period
from modules.orders.constants import FINANCIAL_FIELDS

if TYPE_CHECKING:
    from modules.orders.models import Order


class OrderStatusEnum(StrEnum):
    """Framework-agnostic mirror of ``constants.OrderStatus``."""

    PENDING_PRICE = "pending_price"
    PENDING_ADVANCE = "pending_advance"
    ADVANCE_PAID = "advance_paid"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def _strip_required(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("This field is required.")
    return value


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Pricing and advance fields are not accepted here: a new order always
    starts as ``pending_price`` without price and with ``advance_paid=False``.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    product_name: str
    quantity: int = 1
    technical_details: str = ""
    comments: str = ""

    @field_validator("product_name", mode="before")
    @classmethod
    def product_name_required(cls, v: Any) -> Any:
        return _strip_required(v)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("technical_details", "comments", mode="before")
    @classmethod
    def none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for partial order updates.

    ``total_price`` and ``advance_percentage`` may be cleared with ``null``;
    ``advance_paid`` is a plain boolean.
    """

    model_config = ConfigDict(frozen=True)

    product_name: Optional[str] = None
    quantity: Optional[int] = None
    technical_details: Optional[str] = None
    comments: Optional[str] = None
    total_price: Optional[Annotated[Decimal, Field(max_digits=12, decimal_places=2)]] = None
    advance_percentage: Optional[int] = None
    advance_paid: Optional[bool] = None

    @field_validator("product_name", mode="before")
    @classmethod
    def product_name_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("This field is required.")
        return _strip_required(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("This field is required.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("total_price")
    @classmethod
    def price_not_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Price must not be negative.")
        return v

    @field_validator("advance_percentage")
    @classmethod
    def percentage_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= 100:
            raise ValueError("Advance percentage must be between 0 and 100.")
        return v

    @field_validator("advance_paid", mode="before")
    @classmethod
    def advance_paid_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("This field must be true or false.")
        return v

    @model_validator(mode="after")
    def not_empty(self) -> UpdateOrderDTO:
        if not self.model_fields_set:
            raise ValueError("No updatable field supplied.")
        return self

    @property
    def financial_fields(self) -> set[str]:
        """Role-gated fields present in this update."""
        return set(self.model_fields_set) & FINANCIAL_FIELDS

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually sent, ready for the model."""
        data = self.model_dump(include=self.model_fields_set)
        for field in ("technical_details", "comments"):
            if field in data and data[field] is None:
                data[field] = ""
        return data


class UpdateStatusDTO(BaseModel):
    """Immutable DTO for a status change request."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatusEnum
    comment: Optional[str] = None

    @field_validator("comment", mode="before")
    @classmethod
    def blank_comment_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OrderListFilters(BaseModel):
    """Predicates for ``ListOrders``; every field is optional.

    Price bounds are inclusive and never match an order without a price.
    ``date`` is a preset window; ``start_date`` / ``end_date`` are inclusive
    calendar dates.
    """

    model_config = ConfigDict(frozen=True)

    status: Optional[OrderStatusEnum] = None
    customer_id: Optional[UUID] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    date: Optional[Period] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    advance_paid: Optional[bool] = None
    search: Optional[str] = None

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


# ---------------------------------------------------------------------------
# Read results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VisibleOrder:
    """An order plus the visibility flag callers must use to redact it."""

    order: Order
    financials_visible: bool


@dataclass(frozen=True)
class VisibleOrders:
    """A list of orders plus the visibility flag callers must use."""

    orders: List[Order]
    financials_visible: bool
