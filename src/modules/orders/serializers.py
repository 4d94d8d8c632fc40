"""Order DRF serializers for API input/output.

The serializers operate at the Interface layer (API Views).  Business
logic lives in the Service Layer, which receives Pydantic DTOs from
``dtos.py``.

Output serializers read ``financials_visible`` from their context and drop
the pricing / advance fields when it is ``False``; the flag itself is
always part of the payload so clients can tell "hidden" from "unset".
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers

from modules.customers.serializers import CustomerSummarySerializer
from modules.identity.permissions import can_mutate_financials
from modules.orders.constants import FINANCIAL_FIELDS, OrderStatus
from modules.orders.exceptions import FinancialFieldsForbidden
from modules.orders.models import Order, OrderHistory

REDACTED_FIELDS = (*sorted(FINANCIAL_FIELDS), "advance_amount")

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload.

    Pricing fields are not accepted at creation.
    """

    customer_id = serializers.UUIDField()
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1, default=1)
    technical_details = serializers.CharField(
        required=False, default="", allow_blank=True, allow_null=True
    )
    comments = serializers.CharField(
        required=False, default="", allow_blank=True, allow_null=True
    )


class UpdateOrderSerializer(serializers.Serializer):
    """Validates a partial order update.

    Expects ``role`` in its context: role-gated fields sent by a caller
    who may not change them are rejected here, before reaching the ledger
    (which checks again).
    """

    product_name = serializers.CharField(max_length=255, required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    technical_details = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    total_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )
    advance_percentage = serializers.IntegerField(
        min_value=0, max_value=100, required=False, allow_null=True
    )
    advance_paid = serializers.BooleanField(required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        gated = FINANCIAL_FIELDS & attrs.keys()
        if gated and not can_mutate_financials(self.context.get("role")):
            raise FinancialFieldsForbidden(gated)
        return attrs


class UpdateStatusSerializer(serializers.Serializer):
    """Validates ``POST /orders/{id}/status`` (body: ``{status, comment?}``)."""

    status = serializers.ChoiceField(choices=OrderStatus.choices)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = get_user_model()
        fields = ["id", "username", "email"]
        read_only_fields = fields


class FinancialRedactionMixin:
    """Drops role-gated fields unless ``financials_visible`` is in context."""

    def to_representation(self, instance: Order) -> dict[str, Any]:
        data = super().to_representation(instance)
        visible = bool(self.context.get("financials_visible", False))
        if not visible:
            for field in REDACTED_FIELDS:
                data.pop(field, None)
        data["financials_visible"] = visible
        return data


class OrderSerializer(FinancialRedactionMixin, serializers.ModelSerializer):
    """Order detail with nested customer and creator summaries."""

    customer = CustomerSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    advance_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )
    progress_index = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "tracking_number",
            "status",
            "status_display",
            "progress_index",
            "product_name",
            "quantity",
            "technical_details",
            "comments",
            "total_price",
            "advance_percentage",
            "advance_paid",
            "advance_amount",
            "customer",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderListSerializer(FinancialRedactionMixin, serializers.ModelSerializer):
    """Lightweight serializer for the order list."""

    customer = CustomerSummarySerializer(read_only=True)
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)
    advance_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = Order
        fields = [
            "id",
            "tracking_number",
            "status",
            "product_name",
            "quantity",
            "total_price",
            "advance_percentage",
            "advance_paid",
            "advance_amount",
            "customer",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PublicTrackingSerializer(FinancialRedactionMixin, serializers.ModelSerializer):
    """What the public tracking page may see: no ids, owners or notes."""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    progress_index = serializers.IntegerField(read_only=True, allow_null=True)
    advance_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = Order
        fields = [
            "tracking_number",
            "status",
            "status_display",
            "progress_index",
            "product_name",
            "quantity",
            "total_price",
            "advance_percentage",
            "advance_paid",
            "advance_amount",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderHistorySerializer(serializers.ModelSerializer):
    """Read serializer for history trail entries."""

    order_id = serializers.UUIDField(read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = OrderHistory
        fields = ["id", "order_id", "status", "comment", "created_by", "created_at"]
        read_only_fields = fields
