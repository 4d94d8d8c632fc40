"""Customer DRF serializers for API input/output.

The serializers operate at the Interface layer (API Views): input
serializers check the request shape and column lengths, then the views
build the Pydantic DTOs from ``dtos.py`` that the Service Layer receives.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.dtos import NAME_MAX_LENGTH, PHONE_MAX_LENGTH
from modules.customers.models import Customer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateCustomerSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=NAME_MAX_LENGTH)
    last_name = serializers.CharField(max_length=NAME_MAX_LENGTH)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(
        max_length=PHONE_MAX_LENGTH, required=False, allow_blank=True
    )
    address = serializers.CharField(required=False, allow_blank=True)


class UpdateCustomerSerializer(serializers.Serializer):
    """Partial update: names may be omitted but not blanked; the optional
    contact fields may be cleared with ``null`` or an empty string."""

    first_name = serializers.CharField(max_length=NAME_MAX_LENGTH, required=False)
    last_name = serializers.CharField(max_length=NAME_MAX_LENGTH, required=False)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(
        max_length=PHONE_MAX_LENGTH, required=False, allow_blank=True, allow_null=True
    )
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CustomerSerializer(serializers.ModelSerializer):
    """Read serializer for the Customer resource."""

    full_name = serializers.CharField(read_only=True)
    email = serializers.SerializerMethodField()
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)
    orders_count = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "address",
            "created_by",
            "orders_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_email(self, obj: Customer) -> str | None:
        return obj.email or None

    def get_orders_count(self, obj: Customer) -> int | None:
        return getattr(obj, "orders_count", None)


class CustomerSummarySerializer(serializers.ModelSerializer):
    """Compact customer representation nested in order payloads."""

    class Meta:
        model = Customer
        fields = ["id", "first_name", "last_name", "email", "phone"]
        read_only_fields = fields
