"""Unit tests for the customer input serializers."""

from __future__ import annotations

import pytest

from modules.customers.serializers import (
    CreateCustomerSerializer,
    UpdateCustomerSerializer,
)

pytestmark = pytest.mark.unit


class TestCreateCustomerSerializer:
    def test_valid_payload(self):
        serializer = CreateCustomerSerializer(
            data={"first_name": "Léa", "last_name": "Dubois", "phone": "0600000000"}
        )
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data["phone"] == "0600000000"

    def test_unknown_fields_are_dropped(self):
        serializer = CreateCustomerSerializer(
            data={"first_name": "Léa", "last_name": "Dubois", "created_by": 99}
        )
        assert serializer.is_valid()
        assert "created_by" not in serializer.validated_data

    @pytest.mark.parametrize(
        "field, value", [("first_name", "x" * 151), ("phone", "0" * 31)]
    )
    def test_column_lengths_enforced(self, field, value):
        data = {"first_name": "Léa", "last_name": "Dubois", field: value}
        serializer = CreateCustomerSerializer(data=data)
        assert not serializer.is_valid()
        assert list(serializer.errors) == [field]


class TestUpdateCustomerSerializer:
    def test_contact_fields_may_be_nulled(self):
        serializer = UpdateCustomerSerializer(
            data={"email": None, "phone": None}, partial=True
        )
        assert serializer.is_valid(), serializer.errors

    def test_names_may_not_be_blanked(self):
        serializer = UpdateCustomerSerializer(data={"last_name": "  "}, partial=True)
        assert not serializer.is_valid()
        assert list(serializer.errors) == ["last_name"]
