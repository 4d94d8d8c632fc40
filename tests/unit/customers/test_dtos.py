"""Unit tests for Customer DTOs (Pydantic v2)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO

pytestmark = pytest.mark.unit


class TestCreateCustomerDTO:
    def test_minimal_customer(self):
        dto = CreateCustomerDTO(first_name=" Léa ", last_name="Dubois")
        assert dto.first_name == "Léa"
        assert dto.email is None
        assert dto.phone == ""

    @pytest.mark.parametrize("field", ["first_name", "last_name"])
    def test_blank_name_rejected(self, field):
        data = {"first_name": "Léa", "last_name": "Dubois", field: "  "}
        with pytest.raises(ValidationError) as excinfo:
            CreateCustomerDTO(**data)
        assert excinfo.value.errors()[0]["loc"] == (field,)

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            CreateCustomerDTO(first_name="A", last_name="B", email="not-an-email")

    def test_blank_email_is_absent(self):
        assert CreateCustomerDTO(first_name="A", last_name="B", email="").email is None

    @pytest.mark.parametrize(
        "field, value",
        [("first_name", "x" * 151), ("last_name", "y" * 151), ("phone", "0" * 31)],
    )
    def test_over_long_fields_rejected(self, field, value):
        data = {"first_name": "Léa", "last_name": "Dubois", field: value}
        with pytest.raises(ValidationError) as excinfo:
            CreateCustomerDTO(**data)
        assert excinfo.value.errors()[0]["loc"] == (field,)

    def test_names_at_column_length_accepted(self):
        dto = CreateCustomerDTO(first_name="x" * 150, last_name="y" * 150, phone="0" * 30)
        assert len(dto.first_name) == 150


class TestUpdateCustomerDTO:
    def test_only_sent_fields_change(self):
        assert UpdateCustomerDTO(phone="0600000000").changes() == {
            "phone": "0600000000"
        }

    def test_email_can_be_cleared(self):
        assert UpdateCustomerDTO(email=None).changes() == {"email": ""}

    def test_name_cannot_be_blanked(self):
        with pytest.raises(ValidationError):
            UpdateCustomerDTO(last_name="")

    def test_name_cannot_be_nulled(self):
        with pytest.raises(ValidationError):
            UpdateCustomerDTO(first_name=None)

    def test_over_long_phone_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            UpdateCustomerDTO(phone="+33 " + "6" * 40)
        assert excinfo.value.errors()[0]["loc"] == ("phone",)
