"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer and the Service layer.  DTOs are
immutable (``frozen=True``) and cap names and phone numbers at their
column length (``EmailStr`` already refuses addresses over 254
characters), so over-long input is a validation error, never a storage
one.

- ``CreateCustomerDTO``: input for customer creation.
- ``UpdateCustomerDTO``: partial update; only explicitly supplied fields
  are applied (``model_fields_set``).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

NAME_MAX_LENGTH = 150
PHONE_MAX_LENGTH = 30


def _required_name(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("This field is required.")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CreateCustomerDTO(BaseModel):
    """Immutable DTO for customer creation requests."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str = Field(max_length=NAME_MAX_LENGTH)
    last_name: str = Field(max_length=NAME_MAX_LENGTH)
    email: Optional[EmailStr] = None
    phone: str = Field(default="", max_length=PHONE_MAX_LENGTH)
    address: str = ""

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def names_not_blank(cls, v: Any) -> Any:
        return _required_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, v: Any) -> Any:
        return _blank_to_none(v)


class UpdateCustomerDTO(BaseModel):
    """Immutable DTO for partial customer updates.

    Names may be omitted but never blanked; ``email`` may be cleared by
    sending ``null`` or an empty string.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    last_name: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=PHONE_MAX_LENGTH)
    address: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def names_not_blank(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("This field is required.")
        return _required_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually sent, ready for the model."""
        data = self.model_dump(include=self.model_fields_set)
        if "email" in data and data["email"] is None:
            data["email"] = ""
        for field in ("phone", "address"):
            if field in data and data[field] is None:
                data[field] = ""
        return data

