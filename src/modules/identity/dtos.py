"""User-management DTOs for the Service Layer.

- ``CreateUserDTO``: a new login (email + password) and its role.
- ``UpdateUserDTO``: partial update of email, role or the active flag;
  only explicitly supplied fields are applied (``model_fields_set``).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 8


def _normalise_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RoleEnum(StrEnum):
    """Framework-agnostic mirror of ``constants.Role``."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class CreateUserDTO(BaseModel):
    """Immutable DTO for user creation requests."""

    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    role: RoleEnum = RoleEnum.EMPLOYEE

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v: Any) -> Any:
        return _normalise_email(v)


class UpdateUserDTO(BaseModel):
    """Immutable DTO for partial user updates."""

    model_config = ConfigDict(frozen=True)

    email: Optional[EmailStr] = None
    role: Optional[RoleEnum] = None
    is_active: Optional[bool] = None

    @field_validator("email", "role", "is_active", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("This field may not be null.")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v: Any) -> Any:
        return _normalise_email(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(include=self.model_fields_set, mode="json")
