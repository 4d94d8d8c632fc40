"""User-management DRF serializers."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers

from modules.identity.constants import Role
from modules.identity.context import role_of
from modules.identity.dtos import PASSWORD_MIN_LENGTH

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateUserSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=150)
    password = serializers.CharField(
        min_length=PASSWORD_MIN_LENGTH, write_only=True, trim_whitespace=False
    )
    role = serializers.ChoiceField(choices=Role.choices, default=Role.EMPLOYEE)


class UpdateUserSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=150, required=False)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class UserSerializer(serializers.ModelSerializer):
    """A login and the role the Identity Context assigns it."""

    role = serializers.SerializerMethodField()

    class Meta:
        model = get_user_model()
        fields = ["id", "username", "email", "role", "is_active", "date_joined"]
        read_only_fields = fields

    def get_role(self, obj: Any) -> str:
        return role_of(obj)
