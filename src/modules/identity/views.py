"""Identity API views.

``MeView`` tells any authenticated caller which context the core will use.
``UserViewSet`` lets administrators manage logins and roles through
``UserService``; domain exceptions are translated into HTTP responses.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import (
    DomainError,
    error_response,
    validation_failed_from_pydantic,
    validation_failed_from_serializer,
)
from modules.identity.context import resolve_caller
from modules.identity.dtos import CreateUserDTO, UpdateUserDTO
from modules.identity.permissions import can_manage_users
from modules.identity.repositories.django_repository import UserDjangoRepository
from modules.identity.serializers import (
    CreateUserSerializer,
    UpdateUserSerializer,
    UserSerializer,
)
from modules.identity.services import UserService


class MeView(APIView):
    """Return the caller context the core will use for this token.

    * No token  -> 401
    * Valid JWT -> 200 with ``user_id``, ``role``, ``financials_visible``
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        caller = resolve_caller(request.user)
        return Response(
            {
                "user_id": caller.user_id,
                "username": request.user.get_username(),
                "role": caller.role,
                "financials_visible": caller.financials_visible,
            }
        )


class IsUserManager(BasePermission):
    message = "Only administrators may manage users."

    def has_permission(self, request: Request, view: APIView) -> bool:
        return can_manage_users(resolve_caller(request.user).role)


class UserViewSet(GenericViewSet):
    """Admin-only account and role administration.

    ``DELETE`` removes the login, or deactivates it when the user authored
    records; either way the response is ``204``.
    """

    permission_classes = [IsAuthenticated, IsUserManager]
    serializer_class = UserSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(repository=UserDjangoRepository())

    def get_queryset(self):
        # Schema generation only; reads go through the service.
        return get_user_model().objects.none()

    def list(self, request: Request) -> Response:
        """GET /api/v1/users/"""
        users = self._service.list_users(resolve_caller(request.user))
        page = self.paginate_queryset(users)
        return self.get_paginated_response(UserSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/users/{pk}/"""
        try:
            user = self._service.get_user(pk, resolve_caller(request.user))
        except DomainError as exc:
            return error_response(exc)
        return Response(UserSerializer(user).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/users/  body: ``{email, password, role?}``"""
        serializer = CreateUserSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = CreateUserDTO(**serializer.validated_data)
            user = self._service.create_user(dto, resolve_caller(request.user))
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))
        except DomainError as exc:
            return error_response(exc)

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/users/{pk}/  body: any of ``{email, role, is_active}``"""
        serializer = UpdateUserSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = UpdateUserDTO(**serializer.validated_data)
            user = self._service.update_user(pk, dto, resolve_caller(request.user))
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))
        except DomainError as exc:
            return error_response(exc)

        return Response(UserSerializer(user).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/users/{pk}/ (treated as a partial update)"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/users/{pk}/"""
        try:
            self._service.delete_user(pk, resolve_caller(request.user))
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
