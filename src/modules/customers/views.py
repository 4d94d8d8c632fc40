"""Customer API views.

Exposes the ``CustomerService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes;
the view never swallows generic exceptions.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import (
    Conflict,
    StorageFailure,
    error_response,
    validation_failed_from_pydantic,
    validation_failed_from_serializer,
)
from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
from modules.customers.exceptions import CustomerNotFound
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import (
    CreateCustomerSerializer,
    CustomerSerializer,
    UpdateCustomerSerializer,
)
from modules.customers.services import CustomerService
from modules.identity.context import resolve_caller
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService


class CustomerViewSet(GenericViewSet):
    """ViewSet for Customer CRUD operations.

    Uses ``CustomerService`` with ``CustomerDjangoRepository`` (DIP).
    All ORM access goes through the service/repository layer.
    """

    serializer_class = CustomerSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        customer_repository = CustomerDjangoRepository()
        self._service = CustomerService(
            repository=customer_repository,
            order_service=OrderService(
                order_repository=OrderDjangoRepository(),
                customer_repository=customer_repository,
            ),
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/customers/?search="""
        customers = self._service.list_customers(request.query_params.get("search"))
        page = self.paginate_queryset(customers)
        serializer = CustomerSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        try:
            customer = self._service.get_customer(pk)
        except CustomerNotFound as exc:
            return error_response(exc)
        return Response(CustomerSerializer(customer).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        serializer = CreateCustomerSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = CreateCustomerDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))

        caller = resolve_caller(request.user)
        try:
            customer = self._service.create_customer(dto, caller_id=caller.user_id)
        except StorageFailure as exc:
            return error_response(exc)

        out = CustomerSerializer(self._service.get_customer(str(customer.id)))
        return Response(out.data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}/"""
        serializer = UpdateCustomerSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = UpdateCustomerDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))

        try:
            customer = self._service.update_customer(pk, dto)
        except (CustomerNotFound, StorageFailure) as exc:
            return error_response(exc)

        return Response(CustomerSerializer(customer).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/customers/{pk}/ (treated as a partial update)"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/

        Irreversible: removes the customer's orders and their history too.
        """
        try:
            self._service.delete_customer(pk)
        except (CustomerNotFound, Conflict, StorageFailure) as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
