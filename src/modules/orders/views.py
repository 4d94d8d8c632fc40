"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into the HTTP status codes
of their kind; the view never swallows generic exceptions.

The caller's ``(user_id, role)`` is resolved once per request and passed
explicitly to the service.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import (
    DomainError,
    error_response,
    validation_failed_from_pydantic,
    validation_failed_from_serializer,
)
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.identity.context import resolve_caller
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO, UpdateStatusDTO
from modules.orders.exceptions import OrderNotFound
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderHistorySerializer,
    OrderListSerializer,
    OrderSerializer,
    PublicTrackingSerializer,
    UpdateOrderSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = OrderSerializer
    filterset_class = OrderFilter

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
        )

    def get_queryset(self):
        # Schema generation only; reads go through the service.
        return Order.objects.none()

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "history"}:
            throttle_scope = "order_listing"
        elif self.action == "by_tracking":
            throttle_scope = "tracking_lookup"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = CreateOrderDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))

        caller = resolve_caller(request.user)
        try:
            order = self._service.create_order(dto, caller_id=caller.user_id)
        except DomainError as exc:
            return error_response(exc)

        out = OrderSerializer(
            order, context={"financials_visible": caller.financials_visible}
        )
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filters: ``status``, ``customer``, ``start_date``, ``end_date``,
        ``date`` (preset), ``min_price``, ``max_price``, ``advance_paid``,
        ``search``.  Employees only see the orders they created.
        """
        caller = resolve_caller(request.user)
        try:
            filters = OrderFilter(
                data=request.query_params, queryset=self.get_queryset()
            ).to_filters()
            result = self._service.list_orders(
                filters, caller_role=caller.role, caller_id=caller.user_id
            )
        except DomainError as exc:
            return error_response(exc)

        page = self.paginate_queryset(result.orders)
        serializer = OrderListSerializer(
            page, many=True, context={"financials_visible": result.financials_visible}
        )
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            result = self._service.get_order(pk, resolve_caller(request.user))
        except OrderNotFound as exc:
            return error_response(exc)
        serializer = OrderSerializer(
            result.order, context={"financials_visible": result.financials_visible}
        )
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Update / Destroy
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Pricing / advance fields require the admin role; a payload mixing
        them with other fields is rejected as a whole.
        """
        caller = resolve_caller(request.user)
        serializer = UpdateOrderSerializer(
            data=request.data, partial=True, context={"role": caller.role}
        )
        try:
            if not serializer.is_valid():
                return error_response(
                    validation_failed_from_serializer(serializer.errors)
                )
            dto = UpdateOrderDTO(**serializer.validated_data)
            order = self._service.update_order(pk, dto, caller)
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))
        except DomainError as exc:
            return error_response(exc)

        out = OrderSerializer(
            order, context={"financials_visible": caller.financials_visible}
        )
        return Response(out.data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/ (treated as a partial update)"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (removes the history trail too)"""
        try:
            self._service.delete_order(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Status / History
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/status/  body: ``{status, comment?}``"""
        serializer = UpdateStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(validation_failed_from_serializer(serializer.errors))

        try:
            dto = UpdateStatusDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return error_response(validation_failed_from_pydantic(exc))

        caller = resolve_caller(request.user)
        try:
            order = self._service.update_status(
                pk, dto.status.value, dto.comment, caller_id=caller.user_id
            )
        except DomainError as exc:
            return error_response(exc)

        out = OrderSerializer(
            order, context={"financials_visible": caller.financials_visible}
        )
        return Response(out.data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/ (most recent first, unpaginated)"""
        try:
            entries = self._service.list_history(pk)
        except OrderNotFound as exc:
            return error_response(exc)
        return Response(OrderHistorySerializer(entries, many=True).data)

    # ------------------------------------------------------------------
    # Public tracking
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-tracking/(?P<tracking_number>[^/.]+)",
        authentication_classes=[],
        permission_classes=[AllowAny],
    )
    def by_tracking(self, request: Request, tracking_number: str = "") -> Response:
        """GET /api/v1/orders/by-tracking/{tracking_number}/ (no authentication)

        Unknown and hidden orders both answer 404.
        """
        try:
            result = self._service.get_by_tracking_number(tracking_number)
        except OrderNotFound:
            return error_response(OrderNotFound("Order not found."))
        serializer = PublicTrackingSerializer(
            result.order, context={"financials_visible": result.financials_visible}
        )
        return Response(serializer.data)
