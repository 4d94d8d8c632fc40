"""Unit tests for OrderService with mocked dependencies."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.identity.constants import Role
from modules.identity.context import CallerContext
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, OrderListFilters, UpdateOrderDTO
from modules.orders.events import OrderCreated, OrderDeleted, OrderStatusChanged
from modules.orders.exceptions import (
    CustomerNotFound,
    FinancialFieldsForbidden,
    InvalidOrderData,
    OrderNotFound,
)
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit

ADMIN = CallerContext(user_id=1, role=Role.ADMIN)
EMPLOYEE = CallerContext(user_id=2, role=Role.EMPLOYEE)


def _stub_order(**overrides):
    fields = {
        "id": uuid4(),
        "tracking_number": "LMITEST123",
        "status": OrderStatus.PENDING_PRICE,
        "total_price": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture()
def order_repo():
    return MagicMock()


@pytest.fixture()
def customer_repo():
    repo = MagicMock()
    repo.exists.return_value = True
    return repo


@pytest.fixture()
def bus():
    return MagicMock()


@pytest.fixture()
def service(order_repo, customer_repo, bus):
    return OrderService(
        order_repository=order_repo,
        customer_repository=customer_repo,
        tracking_generator=lambda: "LMIFIXED000",
        max_attempts=3,
        record_price_changes=False,
        bus=bus,
    )


class TestCreateOrder:
    def test_new_order_starts_pending_price(self, service, order_repo, bus):
        order_repo.create.side_effect = lambda order, generate, attempts: order
        order_repo.get_by_id.return_value = None

        order = service.create_order(
            CreateOrderDTO(customer_id=uuid4(), product_name="Caisse", quantity=2),
            caller_id=9,
        )

        assert order.status == OrderStatus.PENDING_PRICE
        assert order.advance_paid is False
        assert order.total_price is None
        assert order.created_by_id == 9
        _, generate, attempts = order_repo.create.call_args.args
        assert generate() == "LMIFIXED000"
        assert attempts == 3
        assert isinstance(bus.publish_on_commit.call_args.args[0], OrderCreated)

    def test_unknown_customer(self, service, customer_repo, order_repo):
        customer_repo.exists.return_value = False

        with pytest.raises(CustomerNotFound) as excinfo:
            service.create_order(
                CreateOrderDTO(customer_id=uuid4(), product_name="Caisse"), caller_id=9
            )

        assert excinfo.value.field == "customer_id"
        order_repo.create.assert_not_called()


class TestUpdateOrder:
    def test_employee_financial_update_rejected_before_any_read(
        self, service, order_repo
    ):
        dto = UpdateOrderDTO(product_name="Autre", total_price=Decimal("100.00"))

        with pytest.raises(FinancialFieldsForbidden) as excinfo:
            service.update_order(str(uuid4()), dto, EMPLOYEE)

        assert excinfo.value.fields == ["total_price"]
        order_repo.get_for_update.assert_not_called()
        order_repo.save.assert_not_called()

    def test_employee_may_update_general_fields(self, service, order_repo):
        order = _stub_order()
        order_repo.get_for_update.return_value = order
        order_repo.save.side_effect = lambda entity: entity
        order_repo.get_by_id.return_value = order

        result = service.update_order(
            str(order.id), UpdateOrderDTO(quantity=5, comments=None), EMPLOYEE
        )

        assert result.quantity == 5
        assert result.comments == ""

    def test_admin_sets_price(self, service, order_repo):
        order = _stub_order()
        order_repo.get_for_update.return_value = order
        order_repo.save.side_effect = lambda entity: entity
        order_repo.get_by_id.return_value = order

        service.update_order(
            str(order.id),
            UpdateOrderDTO(total_price=Decimal("250.00"), advance_percentage=30),
            ADMIN,
        )

        assert order.total_price == Decimal("250.00")
        assert order.advance_percentage == 30
        order_repo.add_history.assert_not_called()

    def test_price_change_recorded_when_enabled(self, order_repo, customer_repo, bus):
        service = OrderService(
            order_repository=order_repo,
            customer_repository=customer_repo,
            record_price_changes=True,
            bus=bus,
        )
        order = _stub_order(status=OrderStatus.PENDING_ADVANCE)
        order_repo.get_for_update.return_value = order
        order_repo.save.side_effect = lambda entity: entity

        service.update_order(
            str(order.id), UpdateOrderDTO(total_price=Decimal("99.5")), ADMIN
        )

        order_repo.add_history.assert_called_once_with(
            str(order.id), OrderStatus.PENDING_ADVANCE, "Price updated: 99.50", 1
        )

    def test_missing_order(self, service, order_repo):
        order_repo.get_for_update.return_value = None
        with pytest.raises(OrderNotFound):
            service.update_order(str(uuid4()), UpdateOrderDTO(quantity=2), ADMIN)


class TestUpdateStatus:
    def test_unknown_status_rejected_without_touching_storage(
        self, service, order_repo
    ):
        with pytest.raises(InvalidOrderData) as excinfo:
            service.update_status(str(uuid4()), "lost", None, caller_id=1)

        assert excinfo.value.field == "status"
        order_repo.get_for_update.assert_not_called()

    def test_status_change_appends_history(self, service, order_repo, bus):
        order = _stub_order()
        order_repo.get_for_update.return_value = order
        order_repo.get_by_id.return_value = order

        service.update_status(
            str(order.id), OrderStatus.PENDING_ADVANCE, "Prix envoyé", caller_id=1
        )

        assert order.status == OrderStatus.PENDING_ADVANCE
        order_repo.add_history.assert_called_once_with(
            str(order.id), OrderStatus.PENDING_ADVANCE, "Prix envoyé", 1
        )
        event = bus.publish_on_commit.call_args.args[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.old_status == OrderStatus.PENDING_PRICE

    def test_any_status_may_follow_any_other(self, service, order_repo):
        order = _stub_order(status=OrderStatus.DELIVERED)
        order_repo.get_for_update.return_value = order

        service.update_status(str(order.id), OrderStatus.PENDING_PRICE, None, 1)

        assert order.status == OrderStatus.PENDING_PRICE

    def test_missing_order(self, service, order_repo):
        order_repo.get_for_update.return_value = None
        with pytest.raises(OrderNotFound):
            service.update_status(str(uuid4()), OrderStatus.READY, None, 1)
        order_repo.add_history.assert_not_called()


class TestDeleteOrders:
    def test_missing_order(self, service, order_repo):
        order_repo.delete.return_value = False
        with pytest.raises(OrderNotFound):
            service.delete_order(str(uuid4()))

    def test_delete_publishes_event(self, service, order_repo, bus):
        order_repo.delete.return_value = True
        order_id = uuid4()

        service.delete_order(str(order_id))

        event = bus.publish_on_commit.call_args.args[0]
        assert isinstance(event, OrderDeleted)
        assert event.aggregate_id == order_id

    def test_delete_by_customer_counts_removed(self, service, order_repo, bus):
        order_repo.delete_by_customer.return_value = [uuid4(), uuid4()]

        assert service.delete_orders_by_customer(str(uuid4())) == 2
        assert bus.publish_on_commit.call_count == 2


class TestQueries:
    def test_admin_lists_everything_with_financials(self, service, order_repo):
        order_repo.query.return_value = []

        result = service.list_orders(OrderListFilters(), Role.ADMIN, caller_id=1)

        assert result.financials_visible
        assert order_repo.query.call_args.kwargs == {
            "created_by": None,
            "search_creator": True,
        }

    def test_employee_lists_own_orders_only(self, service, order_repo):
        order_repo.query.return_value = []

        result = service.list_orders(None, Role.EMPLOYEE, caller_id=2)

        assert not result.financials_visible
        assert order_repo.query.call_args.kwargs == {
            "created_by": 2,
            "search_creator": False,
        }

    def test_anonymous_tracking_lookup_hides_financials(self, service, order_repo):
        order_repo.get_by_tracking_number.return_value = _stub_order()

        result = service.get_by_tracking_number("  LMITEST123 ")

        order_repo.get_by_tracking_number.assert_called_once_with("LMITEST123")
        assert result.financials_visible is False

    def test_blank_tracking_number_is_not_found(self, service, order_repo):
        with pytest.raises(OrderNotFound):
            service.get_by_tracking_number("   ")
        order_repo.get_by_tracking_number.assert_not_called()

    def test_history_of_missing_order(self, service, order_repo):
        order_repo.get_by_id.return_value = None
        with pytest.raises(OrderNotFound):
            service.list_history(str(uuid4()))

    def test_get_order_carries_visibility(self, service, order_repo):
        order_repo.get_by_id.return_value = _stub_order()
        assert service.get_order(str(uuid4()), ADMIN).financials_visible
        assert not service.get_order(str(uuid4()), EMPLOYEE).financials_visible
