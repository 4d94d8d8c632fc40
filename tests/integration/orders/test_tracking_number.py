"""Integration tests for tracking-number assignment against the UNIQUE constraint."""

from __future__ import annotations

import pytest
from django.db.models import QuerySet

from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import TrackingNumberConflict
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

pytestmark = pytest.mark.integration


def _service(numbers, max_attempts=5):
    candidates = iter(numbers)
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        tracking_generator=lambda: next(candidates),
        max_attempts=max_attempts,
    )


class TestTrackingNumberCollisions:
    def test_collision_is_retried(self, make_order, customer, admin_user):
        make_order(tracking_number="LMITAKEN001")
        service = _service(["LMITAKEN001", "LMIFRESH002"])

        order = service.create_order(
            CreateOrderDTO(customer_id=customer.id, product_name="Palette"),
            caller_id=admin_user.pk,
        )

        assert order.tracking_number == "LMIFRESH002"
        assert Order.objects.count() == 2

    def test_budget_exhaustion_is_a_conflict(self, make_order, customer, admin_user):
        make_order(tracking_number="LMITAKEN001")
        service = _service(["LMITAKEN001"] * 3, max_attempts=3)

        with pytest.raises(TrackingNumberConflict):
            service.create_order(
                CreateOrderDTO(customer_id=customer.id, product_name="Palette"),
                caller_id=admin_user.pk,
            )

        assert Order.objects.count() == 1

    def test_lost_insert_race_is_retried(self, make_order, customer, admin_user, monkeypatch):
        make_order(tracking_number="LMIRACE0001")
        original_exists = QuerySet.exists
        blinded = []

        # The pre-check misses the competing row once, as if it had not committed yet.
        def exists_once_blind(self):
            if not blinded and "LMIRACE0001" in str(self.query):
                blinded.append(True)
                return False
            return original_exists(self)

        monkeypatch.setattr(QuerySet, "exists", exists_once_blind)
        service = _service(["LMIRACE0001", "LMIRACE0002"])

        order = service.create_order(
            CreateOrderDTO(customer_id=customer.id, product_name="Palette"),
            caller_id=admin_user.pk,
        )

        assert blinded
        assert order.tracking_number == "LMIRACE0002"
