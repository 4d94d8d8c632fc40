"""Integration tests for status changes and the history trail."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.models import Order, OrderHistory

pytestmark = pytest.mark.integration

BASE_URL = "/api/v1/orders/"


def _set_status(client, order_id, status, comment=None):
    payload = {"status": status}
    if comment is not None:
        payload["comment"] = comment
    return client.post(f"{BASE_URL}{order_id}/status/", payload, format="json")


class TestStatusUpdate:
    def test_status_change_appends_history(self, employee_client, employee_user, make_order):
        order = make_order()

        response = _set_status(employee_client, order.id, "pending_advance", "Devis envoyé")

        assert response.status_code == 200
        assert response.json()["status"] == "pending_advance"
        assert response.json()["progress_index"] == 1
        entry = OrderHistory.objects.get(order=order)
        assert entry.status == "pending_advance"
        assert entry.comment == "Devis envoyé"
        assert entry.created_by_id == employee_user.pk

    def test_same_status_still_records_entry(self, admin_client, make_order):
        order = make_order(status="ready")

        _set_status(admin_client, order.id, "ready")

        assert OrderHistory.objects.filter(order=order, status="ready").count() == 1

    def test_any_transition_is_allowed(self, admin_client, make_order):
        order = make_order(status="delivered")

        response = _set_status(admin_client, order.id, "pending_price")

        assert response.status_code == 200
        assert response.json()["progress_index"] == 0

    def test_cancelled_has_no_progress_index(self, admin_client, make_order):
        order = make_order()
        response = _set_status(admin_client, order.id, "cancelled")
        assert response.json()["progress_index"] is None

    def test_unknown_status(self, admin_client, make_order):
        order = make_order()

        response = _set_status(admin_client, order.id, "lost")

        assert response.status_code == 400
        assert response.json()["field"] == "status"
        order.refresh_from_db()
        assert order.status == "pending_price"
        assert not OrderHistory.objects.exists()

    def test_unknown_order(self, admin_client):
        response = _set_status(admin_client, uuid4(), "ready")
        assert response.status_code == 404
        assert not OrderHistory.objects.exists()

    def test_blank_comment_is_stored_as_null(self, admin_client, make_order):
        order = make_order()
        _set_status(admin_client, order.id, "ready", "   ")
        assert OrderHistory.objects.get(order=order).comment is None


class TestHistoryListing:
    def test_most_recent_first(self, admin_client, make_order):
        order = make_order()
        for status in ("pending_advance", "advance_paid", "in_production"):
            _set_status(admin_client, order.id, status)

        data = admin_client.get(f"{BASE_URL}{order.id}/history/").json()

        assert [entry["status"] for entry in data] == [
            "in_production",
            "advance_paid",
            "pending_advance",
        ]
        assert data[0]["order_id"] == str(order.id)
        assert data[0]["created_by"]["username"] == "alice"

    def test_empty_history(self, admin_client, make_order):
        order = make_order()
        assert admin_client.get(f"{BASE_URL}{order.id}/history/").json() == []

    def test_history_of_unknown_order(self, admin_client):
        response = admin_client.get(f"{BASE_URL}{uuid4()}/history/")
        assert response.status_code == 404


class TestStatusAtomicity:
    def test_failed_history_write_rolls_back_status(self, admin_client, make_order, monkeypatch):
        from django.db import OperationalError

        from modules.orders.repositories.django_repository import OrderDjangoRepository

        def broken_add_history(self, *args, **kwargs):
            raise OperationalError("disk I/O error")

        monkeypatch.setattr(OrderDjangoRepository, "add_history", broken_add_history)
        order = make_order()

        response = _set_status(admin_client, order.id, "shipped")

        assert response.status_code == 503
        assert response.json()["code"] == "storage_failure"
        assert Order.objects.get(id=order.id).status == "pending_price"
        assert not OrderHistory.objects.exists()
