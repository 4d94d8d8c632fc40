from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.customers.models import Customer
from modules.identity.constants import Role
from modules.orders.models import Order
from modules.orders.tracking import generate_tracking_number

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


def make_user(username: str, role: str):
    user = User.objects.create_user(
        username=username, password="pass12345", email=f"{username}@example.com"
    )
    user.profile.role = role
    user.profile.save()
    return user


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def admin_user():
    return make_user("alice", Role.ADMIN)


@pytest.fixture()
def employee_user():
    return make_user("eric", Role.EMPLOYEE)


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture()
def employee_client(employee_user):
    client = APIClient()
    client.force_authenticate(user=employee_user)
    return client


@pytest.fixture()
def customer(admin_user):
    return Customer.objects.create(
        first_name="Camille",
        last_name="Martin",
        email="camille@example.com",
        phone="0612345678",
        created_by=admin_user,
    )


@pytest.fixture()
def make_order(customer, admin_user):
    """Factory persisting an order directly (bypasses the service)."""

    def _make(**overrides) -> Order:
        fields = {
            "customer": customer,
            "product_name": "Caisse bois",
            "quantity": 1,
            "created_by": admin_user,
            "tracking_number": generate_tracking_number(),
        }
        fields.update(overrides)
        return Order.objects.create(**fields)

    return _make
