import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_echoes_incoming_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/orders/by-tracking/LMIUNKNOWN/")
        assert response.status_code == 404
        assert response["X-Request-ID"] == cid

    def test_fresh_uuid_when_header_missing(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_present_on_authentication_failures(self, api_client):
        response = api_client.get("/api/v1/orders/", HTTP_X_REQUEST_ID="unauth-1")
        assert response.status_code == 401
        assert response["X-Request-ID"] == "unauth-1"

    def test_domain_log_lines_carry_the_request_id(self, admin_client, customer, caplog):
        with caplog.at_level(logging.INFO):
            admin_client.post(
                "/api/v1/orders/",
                {"customer_id": str(customer.id), "product_name": "Palette"},
                format="json",
                HTTP_X_REQUEST_ID="create-order-789",
            )

        created = [
            record.getMessage()
            for record in caplog.records
            if "order.created" in record.getMessage()
        ]
        assert created
        assert all("create-order-789" in message for message in created)
