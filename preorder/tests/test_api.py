"""
Tests for the Preorder HTTP surface (preorder.api.views, preorder.views).

Verifies:
- Public submit/lookup payloads and error bodies
- Operator endpoints accept the token or Basic credentials, 401 otherwise
- Pickup info, health and the live stock stream
"""

import base64
import json
from unittest.mock import patch

import pytest

pytestmark = pytest.mark.urls("preorder.tests.test_api_urls")

from django.db import DatabaseError
from rest_framework.test import APIClient

from preorder.models import Order, OrderQuerySet, OrderStatus


def basic(user, password):
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return f"Basic {token}"


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def client(db):
    return APIClient()


@pytest.fixture
def operator_client(db):
    client = APIClient()
    client.credentials(HTTP_X_ADMIN_TOKEN="test-admin-token")
    return client


@pytest.fixture
def order_payload():
    return {
        "name": "Minji",
        "phone": "010-1234-5678",
        "quantity": 2,
        "depositorName": "Kim Minji",
    }


# ═══════════════════════════════════════════════════════════════════
# Submit
# ═══════════════════════════════════════════════════════════════════


class TestSubmitAPI:
    """POST /api/orders/"""

    def test_created(self, client, order_payload):
        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 201
        data = response.data
        order = Order.objects.get()
        assert data["id"] == order.pk
        assert data["code"] == f"DUBAI-{order.pk:04d}"
        assert data["phone"] == "010-1234-5678"
        assert data["depositorName"] == "Kim Minji"
        assert data["pickupSlot"] == "Daily 15:00-20:00"
        assert data["status"] == "pending_payment"
        assert data["pickupInfo"]["remaining"] == 98
        assert data["pickupInfo"]["limit"] == 100
        assert data["pickupInfo"]["time"] == "Daily 15:00-20:00"

    def test_name_is_optional(self, client, order_payload):
        del order_payload["name"]

        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 201
        assert response.data["name"] == ""

    def test_missing_fields(self, client, order_payload):
        del order_payload["depositorName"]

        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "MISSING_FIELDS"
        assert response.data["error"]

    @pytest.mark.parametrize("quantity", ["1e5000", "1e999999999"])
    def test_huge_quantity_is_400(self, client, order_payload, quantity):
        order_payload["quantity"] = quantity

        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_QUANTITY"
        assert not Order.objects.exists()

    def test_invalid_quantity(self, client, order_payload):
        order_payload["quantity"] = "abc"

        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_QUANTITY"

    def test_non_object_body(self, client):
        response = client.post("/api/orders/", [1, 2], format="json")

        assert response.status_code == 400
        assert response.data["code"] == "MISSING_FIELDS"

    def test_quota_exceeded_reports_remaining(self, client, make_order, order_payload):
        make_order(quantity=97)
        order_payload["quantity"] = 5

        response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "QUOTA_EXCEEDED"
        assert response.data["remaining"] == 3
        assert Order.objects.count() == 1

    def test_storage_failure_is_generic(self, client, order_payload):
        with patch.object(
            OrderQuerySet, "create_order", side_effect=DatabaseError("secret detail")
        ):
            response = client.post("/api/orders/", order_payload, format="json")

        assert response.status_code == 500
        assert response.data["code"] == "STORAGE_FAILURE"
        assert "secret detail" not in json.dumps(response.data)


# ═══════════════════════════════════════════════════════════════════
# Lookup
# ═══════════════════════════════════════════════════════════════════


class TestLookupAPI:
    """GET /api/orders/lookup/"""

    def test_found(self, client, make_order):
        order = make_order(phone="010-1234-5678")

        response = client.get(
            "/api/orders/lookup/", {"code": order.code, "phone": "010-1234-5678"}
        )

        assert response.status_code == 200
        assert response.data["id"] == order.pk
        assert response.data["pickupInfo"]["location"].startswith("12 Yeonnam-ro")

    def test_wrong_phone_is_404(self, client, make_order):
        order = make_order(phone="010-1234-5678")

        response = client.get(
            "/api/orders/lookup/", {"code": order.code, "phone": "010-0000-0000"}
        )

        assert response.status_code == 404
        assert response.data == {"error": "Order not found.", "code": "ORDER_NOT_FOUND"}

    def test_missing_params_is_400(self, client):
        response = client.get("/api/orders/lookup/", {"code": "DUBAI-0001"})

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_LOOKUP"

    @pytest.mark.parametrize("code", ["²", "DUBAI-²", "٣٤"])
    def test_non_ascii_digits_are_400(self, client, code):
        response = client.get("/api/orders/lookup/", {"code": code, "phone": "010"})

        assert response.status_code == 400
        assert response.data["code"] == "INVALID_LOOKUP"

    @pytest.mark.parametrize("code", ["9" * 5000, "DUBAI-" + "9" * 5000])
    def test_oversized_code_is_404(self, client, code):
        response = client.get("/api/orders/lookup/", {"code": code, "phone": "010"})

        assert response.status_code == 404
        assert response.data["code"] == "ORDER_NOT_FOUND"


# ═══════════════════════════════════════════════════════════════════
# Operator endpoints
# ═══════════════════════════════════════════════════════════════════


class TestOperatorAuth:
    """Token, Basic and anonymous access to operator endpoints."""

    def test_token(self, operator_client, make_order):
        make_order()

        response = operator_client.get("/api/orders/")

        assert response.status_code == 200
        assert len(response.data) == 1

    def test_basic_with_colon_in_password(self, client, make_order):
        make_order()
        client.credentials(HTTP_AUTHORIZATION=basic("operator", "pass:word!"))

        response = client.get("/api/orders/")

        assert response.status_code == 200

    def test_no_credentials_is_401(self, client):
        response = client.get("/api/orders/")

        assert response.status_code == 401
        assert response["WWW-Authenticate"] == 'Basic realm="preorder"'

    @pytest.mark.parametrize(
        "credentials",
        [
            {"HTTP_X_ADMIN_TOKEN": "wrong"},
            {"HTTP_AUTHORIZATION": basic("operator", "nope")},
            {"HTTP_AUTHORIZATION": basic("someone", "pass:word!")},
            {"HTTP_AUTHORIZATION": "Basic !!!not-base64"},
            {"HTTP_AUTHORIZATION": "Bearer test-admin-token"},
        ],
    )
    def test_bad_credentials_are_401(self, client, credentials):
        client.credentials(**credentials)

        assert client.get("/api/orders/").status_code == 401

    @pytest.mark.parametrize(
        "method, path",
        [
            ("post", "/api/orders/1/mark-paid/"),
            ("post", "/api/orders/1/mark-pending/"),
            ("post", "/api/orders/1/mark-picked-up/"),
            ("post", "/api/orders/1/mark-not-picked-up/"),
            ("delete", "/api/orders/1/"),
            ("get", "/api/admin/orders/"),
        ],
    )
    def test_every_operator_endpoint_requires_credentials(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401

    def test_unset_credentials_never_match(self, client, settings):
        settings.PREORDER = {
            **settings.PREORDER,
            "ADMIN_TOKEN": None,
            "ADMIN_USER": None,
            "ADMIN_PASSWORD": None,
        }
        client.credentials(HTTP_X_ADMIN_TOKEN="", HTTP_AUTHORIZATION=basic("", ""))

        assert client.get("/api/orders/").status_code == 401


class TestOperatorActionsAPI:
    """Status actions, delete and listing."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("mark-paid", OrderStatus.PAID),
            ("mark-pending", OrderStatus.AWAITING_PAYMENT),
            ("mark-picked-up", OrderStatus.PICKED_UP),
            ("mark-not-picked-up", OrderStatus.PAID),
        ],
    )
    def test_status_actions(self, operator_client, make_order, path, expected):
        order = make_order(status=OrderStatus.PAID)

        response = operator_client.post(f"/api/orders/{order.pk}/{path}/")

        assert response.status_code == 200
        assert response.data == {"ok": True}
        order.refresh_from_db()
        assert order.status == expected

    def test_unknown_order_is_404(self, operator_client):
        response = operator_client.post("/api/orders/999/mark-paid/")

        assert response.status_code == 404
        assert response.data["code"] == "ORDER_NOT_FOUND"

    def test_non_numeric_id_is_404(self, operator_client):
        response = operator_client.post("/api/orders/abc/mark-paid/")

        assert response.status_code == 404

    def test_huge_id_is_404(self, operator_client):
        response = operator_client.post(f"/api/orders/{2**64}/mark-paid/")

        assert response.status_code == 404


    def test_oversized_id_is_404(self, operator_client):
        response = operator_client.post(f"/api/orders/{'9' * 5000}/mark-paid/")

        assert response.status_code == 404
        assert response.data["code"] == "ORDER_NOT_FOUND"

    def test_non_ascii_digit_id_is_404(self, operator_client):
        response = operator_client.post("/api/orders/²/mark-paid/")

        assert response.status_code == 404

    def test_delete(self, operator_client, make_order):
        order = make_order(quantity=30)

        response = operator_client.delete(f"/api/orders/{order.pk}/")

        assert response.status_code == 200
        assert response.data == {"ok": True}
        assert not Order.objects.exists()

        again = operator_client.delete(f"/api/orders/{order.pk}/")
        assert again.status_code == 404

    def test_list_newest_first(self, operator_client, make_order):
        older = make_order(days_ago=1)
        newer = make_order()

        response = operator_client.get("/api/orders/")

        assert [row["id"] for row in response.data] == [newer.pk, older.pk]
        assert set(response.data[0]) == {
            "id",
            "code",
            "name",
            "phone",
            "quantity",
            "pickupSlot",
            "depositorName",
            "status",
            "createdAt",
        }

    def test_admin_orders_alias(self, operator_client, make_order):
        make_order()
        make_order()

        response = operator_client.get("/api/admin/orders/")

        assert response.status_code == 200
        assert len(response.data) == 2


# ═══════════════════════════════════════════════════════════════════
# Public info
# ═══════════════════════════════════════════════════════════════════


class TestInfoAPI:
    """Pickup info and health."""

    def test_pickup_info(self, client, make_order):
        make_order(quantity=10)

        response = client.get("/api/pickup-info/")

        assert response.status_code == 200
        assert response.data["remaining"] == 90
        assert response.data["limit"] == 100
        assert response.data["note"] == "In-store pickup only."

    def test_pickup_info_ignores_bad_credentials(self, client):
        client.credentials(HTTP_X_ADMIN_TOKEN="wrong")

        assert client.get("/api/pickup-info/").status_code == 200

    def test_health(self, client):
        response = client.get("/api/health/")

        assert response.status_code == 200
        assert response.data == {"ok": True}


# ═══════════════════════════════════════════════════════════════════
# Stock stream
# ═══════════════════════════════════════════════════════════════════


def read_frame(stream):
    frame = next(stream)
    return frame.decode() if isinstance(frame, bytes) else frame


def frame_data(frame):
    assert frame.startswith("event: stock\n")
    return json.loads(frame.split("data: ", 1)[1])


class TestStockStream:
    """GET /api/stock-stream/"""

    def test_headers_and_first_frame(self, client, make_order):
        make_order(quantity=40)

        response = client.get("/api/stock-stream/")

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/event-stream")
        assert response["Cache-Control"] == "no-cache"
        data = frame_data(read_frame(iter(response.streaming_content)))
        assert data["remaining"] == 60
        assert data["limit"] == 100
        assert "updatedAt" in data

    def test_update_after_submit(
        self, client, order_payload, django_capture_on_commit_callbacks
    ):
        stream = iter(client.get("/api/stock-stream/").streaming_content)
        assert frame_data(read_frame(stream))["remaining"] == 100

        with django_capture_on_commit_callbacks(execute=True):
            client.post("/api/orders/", order_payload, format="json")

        assert frame_data(read_frame(stream))["remaining"] == 98

    def test_keepalive_when_idle(self, client):
        stream = iter(client.get("/api/stock-stream/").streaming_content)
        read_frame(stream)

        assert read_frame(stream) == ": keepalive\n\n"

    def test_subscribe_failure_is_503(self, client):
        with patch(
            "preorder.broadcast.StockBroadcaster.take_snapshot",
            side_effect=DatabaseError("gone"),
        ):
            response = client.get("/api/stock-stream/")

        assert response.status_code == 503

    def test_post_not_allowed(self, client):
        assert client.post("/api/stock-stream/").status_code == 405
