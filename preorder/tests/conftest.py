"""
Shared fixtures for Preorder tests.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from preorder.conf import get_pickup_info, reset_broadcaster
from preorder.models import Order


@pytest.fixture(autouse=True)
def fresh_broadcaster():
    """Every test starts with no live subscriptions."""
    reset_broadcaster()
    yield
    reset_broadcaster()


@pytest.fixture
def make_order(db):
    """
    Create an order directly in the store, bypassing admission.

    make_order(quantity=5, days_ago=1, status="paid")
    """

    def _make(quantity=1, phone="010-0000-0000", days_ago=0, **fields):
        fields.setdefault("depositor_name", "Kim Minji")
        fields.setdefault("pickup_slot", get_pickup_info()["time"])
        created_at = timezone.now() - timedelta(days=days_ago)
        return Order.objects.create(
            quantity=quantity, phone=phone, created_at=created_at, **fields
        )

    return _make
