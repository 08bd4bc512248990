"""
Tests for operator status actions (preorder.services.status).
"""

import logging
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from preorder import orders
from preorder.exceptions import OrderNotFound, OrderValidationError, StorageFailure
from preorder.models import Order, OrderQuerySet, OrderStatus


@pytest.fixture
def order(make_order):
    return make_order(quantity=2)


def status_of(order_id):
    return Order.objects.get(pk=order_id).status


# ═══════════════════════════════════════════════════════════════════
# Transitions
# ═══════════════════════════════════════════════════════════════════


class TestTransition:
    """Tests for transition() and the four operator actions."""

    def test_mark_paid(self, order):
        result = orders.mark_paid(order.pk)

        assert result.previous == OrderStatus.AWAITING_PAYMENT
        assert result.status == OrderStatus.PAID
        assert result.changed
        assert status_of(order.pk) == OrderStatus.PAID

    def test_full_round_trip(self, order):
        orders.mark_paid(order.pk)
        orders.mark_picked_up(order.pk)
        assert status_of(order.pk) == OrderStatus.PICKED_UP

        orders.mark_not_picked_up(order.pk)
        assert status_of(order.pk) == OrderStatus.PAID

        orders.mark_pending(order.pk)
        assert status_of(order.pk) == OrderStatus.AWAITING_PAYMENT

    def test_idempotent(self, order):
        first = orders.mark_paid(order.pk)
        second = orders.mark_paid(order.pk)

        assert first.changed
        assert not second.changed
        assert second.status == OrderStatus.PAID
        assert order.history.count() == 2

    def test_undo_pickup_always_lands_on_paid(self, order):
        """Even when payment was undone in between."""
        orders.mark_paid(order.pk)
        orders.mark_picked_up(order.pk)
        orders.mark_pending(order.pk)

        result = orders.mark_not_picked_up(order.pk)

        assert result.previous == OrderStatus.AWAITING_PAYMENT
        assert status_of(order.pk) == OrderStatus.PAID

    def test_rapid_paid_then_picked_up_is_legal(self, order, caplog):
        with caplog.at_level(logging.WARNING, logger="preorder.services.status"):
            orders.mark_paid(order.pk)
            orders.mark_picked_up(order.pk)

        assert "off-graph" not in caplog.text
        assert status_of(order.pk) == OrderStatus.PICKED_UP

    def test_skip_transition_applied_but_logged(self, order, caplog):
        with caplog.at_level(logging.WARNING, logger="preorder.services.status"):
            result = orders.transition(order.pk, OrderStatus.PICKED_UP)

        assert result.status == OrderStatus.PICKED_UP
        assert status_of(order.pk) == OrderStatus.PICKED_UP
        assert "off-graph" in caplog.text

    def test_accepts_raw_value(self, order):
        orders.transition(order.pk, "paid")

        assert status_of(order.pk) == OrderStatus.PAID

    def test_invalid_status(self, order):
        with pytest.raises(OrderValidationError) as exc:
            orders.transition(order.pk, "shipped")

        assert exc.value.code == "INVALID_STATUS"
        assert status_of(order.pk) == OrderStatus.AWAITING_PAYMENT

    def test_unknown_order(self, db):
        with pytest.raises(OrderNotFound):
            orders.mark_paid(12345)

    @pytest.mark.parametrize("order_id", [0, -1, 2**63])
    def test_out_of_range_id(self, db, order_id):
        with pytest.raises(OrderNotFound):
            orders.mark_paid(order_id)

    def test_storage_failure(self, order):
        with patch.object(OrderQuerySet, "swap_status", side_effect=DatabaseError("gone")):
            with pytest.raises(StorageFailure):
                orders.mark_paid(order.pk)


# ═══════════════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════════════


class TestDelete:
    """Tests for delete()."""

    def test_delete(self, order):
        orders.delete(order.pk)

        assert not Order.objects.filter(pk=order.pk).exists()

    def test_delete_twice(self, order):
        orders.delete(order.pk)

        with pytest.raises(OrderNotFound):
            orders.delete(order.pk)

    def test_delete_unknown_is_not_a_storage_error(self, db):
        with pytest.raises(OrderNotFound) as exc:
            orders.delete(999)

        assert exc.value.status_code == 404

    def test_delete_releases_quota(self, make_order):
        order = make_order(quantity=40)
        make_order(quantity=10)

        orders.delete(order.pk)

        assert orders.committed_today() == 10
        assert orders.remaining_today() == 90

    def test_storage_failure(self, order):
        with patch.object(OrderQuerySet, "delete_order", side_effect=DatabaseError("gone")):
            with pytest.raises(StorageFailure):
                orders.delete(order.pk)


# ═══════════════════════════════════════════════════════════════════
# Read side
# ═══════════════════════════════════════════════════════════════════


class TestLookup:
    """Tests for lookup() and recent_orders()."""

    def test_lookup_by_code(self, make_order):
        order = make_order(phone="010-5555-6666")

        assert orders.lookup(order.code, "010-5555-6666") == order

    def test_lookup_by_bare_id(self, make_order):
        order = make_order(phone="010-5555-6666")

        assert orders.lookup(str(order.pk), "010-5555-6666") == order

    def test_wrong_phone_is_not_found(self, make_order):
        order = make_order(phone="010-5555-6666")

        with pytest.raises(OrderNotFound):
            orders.lookup(order.code, "010-0000-0000")

    def test_unknown_code_is_not_found(self, db):
        with pytest.raises(OrderNotFound):
            orders.lookup("DUBAI-9999", "010-5555-6666")

    @pytest.mark.parametrize("code, phone", [("", "010"), ("DUBAI-1", ""), (None, None)])
    def test_missing_params(self, db, code, phone):
        with pytest.raises(OrderValidationError) as exc:
            orders.lookup(code, phone)

        assert exc.value.code == "INVALID_LOOKUP"

    def test_unparseable_code(self, db):
        with pytest.raises(OrderValidationError):
            orders.lookup("ORDER-12", "010")

    def test_huge_id_is_not_found(self, db):
        with pytest.raises(OrderNotFound):
            orders.lookup("9" * 30, "010")

    def test_get_order(self, order):
        assert orders.get_order(order.pk) == order

        with pytest.raises(OrderNotFound):
            orders.get_order(order.pk + 1)

    def test_recent_orders_capped(self, make_order, settings):
        settings.PREORDER = {**settings.PREORDER, "RECENT_ORDERS_LIMIT": 3}
        for _ in range(5):
            make_order()

        assert len(orders.recent_orders()) == 3
        assert len(orders.recent_orders(limit=2)) == 2
        assert len(orders.recent_orders(limit=50)) == 3
