"""
Preorder Service - thin facade over the service mixins.

Usage:
    from preorder import orders, OrderError

    # Customer side
    result = orders.submit(name="Minji", phone="010-1234-5678",
                           quantity=2, depositor_name="Kim Minji")
    order = orders.lookup(result.order.code, phone="010-1234-5678")

    # Operator side
    orders.mark_paid(order.pk)
    orders.mark_picked_up(order.pk)
    orders.recent_orders()

    # Quota
    orders.committed_today()
    orders.remaining_today()
"""

import logging

from django.db import DatabaseError

from preorder.conf import get_setting
from preorder.exceptions import OrderNotFound, OrderValidationError, StorageFailure
from preorder.models import MAX_ORDER_ID, Order, parse_order_code
from preorder.services import PreorderAdmission, PreorderQuota, PreorderStatus

logger = logging.getLogger(__name__)


class Preorder(PreorderQuota, PreorderAdmission, PreorderStatus):
    """
    Main API for Preorder.

    Quota queries, admission and operator actions come from the mixins;
    this class adds the read-side lookups.
    """

    @classmethod
    def get_order(cls, order_id: int) -> Order:
        """Raises OrderNotFound for an unknown id."""
        order = Order.objects.find(order_id) if 0 < order_id <= MAX_ORDER_ID else None
        if order is None:
            raise OrderNotFound(order_id=order_id)
        return order

    @classmethod
    def lookup(cls, code, phone) -> Order:
        """
        Customer self-service lookup by order code and phone.

        A wrong phone and an unknown code both raise OrderNotFound.
        """
        phone = str(phone).strip() if phone is not None else ""
        code = str(code).strip() if code is not None else ""

        if not phone or not code:
            raise OrderValidationError(
                "INVALID_LOOKUP", "Please enter both the order number and the phone."
            )

        order_id = parse_order_code(code)
        if order_id is None:
            raise OrderValidationError("INVALID_LOOKUP", "Please check the order number.")

        if not 0 < order_id <= MAX_ORDER_ID:
            raise OrderNotFound()

        try:
            order = Order.objects.lookup(order_id, phone)
        except DatabaseError as e:
            logger.exception("Order lookup failed", extra={"order": order_id})
            raise StorageFailure("lookup") from e

        if order is None:
            raise OrderNotFound()
        return order

    @classmethod
    def recent_orders(cls, limit: int | None = None) -> list[Order]:
        """Newest first, capped at RECENT_ORDERS_LIMIT."""
        cap = int(get_setting("RECENT_ORDERS_LIMIT"))
        limit = cap if limit is None else min(limit, cap)

        try:
            return Order.objects.recent(limit)
        except DatabaseError as e:
            logger.exception("Failed to list orders")
            raise StorageFailure("list") from e
