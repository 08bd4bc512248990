"""
Status service -- operator-driven status changes and deletes.

The target status is applied as requested, whatever the current one
is. An edge outside TRANSITIONS is still applied but logged, so an
operator can always correct a mistake.

Operator actions:
    mark_paid            → paid
    mark_pending         → awaiting payment
    mark_picked_up       → picked up
    mark_not_picked_up   → paid (always, even if payment was undone meanwhile)
"""

import logging

from django.db import DatabaseError

from preorder.exceptions import OrderNotFound, OrderValidationError, StorageFailure
from preorder.models import MAX_ORDER_ID, Order, OrderStatus, is_legal_transition
from preorder.results import TransitionResult
from preorder.signals import emit_stock_changed

logger = logging.getLogger(__name__)


class PreorderStatus:
    """Operator mutations of existing orders."""

    @classmethod
    def transition(cls, order_id: int, target) -> TransitionResult:
        """
        Set an order's status.

        Idempotent: repeating a transition succeeds again with no further
        change.

        Raises:
            OrderValidationError: target is not an OrderStatus value
            OrderNotFound: no order with this id
            StorageFailure: the database failed
        """
        try:
            target = OrderStatus(target)
        except ValueError:
            raise OrderValidationError(
                "INVALID_STATUS", "Unknown order status.", status=str(target)
            ) from None

        if not 0 < order_id <= MAX_ORDER_ID:
            raise OrderNotFound(order_id=order_id)

        try:
            previous = Order.objects.swap_status(order_id, target)
        except DatabaseError as e:
            logger.exception(
                f"Failed to set order {order_id} to {target}",
                extra={"order": order_id, "status": target.value},
            )
            raise StorageFailure("transition") from e

        if previous is None:
            raise OrderNotFound(order_id=order_id)

        if not is_legal_transition(previous, target):
            logger.warning(
                f"Order {order_id}: off-graph transition {previous} → {target.value}",
                extra={"order": order_id, "previous": previous, "status": target.value},
            )

        logger.info(
            f"Order {order_id}: {previous} → {target.value}",
            extra={"order": order_id, "previous": previous, "status": target.value},
        )

        emit_stock_changed(cls, "status", order_id)

        return TransitionResult(order_id=order_id, previous=previous, status=target.value)

    @classmethod
    def mark_paid(cls, order_id: int) -> TransitionResult:
        return cls.transition(order_id, OrderStatus.PAID)

    @classmethod
    def mark_pending(cls, order_id: int) -> TransitionResult:
        return cls.transition(order_id, OrderStatus.AWAITING_PAYMENT)

    @classmethod
    def mark_picked_up(cls, order_id: int) -> TransitionResult:
        return cls.transition(order_id, OrderStatus.PICKED_UP)

    @classmethod
    def mark_not_picked_up(cls, order_id: int) -> TransitionResult:
        """Undo pickup. Always lands on PAID."""
        return cls.transition(order_id, OrderStatus.PAID)

    @classmethod
    def delete(cls, order_id: int) -> None:
        """
        Delete an order for good.

        Its quantity stops counting against the quota of its day.

        Raises:
            OrderNotFound: no order with this id
            StorageFailure: the database failed
        """
        if not 0 < order_id <= MAX_ORDER_ID:
            raise OrderNotFound(order_id=order_id)

        try:
            deleted = Order.objects.delete_order(order_id)
        except DatabaseError as e:
            logger.exception(
                f"Failed to delete order {order_id}", extra={"order": order_id}
            )
            raise StorageFailure("delete") from e

        if not deleted:
            raise OrderNotFound(order_id=order_id)

        logger.info(f"Order {order_id} deleted", extra={"order": order_id})

        emit_stock_changed(cls, "deleted", order_id)
