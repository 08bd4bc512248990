"""
Admission service -- accept or reject new pre-orders against the daily cap.

The quota read and the order insert run as one serialized step: an
in-process lock plus a locked QuotaLedger row for the day, inside a
single transaction. Two submissions can never both read the same
committed total and both write.

Usage:
    result = PreorderAdmission.submit(
        phone="010-1234-5678", quantity=2, depositor_name="Kim Minji"
    )
    result.order.code   # "DUBAI-0042"
    result.remaining    # quota left after this order
"""

import logging
import threading
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, transaction
from django.utils import timezone

from preorder.conf import get_pickup_info
from preorder.exceptions import OrderValidationError, QuotaExceeded, StorageFailure
from preorder.models import Order, QuotaLedger
from preorder.results import AdmissionResult
from preorder.services.quota import PreorderQuota
from preorder.signals import emit_stock_changed

logger = logging.getLogger(__name__)

# Serializes check-then-insert between threads of this process. The
# ledger row lock does the same across processes.
_admission_lock = threading.Lock()

# Largest value Order.quantity (PositiveIntegerField) can hold
MAX_QUANTITY = 2**31 - 1


def _max_length(field: str) -> int:
    return Order._meta.get_field(field).max_length


def _clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_quantity(value) -> int | None:
    """
    Positive integer quantity, or None.

    Accepts ints, integral floats/decimals and numeric strings ("3", "3.0").
    Rejects booleans, fractions, zero, negatives, NaN, infinity and
    anything above MAX_QUANTITY.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 < value <= MAX_QUANTITY else None

    try:
        quantity = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None

    if not quantity.is_finite() or not 0 < quantity <= MAX_QUANTITY:
        return None
    if quantity != quantity.to_integral_value():
        return None

    return int(quantity)


class PreorderAdmission:
    """Submission of new orders."""

    @classmethod
    def submit(
        cls,
        *,
        phone,
        quantity,
        depositor_name,
        name=None,
    ) -> AdmissionResult:
        """
        Validate and admit one order.

        Checks run in order, first failure wins:
            1. phone and depositor_name present  → OrderValidationError(MISSING_FIELDS)
            2. quantity is a positive integer    → OrderValidationError(INVALID_QUANTITY)
            3. fits in today's remaining quota   → QuotaExceeded(remaining=...)

        Returns:
            AdmissionResult with the created order and the quota left
            right after it committed.

        Raises:
            StorageFailure: the database failed; nothing was admitted.
        """
        phone = _clean_text(phone)
        depositor_name = _clean_text(depositor_name)
        name = _clean_text(name)

        if not phone or not depositor_name:
            missing = [
                field
                for field, value in (("phone", phone), ("depositorName", depositor_name))
                if not value
            ]
            raise OrderValidationError(
                "MISSING_FIELDS",
                "Please fill in the required fields.",
                fields=missing,
            )

        qty = parse_quantity(quantity)
        if qty is None:
            raise OrderValidationError("INVALID_QUANTITY", "Please check the quantity.")

        too_long = [
            field
            for field, value in (("name", name), ("phone", phone), ("depositor_name", depositor_name))
            if len(value) > _max_length(field)
        ]
        if too_long:
            raise OrderValidationError(
                "FIELD_TOO_LONG", "Please shorten the highlighted fields.", fields=too_long
            )

        limit = PreorderQuota.daily_limit()
        pickup_slot = get_pickup_info()["time"]

        try:
            with _admission_lock, transaction.atomic():
                now = timezone.now()
                day = timezone.localdate(now)
                ledger = QuotaLedger.lock(day)

                total = PreorderQuota.committed_on(day)
                if total + qty > limit:
                    ledger.record(admitted=False)
                    order = None
                else:
                    order = Order.objects.create_order(
                        name=name,
                        phone=phone,
                        quantity=qty,
                        depositor_name=depositor_name,
                        pickup_slot=pickup_slot,
                        created_at=now,
                    )
                    ledger.record(admitted=True)
                    emit_stock_changed(cls, "admitted", order.pk)
        except DatabaseError as e:
            logger.exception(
                "Failed to store order",
                extra={"quantity": qty},
            )
            raise StorageFailure("submit") from e

        if order is None:
            remaining = max(limit - total, 0)
            logger.warning(
                f"Rejected order for {qty} units: only {remaining} left today",
                extra={"quantity": qty, "remaining": remaining, "limit": limit},
            )
            raise QuotaExceeded(remaining=remaining, limit=limit)

        remaining = max(limit - (total + qty), 0)
        logger.info(
            f"Order {order.code} admitted: {qty} units, {remaining} left today",
            extra={
                "order": order.pk,
                "code": order.code,
                "quantity": qty,
                "remaining": remaining,
            },
        )

        return AdmissionResult(order=order, remaining=remaining, limit=limit)
