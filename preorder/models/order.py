"""
Order model.

Order = one customer's pre-order against the daily unit cap.

The queryset is the order store: identity assignment, status writes,
deletes and the daily committed-quantity sum all live here. Mutating
store calls report "no change" instead of raising when no row matched.
"""

import logging
import re

from django.db import models, transaction
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from preorder.conf import get_setting

logger = logging.getLogger(__name__)

# Largest id a BIGINT primary key can hold
MAX_ORDER_ID = 2**63 - 1


class OrderStatus(models.TextChoices):
    """Order lifecycle status."""

    AWAITING_PAYMENT = "pending_payment", _("Awaiting payment")
    PAID = "paid", _("Paid")
    PICKED_UP = "picked_up", _("Picked up")


# Legal edges. Every state is reachable from its neighbours so an
# operator can correct a mistaken click; there is no awaiting_payment <->
# picked_up edge.
TRANSITIONS = {
    OrderStatus.AWAITING_PAYMENT: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset({OrderStatus.AWAITING_PAYMENT, OrderStatus.PICKED_UP}),
    OrderStatus.PICKED_UP: frozenset({OrderStatus.PAID}),
}


def is_legal_transition(current: str, target: str) -> bool:
    """True for a self-transition or an edge in TRANSITIONS."""
    if current == target:
        return True
    return target in TRANSITIONS.get(current, frozenset())


# ══════════════════════════════════════════════════════════════
# ORDER CODES
# ══════════════════════════════════════════════════════════════


def format_order_code(order_id: int) -> str:
    """
    Human-facing code for an order id: PREFIX-0012.

    Padding is a minimum width; ids past 9999 render in full.
    """
    prefix = get_setting("ORDER_CODE_PREFIX")
    return f"{prefix}-{order_id:04d}"


def parse_order_id(digits: str) -> int:
    """
    Convert an ASCII digit string to an order id.

    Ids too long for a BIGINT come back as MAX_ORDER_ID + 1, which no
    order can have, without building the huge integer.
    """
    digits = digits.lstrip("0") or "0"
    if len(digits) > len(str(MAX_ORDER_ID)):
        return MAX_ORDER_ID + 1
    return int(digits)


def parse_order_code(code) -> int | None:
    """
    Parse "PREFIX-<digits>" (any case) or a bare integer into an order id.

    Only ASCII digits count. Returns None when the input is neither.
    """
    if code is None:
        return None

    text = str(code).strip()
    prefix = re.escape(get_setting("ORDER_CODE_PREFIX"))
    match = re.search(rf"{prefix}-([0-9]+)", text, re.IGNORECASE)
    if match:
        return parse_order_id(match.group(1))

    if re.fullmatch(r"[0-9]+", text):
        return parse_order_id(text)

    return None


# ══════════════════════════════════════════════════════════════
# STORE
# ══════════════════════════════════════════════════════════════


class OrderQuerySet(models.QuerySet):
    """Order store operations."""

    def create_order(
        self,
        *,
        phone: str,
        quantity: int,
        depositor_name: str,
        pickup_slot: str,
        name: str = "",
        created_at=None,
    ) -> "Order":
        """Persist a new order in its initial status."""
        return self.create(
            created_at=created_at or timezone.now(),
            name=name or "",
            phone=phone,
            quantity=quantity,
            depositor_name=depositor_name,
            pickup_slot=pickup_slot,
            status=OrderStatus.AWAITING_PAYMENT,
        )

    def find(self, order_id: int) -> "Order | None":
        return self.filter(pk=order_id).first()

    def lookup(self, order_id: int, phone: str) -> "Order | None":
        """Return the order only when the stored phone matches."""
        return self.filter(pk=order_id, phone=phone).first()

    def swap_status(self, order_id: int, status: str) -> str | None:
        """
        Set the status of one order and return the status it had before.

        Returns None when no order has this id.
        """
        with transaction.atomic():
            order = self.select_for_update().filter(pk=order_id).first()
            if order is None:
                return None

            previous = order.status
            if previous != status:
                order.status = status
                order.save(update_fields=["status"])
            return previous

    def set_status(self, order_id: int, status: str) -> bool:
        """True if an order with this id exists (and now has `status`)."""
        return self.swap_status(order_id, status) is not None

    def delete_order(self, order_id: int) -> bool:
        """Delete one order. False when no order has this id."""
        with transaction.atomic():
            order = self.select_for_update().filter(pk=order_id).first()
            if order is None:
                return False
            order.delete()
            return True

    def recent(self, limit: int) -> list["Order"]:
        """Newest-created first, at most `limit` orders."""
        return list(self.order_by("-created_at", "-id")[:limit])

    def created_on(self, day):
        """Orders whose created_at falls on `day` in the current time zone."""
        return self.filter(created_at__date=day)

    def committed_on(self, day) -> int:
        """Sum of quantity over orders created on `day`, any status."""
        return self.created_on(day).aggregate(
            total=Coalesce(Sum("quantity"), 0)
        )["total"]


class Order(models.Model):
    """
    Pre-order for the daily product.

    Status: AWAITING_PAYMENT ⇄ PAID ⇄ PICKED_UP

    Every order counts against the quota of the local day it was created
    on, whatever its status, until it is deleted.
    """

    name = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_("Customer name"),
    )
    phone = models.CharField(
        max_length=40,
        db_index=True,
        verbose_name=_("Phone"),
        help_text=_("Contact number, also required to look the order up"),
    )
    quantity = models.PositiveIntegerField(
        verbose_name=_("Quantity"),
    )
    pickup_slot = models.CharField(
        max_length=100,
        verbose_name=_("Pickup window"),
    )
    depositor_name = models.CharField(
        max_length=100,
        verbose_name=_("Depositor name"),
        help_text=_("Name the customer will use on the bank transfer"),
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.AWAITING_PAYMENT,
        db_index=True,
        verbose_name=_("Status"),
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        db_index=True,
        verbose_name=_("Created at"),
    )

    history = HistoricalRecords()

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "preorder_order"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="preorder_order_quantity_positive",
            ),
            models.CheckConstraint(
                condition=~Q(phone=""),
                name="preorder_order_phone_required",
            ),
            models.CheckConstraint(
                condition=~Q(depositor_name=""),
                name="preorder_order_depositor_required",
            ),
        ]

    def __str__(self) -> str:
        if self.pk:
            return f"{self.code} - {self.quantity} un"
        return f"(unsaved) - {self.quantity} un"

    @property
    def code(self) -> str:
        return format_order_code(self.pk)
