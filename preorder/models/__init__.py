"""
Preorder Models.

- Order: a customer's pre-order, its status and the order store queryset
- OrderStatus: awaiting payment / paid / picked up
- QuotaLedger: per-day admission lock and counters
"""

from preorder.models.ledger import QuotaLedger
from preorder.models.order import (
    MAX_ORDER_ID,
    TRANSITIONS,
    Order,
    OrderQuerySet,
    OrderStatus,
    format_order_code,
    is_legal_transition,
    parse_order_code,
    parse_order_id,
)

__all__ = [
    "MAX_ORDER_ID",
    "Order",
    "OrderQuerySet",
    "OrderStatus",
    "TRANSITIONS",
    "QuotaLedger",
    "format_order_code",
    "parse_order_code",
    "parse_order_id",
    "is_legal_transition",
]
