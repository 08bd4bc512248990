"""
Preorder Signals.

Mutations never talk to the stock broadcaster directly; they send
stock_changed once their transaction commits and the registered handler
forwards it.

Signals:
    stock_changed: committed quantity (or an order viewers see) changed
"""

from django.db import transaction
from django.dispatch import Signal

# Committed quantity or an order's status changed
# Sent after commit by submit(), transition() and delete()
# Args: reason ("admitted" | "status" | "deleted"), order_id
stock_changed = Signal()


def emit_stock_changed(sender, reason: str, order_id: int | None = None) -> None:
    """Send stock_changed once the current transaction commits."""
    transaction.on_commit(
        lambda: stock_changed.send_robust(
            sender=sender, reason=reason, order_id=order_id
        ),
        robust=True,
    )


__all__ = ["stock_changed", "emit_stock_changed"]
