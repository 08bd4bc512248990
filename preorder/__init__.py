"""
Django Preorder - daily-capped pre-orders with manual payment confirmation.

Usage:
    from preorder import orders, OrderError

    # Customer submission
    result = orders.submit(phone="010-1234-5678", quantity=3, depositor_name="Kim")
    print(result.order.code, result.remaining)

    # Operator actions
    orders.mark_paid(result.order.pk)
    orders.mark_picked_up(result.order.pk)

    # Quota
    orders.remaining_today()
"""

from preorder.exceptions import OrderError


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("orders", "Preorder"):
        from preorder.service import Preorder

        return Preorder
    if name == "AdmissionResult":
        from preorder.results import AdmissionResult

        return AdmissionResult
    if name == "TransitionResult":
        from preorder.results import TransitionResult

        return TransitionResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["orders", "Preorder", "OrderError", "AdmissionResult", "TransitionResult"]
__version__ = "0.1.0"
