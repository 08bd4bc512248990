"""
Preorder Signal Handlers.

Connects stock_changed to the process-wide stock broadcaster.

This module is imported in apps.py to register handlers.
"""

import logging

from django.dispatch import receiver

from preorder.conf import get_broadcaster
from preorder.signals import stock_changed

logger = logging.getLogger(__name__)


@receiver(stock_changed)
def publish_stock(sender, reason, order_id=None, **kwargs):
    """
    Push the new remaining quota to every live stock stream.

    The broadcaster runs the publish off the caller's thread. A failure
    here is logged and dropped: the mutation has already committed.
    """
    try:
        get_broadcaster().notify()
    except Exception:
        logger.exception(
            f"Failed to schedule stock publish after {reason}",
            extra={"reason": reason, "order_id": order_id},
        )
