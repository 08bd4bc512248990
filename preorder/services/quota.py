"""
Quota service -- committed and remaining quantity for the local day.

The day is the calendar day of Order.created_at in the current Django
time zone, so the cap resets at local midnight with no reset job.
Unpaid orders count: the cap is baking capacity, not revenue.
"""

import logging
from datetime import date

from django.db import DatabaseError
from django.utils import timezone

from preorder.conf import get_daily_limit, get_pickup_info
from preorder.exceptions import StorageFailure
from preorder.models import Order

logger = logging.getLogger(__name__)


class PreorderQuota:
    """Quota queries. The single source of truth admission consults."""

    @classmethod
    def daily_limit(cls) -> int:
        return get_daily_limit()

    @classmethod
    def committed_on(cls, day: date) -> int:
        """Units reserved by orders created on `day`, any status."""
        return Order.objects.committed_on(day)

    @classmethod
    def committed_today(cls) -> int:
        return cls.committed_on(timezone.localdate())

    @classmethod
    def remaining_for(cls, committed: int) -> int:
        return max(cls.daily_limit() - committed, 0)

    @classmethod
    def remaining_today(cls) -> int:
        return cls.remaining_for(cls.committed_today())

    @classmethod
    def stock_snapshot(cls) -> dict:
        """
        Current stock event payload.

        Returns:
            {'remaining': 37, 'limit': 100, 'updatedAt': '2026-10-16T06:00:00+00:00'}
        """
        return {
            "remaining": cls.remaining_today(),
            "limit": cls.daily_limit(),
            "updatedAt": timezone.now().isoformat(),
        }

    @classmethod
    def pickup_info(cls) -> dict:
        """Static pickup info plus today's limit and remaining."""
        try:
            remaining = cls.remaining_today()
        except DatabaseError as e:
            logger.exception("Failed to compute remaining quota")
            raise StorageFailure("pickup_info") from e

        return {**get_pickup_info(), "limit": cls.daily_limit(), "remaining": remaining}
