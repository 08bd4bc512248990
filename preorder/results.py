"""
Preorder Result Types.

Structured results for admission and status operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from preorder.models import Order


@dataclass
class AdmissionResult:
    """
    Accepted submission.

    remaining is the quota left right after this order committed.
    """

    order: Order
    remaining: int
    limit: int


@dataclass
class TransitionResult:
    """Applied operator status change."""

    order_id: int
    previous: str
    status: str

    @property
    def changed(self) -> bool:
        return self.previous != self.status
