"""
Preorder Services.

Business logic composed into the Preorder facade:
- quota: committed/remaining quantity for the local day
- admission: validate and accept/reject submissions
- status: operator status transitions and deletes
"""

from preorder.services.admission import PreorderAdmission, parse_quantity
from preorder.services.quota import PreorderQuota
from preorder.services.status import PreorderStatus

__all__ = [
    "PreorderAdmission",
    "PreorderQuota",
    "PreorderStatus",
    "parse_quantity",
]
