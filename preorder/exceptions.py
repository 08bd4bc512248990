"""
Preorder Exceptions.

All preorder errors derive from OrderError for consistent handling.
Each subclass carries the HTTP status the API layer answers with.
"""

from typing import Any


class OrderError(Exception):
    """
    Base exception for all Preorder errors.

    Usage:
        raise OrderError('INVALID_QUANTITY', quantity='abc')

    Attributes:
        code: Error code (MISSING_FIELDS, QUOTA_EXCEEDED, etc.)
        details: Additional context as keyword arguments
    """

    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, code: str, message: str | None = None, **details: Any):
        self.code = code
        self.message = message or self.default_message
        self.details = details
        text = f"{code}: {details}" if details else code
        super().__init__(text)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"error": self.message, "code": self.code, **self.details}

    def __str__(self) -> str:
        name = type(self).__name__
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{name}({self.code}: {details_str})"
        return f"{name}({self.code})"


class OrderValidationError(OrderError):
    """Malformed or missing input. User-correctable."""

    default_message = "Please check the submitted fields."


class QuotaExceeded(OrderError):
    """Today's remaining quota cannot cover the requested quantity."""

    default_message = "Today's order limit has been reached."

    def __init__(self, remaining: int, limit: int, **details: Any):
        super().__init__("QUOTA_EXCEEDED", remaining=remaining, limit=limit, **details)

    @property
    def remaining(self) -> int:
        return self.details["remaining"]


class OrderNotFound(OrderError):
    """
    Unknown order id, or lookup phone mismatch.

    Both cases share this error so a lookup never reveals whether an
    order exists.
    """

    status_code = 404
    default_message = "Order not found."

    def __init__(self, **details: Any):
        super().__init__("ORDER_NOT_FOUND", **details)

    def as_dict(self) -> dict:
        # Never echo lookup input back.
        return {"error": self.message, "code": self.code}


class StorageFailure(OrderError):
    """Unexpected persistence error. Logged, never retried."""

    status_code = 500
    default_message = "The order could not be saved. Please try again later."

    def __init__(self, operation: str):
        super().__init__("STORAGE_FAILURE", operation=operation)

    def as_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


# Error codes
# MISSING_FIELDS: phone or depositor name blank
# INVALID_QUANTITY: quantity is not a positive integer
# INVALID_LOOKUP: lookup code/phone missing or unparseable
# INVALID_STATUS: target status not in OrderStatus
# QUOTA_EXCEEDED: daily limit would be exceeded
# ORDER_NOT_FOUND: no such order (or phone mismatch)
# STORAGE_FAILURE: database error
