"""
Preorder Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    PREORDER = {
        "DAILY_LIMIT": 120,
        "ADMIN_TOKEN": os.environ["ADMIN_TOKEN"],
    }

    # Option 2: Flat
    PREORDER_DAILY_LIMIT = 120
    PREORDER_ADMIN_TOKEN = os.environ["ADMIN_TOKEN"]

Operator credentials default to None, which disables that login method.
Everything else has a working default.
"""

import threading

from django.conf import settings


# ── Defaults ──

DEFAULTS = {
    "DAILY_LIMIT": 100,
    "ORDER_CODE_PREFIX": "DUBAI",
    "ADMIN_TOKEN": None,
    "ADMIN_USER": None,
    "ADMIN_PASSWORD": None,
    "PICKUP_INFO": {
        "location": "",
        "time": "Daily 15:00-20:00",
        "note": "In-store pickup only, within the pickup window.",
    },
    "RECENT_ORDERS_LIMIT": 200,
    "STREAM_HEARTBEAT_SECONDS": 15,
    "STREAM_QUEUE_SIZE": 16,
    "ASYNC_BROADCAST": True,
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a preorder setting.

    Looks up in order:
    1. PREORDER dict (e.g. PREORDER = {"DAILY_LIMIT": 100})
    2. Flat setting (e.g. PREORDER_DAILY_LIMIT = 100)
    3. DEFAULTS
    """
    preorder_dict = getattr(settings, "PREORDER", {})
    if name in preorder_dict:
        return preorder_dict[name]

    flat_value = getattr(settings, f"PREORDER_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


def get_daily_limit() -> int:
    """Return the configured daily unit cap."""
    return int(get_setting("DAILY_LIMIT"))


def get_pickup_info() -> dict:
    """Return the static pickup info, merged over the defaults."""
    return {**DEFAULTS["PICKUP_INFO"], **(get_setting("PICKUP_INFO") or {})}


_broadcaster_lock = threading.Lock()
_broadcaster_instance = None


def get_broadcaster():
    """
    Return the process-wide StockBroadcaster.

    Built on first use. Every stock-stream connection in this process
    subscribes to the same instance.
    """
    global _broadcaster_instance

    if _broadcaster_instance is None:
        with _broadcaster_lock:
            if _broadcaster_instance is None:  # double-checked
                from preorder.broadcast import StockBroadcaster

                _broadcaster_instance = StockBroadcaster(
                    queue_size=int(get_setting("STREAM_QUEUE_SIZE")),
                    asynchronous=bool(get_setting("ASYNC_BROADCAST")),
                )

    return _broadcaster_instance


def reset_broadcaster() -> None:
    """Close and drop the singleton (for tests)."""
    global _broadcaster_instance
    with _broadcaster_lock:
        if _broadcaster_instance is not None:
            _broadcaster_instance.close_all()
        _broadcaster_instance = None
