"""
Stock broadcaster.

Keeps the registry of live stock-stream subscriptions and pushes the
remaining quota to all of them whenever it may have changed.

Each subscription owns a small bounded queue. Publishing only enqueues,
so a slow client never holds up a mutation or the other subscribers.
When a queue is full the oldest pending event is dropped: remaining
quota is current-state data and only the latest value matters.

Usage:
    broadcaster = get_broadcaster()
    sub = broadcaster.subscribe()           # snapshot already queued
    for frame in broadcaster.stream(sub, heartbeat=15):
        ...                                 # SSE text frames
"""

import json
import logging
import queue
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

from django.db import close_old_connections

logger = logging.getLogger(__name__)

EVENT_NAME = "stock"
KEEPALIVE = ": keepalive\n\n"

_CLOSED = object()


def format_event(data: dict, event: str = EVENT_NAME) -> str:
    """Encode one server-sent event frame."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class Subscription:
    """One open live-update channel."""

    def __init__(self, queue_size: int = 16):
        self.id = uuid.uuid4().hex
        self.closed = False
        self._queue = queue.Queue(maxsize=max(queue_size, 1))

    def __repr__(self) -> str:
        return f"<Subscription {self.id[:8]} closed={self.closed}>"

    def offer(self, item) -> None:
        """Enqueue without blocking, dropping the oldest item when full."""
        while True:
            try:
                self._queue.put_nowait(item)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def get(self, timeout: float | None = None):
        """Next pending item. Raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def close(self) -> None:
        """Mark closed and wake up a reader blocked in get()."""
        if not self.closed:
            self.closed = True
            self.offer(_CLOSED)


class EventStream:
    """
    Iterator of SSE frames for one subscription.

    Blocks for at most `heartbeat` seconds per frame and emits a
    keepalive comment when idle, so a dead client is noticed on the next
    write. close() unsubscribes; StreamingHttpResponse calls it when the
    response is closed, even if iteration never started.
    """

    def __init__(self, broadcaster, subscription: Subscription, heartbeat: float):
        self.broadcaster = broadcaster
        self.subscription = subscription
        self.heartbeat = heartbeat

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if self.subscription.closed:
            self.close()
            raise StopIteration

        try:
            item = self.subscription.get(timeout=self.heartbeat)
        except queue.Empty:
            return KEEPALIVE

        if item is _CLOSED:
            self.close()
            raise StopIteration

        return format_event(item)

    def close(self) -> None:
        self.broadcaster.unsubscribe(self.subscription)


class StockBroadcaster:
    """
    Registry of live subscriptions plus fan-out of stock snapshots.

    subscribe() and publish() take the same lock around "compute snapshot,
    enqueue", so a new subscription always gets its snapshot first and
    never misses a publish that starts after it registered.
    """

    def __init__(self, queue_size: int = 16, asynchronous: bool = True, snapshot=None):
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()
        self._queue_size = queue_size
        self._asynchronous = asynchronous
        self._snapshot = snapshot

        self._executor = None
        self._executor_lock = threading.Lock()
        self._pending = False

    def __len__(self) -> int:
        return len(self._subscriptions)

    def take_snapshot(self) -> dict:
        if self._snapshot is not None:
            return self._snapshot()

        from preorder.services.quota import PreorderQuota

        return PreorderQuota.stock_snapshot()

    # ══════════════════════════════════════════════════════════════
    # SUBSCRIPTIONS
    # ══════════════════════════════════════════════════════════════

    def subscribe(self) -> Subscription:
        """Register a new subscription with the current snapshot queued."""
        subscription = Subscription(self._queue_size)

        with self._lock:
            subscription.offer(self.take_snapshot())
            self._subscriptions[subscription.id] = subscription

        logger.debug(
            f"Stock subscriber {subscription.id} connected ({len(self)} live)",
            extra={"subscription": subscription.id},
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Safe to call any number of times."""
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        subscription.closed = True

        if removed is not None:
            logger.debug(
                f"Stock subscriber {subscription.id} disconnected ({len(self)} live)",
                extra={"subscription": subscription.id},
            )

    def stream(self, subscription: Subscription, heartbeat: float) -> EventStream:
        return EventStream(self, subscription, heartbeat)

    def close_all(self) -> None:
        """Close every subscription and stop the publish worker."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()

        for subscription in subscriptions:
            subscription.close()

        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
            self._pending = False

    # ══════════════════════════════════════════════════════════════
    # PUBLISHING
    # ══════════════════════════════════════════════════════════════

    def publish(self) -> int:
        """
        Send the current snapshot to every open subscription.

        Never raises. Returns the number of subscriptions it reached.
        """
        try:
            with self._lock:
                for key in [k for k, s in self._subscriptions.items() if s.closed]:
                    del self._subscriptions[key]

                if not self._subscriptions:
                    return 0

                snapshot = self.take_snapshot()
                delivered = 0
                for subscription in self._subscriptions.values():
                    try:
                        subscription.offer(snapshot)
                        delivered += 1
                    except Exception:
                        logger.exception(
                            f"Failed to queue stock event for {subscription.id}",
                            extra={"subscription": subscription.id},
                        )
        except Exception:
            logger.exception("Stock publish failed")
            return 0

        logger.debug(
            f"Published remaining={snapshot['remaining']} to {delivered} subscribers",
            extra={"remaining": snapshot["remaining"], "subscribers": delivered},
        )
        return delivered

    def notify(self) -> None:
        """
        Fire-and-forget publish request.

        Runs publish() on a background worker, or inline when the
        broadcaster was built with asynchronous=False. Requests arriving
        while one is already queued are folded into it.
        """
        if not self._asynchronous:
            self.publish()
            return

        with self._executor_lock:
            if self._pending:
                return
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="stock-broadcast"
                )
            self._pending = True
            try:
                self._executor.submit(self._publish_from_worker)
            except RuntimeError:
                self._pending = False
                logger.warning("Stock publish worker is shut down, skipping publish")

    def _publish_from_worker(self) -> None:
        # Clear the flag before reading the quota: a change committed after
        # this point schedules its own publish.
        with self._executor_lock:
            self._pending = False
        try:
            self.publish()
        finally:
            close_old_connections()
