"""
Preorder Views.

The live stock stream is a plain Django view: server-sent events over a
StreamingHttpResponse, one broadcaster subscription per connection.
"""

import logging

from django.http import JsonResponse, StreamingHttpResponse
from django.views.decorators.http import require_GET

from preorder.conf import get_broadcaster, get_setting

logger = logging.getLogger(__name__)


@require_GET
def stock_stream_view(request):
    """
    Live remaining-stock stream.

    GET /api/stock-stream/

    Sends an `event: stock` frame with {remaining, limit, updatedAt} right
    away and again after every change. Disconnected clients get a fresh
    snapshot when they reconnect.
    """
    broadcaster = get_broadcaster()
    try:
        subscription = broadcaster.subscribe()
    except Exception:
        logger.exception("Failed to open stock stream")
        return JsonResponse({"error": "Stock stream is unavailable."}, status=503)

    heartbeat = float(get_setting("STREAM_HEARTBEAT_SECONDS"))
    response = StreamingHttpResponse(
        broadcaster.stream(subscription, heartbeat),
        content_type="text/event-stream",
    )
    response["Cache-Control"] = "no-cache"
    response["X-Accel-Buffering"] = "no"
    return response
