"""
Preorder API Views.
"""

from collections.abc import Mapping

from rest_framework import status, viewsets
from rest_framework.decorators import (
    action,
    api_view,
    authentication_classes,
    permission_classes,
)
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from preorder.auth import IsOperator, OperatorAuthentication
from preorder.conf import get_pickup_info
from preorder.exceptions import OrderError
from preorder.models import Order, parse_order_id
from preorder.service import Preorder

from .serializers import OrderSerializer


def error_response(error: OrderError) -> Response:
    return Response(error.as_dict(), status=error.status_code)


class OrderViewSet(viewsets.GenericViewSet):
    """
    ViewSet for Order.

    create: Submit a new order (public)
    lookup: Find an order by code and phone (public)
    list: Most recent orders, newest first (operator)
    destroy: Delete an order (operator)
    mark_paid / mark_pending / mark_picked_up / mark_not_picked_up:
        Status actions (operator)
    """

    authentication_classes = [OperatorAuthentication]
    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    lookup_value_regex = r"[0-9]+"

    public_actions = ("create", "lookup")

    def get_permissions(self):
        if self.action in self.public_actions:
            return [AllowAny()]
        return [IsOperator()]

    def create(self, request):
        """
        Submit a new order.

        POST /api/orders/
        {
            "name": "Minji",            // optional
            "phone": "010-1234-5678",
            "quantity": 2,
            "depositorName": "Kim Minji"
        }
        """
        data = request.data if isinstance(request.data, Mapping) else {}

        try:
            result = Preorder.submit(
                name=data.get("name"),
                phone=data.get("phone"),
                quantity=data.get("quantity"),
                depositor_name=data.get("depositorName"),
            )
        except OrderError as e:
            return error_response(e)

        payload = OrderSerializer(result.order).data
        payload["pickupInfo"] = {
            **get_pickup_info(),
            "limit": result.limit,
            "remaining": result.remaining,
        }
        return Response(payload, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def lookup(self, request):
        """
        Customer lookup.

        GET /api/orders/lookup/?phone=010-1234-5678&code=DUBAI-0012
        """
        try:
            order = Preorder.lookup(
                request.query_params.get("code"), request.query_params.get("phone")
            )
        except OrderError as e:
            return error_response(e)

        payload = OrderSerializer(order).data
        payload["pickupInfo"] = get_pickup_info()
        return Response(payload)

    def list(self, request):
        """
        Most recent orders, newest first.

        GET /api/orders/
        """
        try:
            orders = Preorder.recent_orders()
        except OrderError as e:
            return error_response(e)

        return Response(OrderSerializer(orders, many=True).data)

    def destroy(self, request, pk=None):
        """
        Delete an order. Its quantity is released from the day's quota.

        DELETE /api/orders/{id}/
        """
        try:
            Preorder.delete(parse_order_id(pk))
        except OrderError as e:
            return error_response(e)

        return Response({"ok": True})

    def _apply(self, operation, pk):
        try:
            operation(parse_order_id(pk))
        except OrderError as e:
            return error_response(e)

        return Response({"ok": True})

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        """POST /api/orders/{id}/mark-paid/"""
        return self._apply(Preorder.mark_paid, pk)

    @action(detail=True, methods=["post"], url_path="mark-pending")
    def mark_pending(self, request, pk=None):
        """POST /api/orders/{id}/mark-pending/"""
        return self._apply(Preorder.mark_pending, pk)

    @action(detail=True, methods=["post"], url_path="mark-picked-up")
    def mark_picked_up(self, request, pk=None):
        """POST /api/orders/{id}/mark-picked-up/"""
        return self._apply(Preorder.mark_picked_up, pk)

    @action(detail=True, methods=["post"], url_path="mark-not-picked-up")
    def mark_not_picked_up(self, request, pk=None):
        """POST /api/orders/{id}/mark-not-picked-up/ (always back to paid)"""
        return self._apply(Preorder.mark_not_picked_up, pk)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def pickup_info(request):
    """
    Pickup location/time plus today's limit and remaining.

    GET /api/pickup-info/
    """
    try:
        return Response(Preorder.pickup_info())
    except OrderError as e:
        return error_response(e)


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    """GET /api/health/"""
    return Response({"ok": True})
