"""
Preorder API Serializers.

Field names are camelCase on the wire.
"""

from rest_framework import serializers

from preorder.models import Order


class OrderSerializer(serializers.ModelSerializer):
    """Serializer for Order model (read-only view of an order)."""

    code = serializers.CharField(read_only=True)
    pickupSlot = serializers.CharField(source="pickup_slot", read_only=True)
    depositorName = serializers.CharField(source="depositor_name", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "code",
            "name",
            "phone",
            "quantity",
            "pickupSlot",
            "depositorName",
            "status",
            "createdAt",
        ]
        read_only_fields = fields
