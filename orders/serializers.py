"""
Serializers for orders.
"""

from rest_framework import serializers

from .models import LegacyOrder, Order, OrderStatusHistory
from .statuses import ORDER_STATUSES


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    """Serializer for one entry of an order's status timeline."""

    class Meta:
        model = OrderStatusHistory
        fields = ['id', 'from_status', 'status', 'note', 'changed_by', 'created_at']


class OrderReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying Order (output)."""

    status_label = serializers.CharField(source='status_display.label', read_only=True)
    status_color = serializers.CharField(source='status_display.color', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'customer_email',
            'customer_name',
            'status',
            'status_label',
            'status_color',
            'delivery_method',
            'total',
            'created_at',
            'updated_at',
        ]


class OrderDetailSerializer(OrderReadSerializer):
    """Order with its status timeline."""

    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderReadSerializer.Meta):
        fields = OrderReadSerializer.Meta.fields + ['status_history']


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Serializer for changing an order's status."""

    status = serializers.ChoiceField(choices=ORDER_STATUSES)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    changed_by = serializers.CharField(required=False, allow_blank=True, default='')


class BulkStatusUpdateSerializer(OrderStatusUpdateSerializer):
    """Serializer for moving several orders to one status."""

    order_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False
    )


class OrderListQuerySerializer(serializers.Serializer):
    """Serializer for order list query parameters."""

    status = serializers.CharField(required=False, allow_blank=True)
    search = serializers.CharField(required=False, allow_blank=True)
    delivery_method = serializers.ChoiceField(
        choices=['all', 'shipping', 'pickup'],
        required=False,
        default='all'
    )


class OrderHistoryQuerySerializer(serializers.Serializer):
    """Serializer for order history query parameters."""

    limit = serializers.IntegerField(required=False, min_value=1)


class LegacyOrderSerializer(serializers.ModelSerializer):
    """Serializer for imported legacy orders (read-only)."""

    status_label = serializers.CharField(source='status_display.label', read_only=True)
    status_color = serializers.CharField(source='status_display.color', read_only=True)

    class Meta:
        model = LegacyOrder
        fields = [
            'id',
            'legacy_order_id',
            'order_number',
            'status',
            'status_label',
            'status_color',
            'customer_email',
            'customer_name',
            'total',
            'ordered_at',
            'imported_at',
        ]
