"""Views for orders and legacy orders."""

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import LegacyOrder, Order
from .serializers import (
    BulkStatusUpdateSerializer,
    LegacyOrderSerializer,
    OrderDetailSerializer,
    OrderHistoryQuerySerializer,
    OrderListQuerySerializer,
    OrderReadSerializer,
    OrderStatusHistorySerializer,
    OrderStatusUpdateSerializer,
)
from . import services
from .statuses import LEGACY_ORDER_STATUS_CONFIG, ORDER_STATUS_CONFIG, ORDER_STATUSES


class OrderListView(APIView):
    """
    List orders.

    GET /api/orders/?status=X&search=Y&delivery_method=pickup
    """

    def get(self, request):
        query_serializer = OrderListQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        orders = Order.objects.all()
        if data.get('status'):
            orders = orders.with_status(data['status'])
        if data.get('search'):
            orders = orders.search(data['search'])
        if data.get('delivery_method', 'all') != 'all':
            orders = orders.filter(delivery_method=data['delivery_method'])

        serializer = OrderReadSerializer(orders, many=True)
        return Response(serializer.data)


class OrderDetailView(APIView):
    """
    Retrieve an order with its status history.

    GET /api/orders/{id}/
    """

    def get(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        serializer = OrderDetailSerializer(order)
        return Response(serializer.data)


class OrderHistoryView(APIView):
    """
    List an order's status changes, newest first.

    GET /api/orders/{id}/history/?limit=N
    """

    def get(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        query_serializer = OrderHistoryQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        history = services.get_order_history(order, limit=query_serializer.validated_data.get('limit'))
        serializer = OrderStatusHistorySerializer(history, many=True)
        return Response(serializer.data)


class OrderStatusUpdateView(APIView):
    """
    Change an order's status.

    POST /api/orders/{id}/status/
    """

    def post(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            updated_order = services.update_order_status(
                order,
                data['status'],
                note=data.get('note', ''),
                changed_by=data.get('changed_by', '')
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response_serializer = OrderDetailSerializer(updated_order)
        return Response(response_serializer.data)


class OrderCancelView(APIView):
    """
    Cancel an order.

    POST /api/orders/{id}/cancel/
    """

    def post(self, request, pk):
        order = get_object_or_404(Order, pk=pk)

        try:
            services.cancel_order(
                order,
                note=request.data.get('note', ''),
                changed_by=request.data.get('changed_by', '')
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': f'Order {order.order_number} has been cancelled.'
        }, status=status.HTTP_200_OK)


class OrderBulkStatusView(APIView):
    """
    Move several orders to one status.

    POST /api/orders/bulk-status/
    """

    def post(self, request):
        serializer = BulkStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        updated = services.bulk_update_status(
            data['order_ids'],
            data['status'],
            note=data.get('note', ''),
            changed_by=data.get('changed_by', '')
        )
        return Response({'updated': updated})


class OrderStatusesView(APIView):
    """
    Status codes with their labels and colours, in display order.

    GET /api/orders/statuses/
    """

    def get(self, request):
        return Response({
            'orders': [
                {'code': code, 'label': ORDER_STATUS_CONFIG[code].label, 'color': ORDER_STATUS_CONFIG[code].color}
                for code in ORDER_STATUSES
            ],
            'legacy_orders': [
                {'code': code, 'label': display.label, 'color': display.color}
                for code, display in LEGACY_ORDER_STATUS_CONFIG.items()
            ],
        })


class LegacyOrderListView(APIView):
    """
    List imported legacy orders.

    GET /api/legacy-orders/?status=X
    """

    def get(self, request):
        orders = LegacyOrder.objects.all()
        status_filter = request.query_params.get('status')
        if status_filter:
            orders = orders.filter(status__iexact=status_filter)
        serializer = LegacyOrderSerializer(orders, many=True)
        return Response(serializer.data)


class LegacyOrderDetailView(APIView):
    """
    Retrieve an imported legacy order.

    GET /api/legacy-orders/{id}/
    """

    def get(self, request, pk):
        order = get_object_or_404(LegacyOrder, pk=pk)
        serializer = LegacyOrderSerializer(order)
        return Response(serializer.data)
