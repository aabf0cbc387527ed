"""
URL routing for the orders API.
"""

from django.urls import path
from .views import (
    OrderListView,
    OrderDetailView,
    OrderHistoryView,
    OrderStatusUpdateView,
    OrderCancelView,
    OrderBulkStatusView,
    OrderStatusesView,
    LegacyOrderListView,
    LegacyOrderDetailView,
)

urlpatterns = [
    path('orders/', OrderListView.as_view(), name='order-list'),
    path('orders/statuses/', OrderStatusesView.as_view(), name='order-statuses'),
    path('orders/bulk-status/', OrderBulkStatusView.as_view(), name='order-bulk-status'),
    path('orders/<int:pk>/', OrderDetailView.as_view(), name='order-detail'),
    path('orders/<int:pk>/history/', OrderHistoryView.as_view(), name='order-history'),
    path('orders/<int:pk>/status/', OrderStatusUpdateView.as_view(), name='order-status-update'),
    path('orders/<int:pk>/cancel/', OrderCancelView.as_view(), name='order-cancel'),
    path('legacy-orders/', LegacyOrderListView.as_view(), name='legacy-order-list'),
    path('legacy-orders/<int:pk>/', LegacyOrderDetailView.as_view(), name='legacy-order-detail'),
]
