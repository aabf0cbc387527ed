"""
Admin configuration for the orders app.
"""

from django.contrib import admin
from .models import LegacyOrder, Order, OrderStatusHistory


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ['from_status', 'status', 'note', 'changed_by', 'created_at']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for Order model."""

    list_display = ['order_number', 'customer_email', 'status', 'delivery_method', 'total', 'created_at']
    list_filter = ['status', 'delivery_method', 'created_at']
    search_fields = ['order_number', 'customer_email', 'customer_name']
    date_hierarchy = 'created_at'
    inlines = [OrderStatusHistoryInline]
    readonly_fields = ['created_at', 'updated_at']


@admin.register(LegacyOrder)
class LegacyOrderAdmin(admin.ModelAdmin):
    """Admin interface for imported legacy orders (read-only)."""

    list_display = ['legacy_order_id', 'order_number', 'status', 'customer_email', 'total', 'ordered_at']
    list_filter = ['status']
    search_fields = ['legacy_order_id', 'order_number', 'customer_email', 'customer_name']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
