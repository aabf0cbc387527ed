"""
Models for orders.

Order holds orders placed through the current storefront; LegacyOrder holds
orders imported from the previous e-commerce system, which are kept for
reference and never change status here.
"""

from django.db import models

from .managers import OrderManager
from .statuses import (
    ORDER_STATUS_CHOICES,
    get_legacy_order_status_display,
    get_order_status_display,
)


class Order(models.Model):
    """An order placed through the storefront."""

    DELIVERY_METHOD_CHOICES = [
        ('shipping', 'Shipping'),
        ('pickup', 'Pickup'),
    ]

    order_number = models.CharField(max_length=40, unique=True)
    customer_email = models.EmailField()
    customer_name = models.CharField(max_length=200, blank=True, default='')
    status = models.CharField(
        max_length=30,
        choices=ORDER_STATUS_CHOICES,
        default='pending_payment'
    )
    delivery_method = models.CharField(
        max_length=20,
        choices=DELIVERY_METHOD_CHOICES,
        default='shipping'
    )
    total = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderManager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return f"Order {self.order_number} [{self.status}]"

    @property
    def status_display(self):
        return get_order_status_display(self.status)


class OrderStatusHistory(models.Model):
    """One status change of an order."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='status_history'
    )
    from_status = models.CharField(max_length=30, blank=True, default='')
    status = models.CharField(max_length=30)
    note = models.TextField(blank=True, default='')
    changed_by = models.CharField(max_length=200, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'order status history'

    def __str__(self):
        return f"{self.order.order_number}: {self.from_status or '-'} -> {self.status}"


class LegacyOrder(models.Model):
    """An order imported from the previous storefront (read-only)."""

    legacy_order_id = models.CharField(max_length=40, unique=True)
    order_number = models.CharField(max_length=40, blank=True, default='')
    status = models.CharField(max_length=30, blank=True, default='')
    customer_email = models.EmailField(blank=True, default='')
    customer_name = models.CharField(max_length=200, blank=True, default='')
    total = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    ordered_at = models.DateTimeField(null=True, blank=True)
    imported_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-ordered_at']

    def __str__(self):
        return f"Legacy order {self.order_number or self.legacy_order_id}"

    @property
    def status_display(self):
        return get_legacy_order_status_display(self.status)
