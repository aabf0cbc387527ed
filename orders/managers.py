"""
Custom managers and querysets for order models.

No business logic should be here - only query operations.
"""

from django.db import models

from .statuses import STATUS_MIGRATION_MAP


class OrderQuerySet(models.QuerySet):
    """Custom queryset for Order model with chainable methods."""

    def with_status(self, status):
        """Get orders currently in one status."""
        return self.filter(status=status)

    def search(self, term):
        """Match order number, customer email or customer name."""
        return self.filter(
            models.Q(order_number__icontains=term)
            | models.Q(customer_email__icontains=term)
            | models.Q(customer_name__icontains=term)
        )

    def with_pre_workflow_status(self):
        """Get orders still carrying a status code from before the current workflow."""
        return self.filter(status__in=list(STATUS_MIGRATION_MAP))


class OrderManager(models.Manager):
    """Custom manager for Order model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return OrderQuerySet(self.model, using=self._db)

    def with_status(self, status):
        """Get orders currently in one status."""
        return self.get_queryset().with_status(status)

    def search(self, term):
        """Match order number, customer email or customer name."""
        return self.get_queryset().search(term)

    def with_pre_workflow_status(self):
        return self.get_queryset().with_pre_workflow_status()
