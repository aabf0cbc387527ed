"""
Custom managers and querysets for event models.

QuerySets define chainable query methods.
Managers use QuerySets to enable method chaining.
No business logic should be here - only query operations.
"""

from django.db import models


class EventCategoryQuerySet(models.QuerySet):
    """Custom queryset for EventCategory model with chainable methods."""

    def active(self):
        """Get all active categories."""
        return self.filter(is_active=True)


class EventCategoryManager(models.Manager):
    """Custom manager for EventCategory model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return EventCategoryQuerySet(self.model, using=self._db)

    def active(self):
        """Get all active categories."""
        return self.get_queryset().active()


class EventQuerySet(models.QuerySet):
    """Custom queryset for Event model with chainable methods."""

    def one_time(self):
        """Get events that do not belong to a series."""
        return self.filter(parent_event__isnull=True, recurrence_rule__isnull=True)

    def parents(self):
        """Get first occurrences of recurring series."""
        return self.filter(parent_event__isnull=True, recurrence_rule__isnull=False)

    def instances(self):
        """Get generated instances of recurring series."""
        return self.filter(parent_event__isnull=False)


class EventManager(models.Manager):
    """Custom manager for Event model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return EventQuerySet(self.model, using=self._db)

    def one_time(self):
        return self.get_queryset().one_time()

    def parents(self):
        """Get first occurrences of recurring series."""
        return self.get_queryset().parents()

    def instances(self):
        return self.get_queryset().instances()
