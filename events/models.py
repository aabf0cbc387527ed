"""
Models for the events calendar.

Recurring events are materialized when they are created:
- the first occurrence is the parent Event and carries the recurrence rule
- every later occurrence is a child Event pointing back at its parent
"""

from django.db import models
from django.core.exceptions import ValidationError

from .managers import EventCategoryManager, EventManager


class EventCategory(models.Model):
    """Groups events for the public calendar (colour, icon, display order)."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    color = models.CharField(max_length=20, default='#10b981')
    icon = models.CharField(max_length=50, blank=True, default='')
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EventCategoryManager()

    class Meta:
        ordering = ['sort_order', 'name']
        verbose_name_plural = 'event categories'
        indexes = [
            models.Index(fields=['sort_order']),
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return self.name


class Event(models.Model):
    """
    A calendar event: one-time, the parent of a recurring series, or one of
    its generated instances.

    One-time events: recurrence_rule = null, parent_event = null
    Series parents: recurrence_rule set, parent_event = null
    Series instances: recurrence_rule = null, parent_event set
    """

    EVENT_TYPE_CHOICES = [
        ('workshop', 'Workshop'),
        ('open_hours', 'Open Hours'),
        ('farm_event', 'Farm Event'),
        ('shipping', 'Shipping Day'),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    event_type = models.CharField(max_length=20, choices=EVENT_TYPE_CHOICES)
    category = models.ForeignKey(
        EventCategory,
        on_delete=models.SET_NULL,
        related_name='events',
        null=True,
        blank=True,
    )

    start_date = models.DateField()
    end_date = models.DateField(
        null=True,
        blank=True,
        help_text="Last day of a multi-day event (null = single day)"
    )
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True, default='')
    max_attendees = models.PositiveIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    recurrence_rule = models.JSONField(
        null=True,
        blank=True,
        help_text="Recurrence rule (series parents only)"
    )
    parent_event = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='instances',
        null=True,
        blank=True,
        help_text="First event of the series (generated instances only)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EventManager()

    class Meta:
        ordering = ['start_date', 'start_time']
        indexes = [
            models.Index(fields=['start_date']),
            models.Index(fields=['event_type']),
            models.Index(fields=['is_active']),
            models.Index(fields=['parent_event']),
        ]

    def __str__(self):
        return f"{self.title} - {self.start_date.isoformat()}"

    @property
    def is_recurring(self):
        """Check if this event belongs to a recurring series."""
        return self.recurrence_rule is not None or self.parent_event_id is not None

    def clean(self):
        """Validate event data."""
        super().clean()

        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({
                'end_date': 'End date cannot be before start date.'
            })

        if self.parent_event_id is not None and self.recurrence_rule is not None:
            raise ValidationError({
                'recurrence_rule': 'Series instances cannot carry their own recurrence rule.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)
