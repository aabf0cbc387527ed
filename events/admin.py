"""
Admin configuration for the events app.
"""

from django.contrib import admin
from .models import Event, EventCategory


@admin.register(EventCategory)
class EventCategoryAdmin(admin.ModelAdmin):
    """Admin interface for EventCategory model."""

    list_display = ['name', 'color', 'icon', 'sort_order', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'description']
    ordering = ['sort_order']


class SeriesRoleFilter(admin.SimpleListFilter):
    """Filter events by their place in a recurring series."""

    title = 'series role'
    parameter_name = 'series'

    def lookups(self, request, model_admin):
        return [
            ('one_time', 'One-time'),
            ('parents', 'Series parent'),
            ('instances', 'Series instance'),
        ]

    def queryset(self, request, queryset):
        if self.value() == 'one_time':
            return queryset.one_time()
        if self.value() == 'parents':
            return queryset.parents()
        if self.value() == 'instances':
            return queryset.instances()
        return queryset


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for Event model."""

    list_display = ['title', 'event_type', 'start_date', 'start_time', 'is_active', 'is_recurring', 'parent_event']
    list_filter = ['is_active', 'event_type', SeriesRoleFilter, 'category', 'created_at']
    search_fields = ['title', 'description', 'location']
    date_hierarchy = 'start_date'

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'description', 'event_type', 'category', 'is_active')
        }),
        ('Schedule', {
            'fields': ('start_date', 'end_date', 'start_time', 'end_time')
        }),
        ('Venue', {
            'fields': ('location', 'max_attendees')
        }),
        ('Recurrence', {
            'fields': ('recurrence_rule', 'parent_event')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['recurrence_rule', 'parent_event', 'created_at', 'updated_at']

    @admin.display(boolean=True)
    def is_recurring(self, obj):
        return obj.is_recurring
