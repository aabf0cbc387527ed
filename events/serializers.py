"""
Serializers for the events calendar.
"""

from rest_framework import serializers

from .models import Event, EventCategory
from .types import END_AFTER, END_ON_DATE, END_TYPES, RECURRENCE_TYPES


class EventCategorySerializer(serializers.ModelSerializer):
    """Serializer for reading/creating EventCategory."""

    class Meta:
        model = EventCategory
        fields = [
            'id',
            'name',
            'description',
            'color',
            'icon',
            'sort_order',
            'is_active',
        ]
        read_only_fields = ['id', 'sort_order']


class CategoryReorderSerializer(serializers.Serializer):
    """Serializer for a drag-and-drop category reorder."""

    ordered_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False
    )


class RecurrenceRuleSerializer(serializers.Serializer):
    """Serializer for the recurrence rule submitted with a new event."""

    type = serializers.ChoiceField(choices=RECURRENCE_TYPES, default='none')
    interval = serializers.IntegerField(min_value=1, default=1)
    daysOfWeek = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6),
        required=False,
        default=list
    )
    endType = serializers.ChoiceField(choices=END_TYPES, default='never')
    endAfterOccurrences = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    endDate = serializers.DateField(required=False, allow_null=True)

    def validate(self, data):
        """Require the field the chosen end condition depends on."""
        if data['endType'] == END_AFTER and not data.get('endAfterOccurrences'):
            raise serializers.ValidationError({
                'endAfterOccurrences': 'Required when the series ends after a number of occurrences.'
            })
        if data['endType'] == END_ON_DATE and not data.get('endDate'):
            raise serializers.ValidationError({
                'endDate': 'Required when the series ends on a date.'
            })
        return data


class EventReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying Event (output)."""

    category_name = serializers.CharField(source='category.name', allow_null=True, default=None)
    category_color = serializers.CharField(source='category.color', allow_null=True, default=None)
    is_recurring = serializers.BooleanField(read_only=True)

    class Meta:
        model = Event
        fields = [
            'id',
            'title',
            'description',
            'event_type',
            'category',
            'category_name',
            'category_color',
            'start_date',
            'end_date',
            'start_time',
            'end_time',
            'location',
            'max_attendees',
            'is_active',
            'recurrence_rule',
            'parent_event',
            'is_recurring',
            'created_at',
            'updated_at',
        ]


class EventCreateSerializer(serializers.Serializer):
    """Serializer for creating an event, optionally as a recurring series."""

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    event_type = serializers.ChoiceField(choices=Event.EVENT_TYPE_CHOICES)
    category = serializers.PrimaryKeyRelatedField(
        queryset=EventCategory.objects.all(),
        required=False,
        allow_null=True
    )
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.TimeField(required=False, allow_null=True)
    end_time = serializers.TimeField(required=False, allow_null=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    max_attendees = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    recurrence_rule = RecurrenceRuleSerializer(required=False, allow_null=True)

    def validate(self, data):
        """Validate creation data."""
        start_date = data.get('start_date')
        end_date = data.get('end_date')

        if end_date and end_date < start_date:
            raise serializers.ValidationError({
                'end_date': 'End date cannot be before start date.'
            })

        return data


class EventUpdateSerializer(serializers.Serializer):
    """
    Serializer for updating a single event.

    Sending null for an optional field clears it; omitted fields are unchanged.
    """

    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    event_type = serializers.ChoiceField(choices=Event.EVENT_TYPE_CHOICES, required=False)
    category = serializers.PrimaryKeyRelatedField(
        queryset=EventCategory.objects.all(),
        required=False,
        allow_null=True
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.TimeField(required=False, allow_null=True)
    end_time = serializers.TimeField(required=False, allow_null=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    max_attendees = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class RecurrencePreviewSerializer(serializers.Serializer):
    """Serializer for previewing the dates of a series before creating it."""

    start_date = serializers.DateField()
    recurrence_rule = RecurrenceRuleSerializer()


class DateRangeQuerySerializer(serializers.Serializer):
    """Serializer for date range query parameters."""

    start = serializers.DateField(required=True)
    end = serializers.DateField(required=True)
    event_type = serializers.ChoiceField(
        choices=Event.EVENT_TYPE_CHOICES,
        required=False,
        allow_null=True
    )
    include_inactive = serializers.BooleanField(required=False, default=False)

    def validate(self, data):
        """Ensure start is not after end."""
        if data['start'] > data['end']:
            raise serializers.ValidationError(
                "Start date must not be after end date."
            )
        return data
