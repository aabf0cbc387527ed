"""Views for the events calendar."""

import logging

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Event, EventCategory
from .serializers import (
    EventCategorySerializer,
    CategoryReorderSerializer,
    EventReadSerializer,
    EventCreateSerializer,
    EventUpdateSerializer,
    RecurrencePreviewSerializer,
    DateRangeQuerySerializer,
)
from . import services
from .types import EventData, EventUpdateData, RecurrenceRule

logger = logging.getLogger(__name__)


class EventListCreateView(APIView):
    """
    List events within a date range or create a new event.

    GET /api/events/?start=X&end=Y - List events starting in range
    POST /api/events/ - Create an event (a whole series when recurrence_rule is given)
    """

    def get(self, request):
        """List events within a date range."""
        query_serializer = DateRangeQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        events = services.get_events_in_range(
            data['start'],
            data['end'],
            event_type=data.get('event_type'),
            active_only=not data.get('include_inactive', False)
        )

        serializer = EventReadSerializer(events, many=True)
        return Response(serializer.data)

    def post(self, request):
        """Create an event, expanding its recurrence rule into instances."""
        serializer = EventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        category = data.get('category')
        event_data = EventData(
            title=data['title'],
            description=data.get('description', ''),
            event_type=data['event_type'],
            category_id=category.pk if category else None,
            start_date=data['start_date'],
            end_date=data.get('end_date'),
            start_time=data.get('start_time'),
            end_time=data.get('end_time'),
            location=data.get('location', ''),
            max_attendees=data.get('max_attendees'),
            is_active=data.get('is_active', True),
        )
        rule_data = data.get('recurrence_rule')
        rule = RecurrenceRule.from_dict(rule_data) if rule_data else None

        try:
            event, instances_created = services.create_event(event_data, rule)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response_serializer = EventReadSerializer(event)
        return Response({
            'event': response_serializer.data,
            'instances_created': instances_created
        }, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """
    Retrieve, update, or delete an event.

    GET /api/events/{id}/ - Retrieve event
    PATCH /api/events/{id}/ - Update this event only
    DELETE /api/events/{id}/?delete_series=true - Delete event (or its series)
    """

    def get(self, request, pk):
        """Retrieve an event."""
        event = get_object_or_404(Event, pk=pk)
        serializer = EventReadSerializer(event)
        return Response(serializer.data)

    def patch(self, request, pk):
        """Update an event."""
        event = get_object_or_404(Event, pk=pk)
        serializer = EventUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        category = data.get('category')
        cleared = {
            'category_id' if name == 'category' else name
            for name, value in data.items() if value is None
        }
        update_data = EventUpdateData(
            title=data.get('title'),
            description=data.get('description'),
            event_type=data.get('event_type'),
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            start_time=data.get('start_time'),
            end_time=data.get('end_time'),
            location=data.get('location'),
            max_attendees=data.get('max_attendees'),
            category_id=category.pk if category else None,
            is_active=data.get('is_active'),
            cleared=frozenset(cleared),
        )
        try:
            updated_event = services.update_event(event, update_data)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response_serializer = EventReadSerializer(updated_event)
        return Response(response_serializer.data)

    def delete(self, request, pk):
        """Delete an event or its whole series."""
        event = get_object_or_404(Event, pk=pk)
        delete_series = request.query_params.get('delete_series', 'false').lower() == 'true'

        title = event.title
        deleted = services.delete_event(event, delete_series=delete_series)

        return Response({
            'message': f'Event "{title}" has been deleted.',
            'deleted': deleted
        }, status=status.HTTP_200_OK)


class EventToggleActiveView(APIView):
    """
    Show or hide an event on the public calendar.

    POST /api/events/{id}/toggle/
    """

    def post(self, request, pk):
        """Flip is_active and report whether the change was stored."""
        get_object_or_404(Event, pk=pk)
        result = services.toggle_event_active(pk)

        serializer = EventReadSerializer(result.state)
        return Response({
            'event': serializer.data,
            'committed': result.committed
        }, status=status.HTTP_200_OK if result.committed else status.HTTP_409_CONFLICT)


class EventSeriesView(APIView):
    """
    List every event of the series an event belongs to.

    GET /api/events/{id}/series/
    """

    def get(self, request, pk):
        event = get_object_or_404(Event, pk=pk)
        series = services.get_series(event)
        serializer = EventReadSerializer(series, many=True)
        return Response(serializer.data)


class RecurrencePreviewView(APIView):
    """
    Preview the dates a recurrence rule produces, without creating anything.

    POST /api/events/preview/
    """

    def post(self, request):
        serializer = RecurrencePreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        start_date = serializer.validated_data['start_date']
        rule = RecurrenceRule.from_dict(serializer.validated_data['recurrence_rule'])
        dates = services.preview_series(start_date, rule)

        return Response({
            'dates': [d.isoformat() for d in dates],
            'count': len(dates)
        })


class EventCategoryListCreateView(APIView):
    """
    List all event categories or create a new one.

    GET /api/event-categories/?active=true - List categories in display order
    POST /api/event-categories/ - Create a category at the end of the list
    """

    def get(self, request):
        categories = EventCategory.objects.all()
        if request.query_params.get('active', 'false').lower() == 'true':
            categories = categories.active()
        serializer = EventCategorySerializer(categories, many=True)
        return Response(serializer.data)

    def post(self, request):
        serializer = EventCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            category = services.create_category(
                name=data['name'],
                description=data.get('description', ''),
                color=data.get('color', '#10b981'),
                icon=data.get('icon', '')
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        response_serializer = EventCategorySerializer(category)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class EventCategoryReorderView(APIView):
    """
    Store a new category display order.

    POST /api/event-categories/reorder/
    """

    def post(self, request):
        serializer = CategoryReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = services.reorder_categories(serializer.validated_data['ordered_ids'])
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        if not result.committed:
            logger.warning("Category reorder was not stored; returning current order")

        response_serializer = EventCategorySerializer(result.state, many=True)
        return Response({
            'categories': response_serializer.data,
            'committed': result.committed
        }, status=status.HTTP_200_OK if result.committed else status.HTTP_409_CONFLICT)
