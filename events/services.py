"""
Service layer for events calendar business logic.

Every operation that touches storage takes an optional `store` argument; when
omitted the Django-backed store for the model is used.
"""

import logging
from typing import List, Optional, Sequence, Tuple
from datetime import date, timedelta

from .models import Event, EventCategory
from .recurrence import expand
from .store import ModelStore, OptimisticResult, RecordStore, apply_optimistic
from .types import EventData, EventUpdateData, RecurrenceRule

logger = logging.getLogger(__name__)

EVENT_TYPES = {choice for choice, _ in Event.EVENT_TYPE_CHOICES}

# Optional fields a partial update may set back to null.
CLEARABLE_FIELDS = {'end_date', 'start_time', 'end_time', 'max_attendees', 'category_id'}


def event_store() -> RecordStore:
    return ModelStore(Event, select_related=('category',))


def category_store() -> RecordStore:
    return ModelStore(EventCategory)


def preview_series(start_date: date, rule: RecurrenceRule) -> List[date]:
    """Dates a series would occupy, without persisting anything."""
    return expand(start_date, rule)


def create_event(
    data: EventData,
    rule: Optional[RecurrenceRule] = None,
    store: Optional[RecordStore] = None
) -> Tuple[Event, int]:
    """
    Create an event, materializing its whole series when it recurs.

    The first expanded date becomes the parent event (carrying the rule);
    the remaining dates become child events that reference the parent.

    Args:
        data: EventData describing the event
        rule: Optional RecurrenceRule; None or type 'none' creates one event
        store: RecordStore for events

    Returns:
        Tuple of (parent event, number of child events created)

    Raises:
        ValueError: If validation fails
    """
    store = store or event_store()
    _validate_event_data(data.event_type, data.start_date, data.end_date, data.max_attendees)

    if rule is None or not rule.is_recurring:
        event = store.create(**_event_fields(data, data.start_date))
        logger.info("Created event %s on %s", event.pk, data.start_date)
        return event, 0

    dates = expand(data.start_date, rule)
    span = _span(data)

    with store.atomic():
        parent_fields = _event_fields(data, dates[0], span)
        parent_fields['recurrence_rule'] = rule.to_dict()
        parent = store.create(**parent_fields)

        child_rows = []
        for occurrence_date in dates[1:]:
            row = _event_fields(data, occurrence_date, span)
            row['parent_event_id'] = parent.pk
            child_rows.append(row)
        children = store.bulk_create(child_rows)

    logger.info(
        "Created %s series %s: %d occurrence(s) from %s to %s",
        rule.type, parent.pk, len(dates), dates[0], dates[-1]
    )
    return parent, len(children)


def update_event(
    event: Event,
    update_data: EventUpdateData,
    store: Optional[RecordStore] = None
) -> Event:
    """
    Update a single event.

    Fields left as None keep their value; optional fields named in
    `update_data.cleared` are set to null. Series are not re-expanded:
    changing the date of an instance only moves that instance.

    Returns:
        The event as stored after the update

    Raises:
        ValueError: If validation fails or a field that cannot be cleared is named
    """
    store = store or event_store()

    not_clearable = set(update_data.cleared) - CLEARABLE_FIELDS
    if not_clearable:
        raise ValueError(f"Fields cannot be cleared: {', '.join(sorted(not_clearable))}")

    fields = {
        'title': update_data.title,
        'description': update_data.description,
        'event_type': update_data.event_type,
        'start_date': update_data.start_date,
        'end_date': update_data.end_date,
        'start_time': update_data.start_time,
        'end_time': update_data.end_time,
        'location': update_data.location,
        'max_attendees': update_data.max_attendees,
        'category_id': update_data.category_id,
        'is_active': update_data.is_active,
    }
    changes = {name: value for name, value in fields.items() if value is not None}
    changes.update({name: None for name in update_data.cleared})

    _validate_event_data(
        changes.get('event_type', event.event_type),
        changes.get('start_date', event.start_date),
        changes.get('end_date', event.end_date),
        changes.get('max_attendees', event.max_attendees),
    )

    if not changes:
        return event
    return store.update(event.pk, **changes)


def delete_event(
    event: Event,
    delete_series: bool = False,
    store: Optional[RecordStore] = None
) -> int:
    """
    Delete an event, or its whole series.

    Deleting a series parent always removes its instances.

    Args:
        event: Event to delete
        delete_series: If True and the event belongs to a series, delete the
                       parent and every instance

    Returns:
        Number of events deleted
    """
    store = store or event_store()

    with store.atomic():
        if delete_series and event.parent_event_id is not None:
            parent_id = event.parent_event_id
        elif event.recurrence_rule is not None:
            parent_id = event.pk
        else:
            store.delete(event.pk)
            return 1

        deleted = store.delete_where(parent_event_id=parent_id)
        store.delete(parent_id)

    logger.info("Deleted series %s (%d event(s))", parent_id, deleted + 1)
    return deleted + 1


def get_series(event: Event, store: Optional[RecordStore] = None) -> List[Event]:
    """Return the parent of the event's series followed by its instances in date order."""
    store = store or event_store()

    if event.parent_event_id is not None:
        parent = store.get(event.parent_event_id)
    elif event.recurrence_rule is not None:
        parent = event
    else:
        return [event]

    instances = store.filter(parent_event_id=parent.pk, order_by=['start_date'])
    return [parent] + instances


def get_events_in_range(
    start_date: date,
    end_date: date,
    event_type: Optional[str] = None,
    active_only: bool = True,
    store: Optional[RecordStore] = None
) -> List[Event]:
    """
    Get events starting within a date range (inclusive).

    Raises:
        ValueError: If start_date is after end_date
    """
    if start_date > end_date:
        raise ValueError("Start date must not be after end date")

    store = store or event_store()
    lookups = {'start_date__gte': start_date, 'start_date__lte': end_date}
    if active_only:
        lookups['is_active'] = True
    if event_type:
        lookups['event_type'] = event_type
    return store.filter(order_by=['start_date', 'start_time'], **lookups)


def toggle_event_active(event_id, store: Optional[RecordStore] = None) -> OptimisticResult:
    """
    Flip an event's visibility on the public calendar.

    Returns:
        OptimisticResult whose state is the event as it should now be shown
    """
    store = store or event_store()
    event = store.get(event_id)
    event.is_active = not event.is_active

    return apply_optimistic(
        event,
        commit=lambda e: store.update(e.pk, is_active=e.is_active),
        refresh=lambda: store.get(event_id),
    )


def create_category(
    name: str,
    description: str = '',
    color: str = '#10b981',
    icon: str = '',
    store: Optional[RecordStore] = None
) -> EventCategory:
    """Create a category placed after the existing ones."""
    store = store or category_store()
    if not name.strip():
        raise ValueError("Category name is required")

    existing = store.filter()
    sort_order = max((c.sort_order for c in existing), default=0) + 1
    return store.create(
        name=name.strip(),
        description=description,
        color=color,
        icon=icon,
        sort_order=sort_order,
    )


def reorder_categories(
    ordered_ids: Sequence[int],
    store: Optional[RecordStore] = None
) -> OptimisticResult:
    """
    Persist a new display order for categories (drag-and-drop reordering).

    The new order is applied locally first; if any write fails the returned
    state is re-read from the store instead.

    Raises:
        ValueError: If ordered_ids names an unknown category or repeats one
    """
    store = store or category_store()
    current = {c.pk: c for c in store.filter()}

    if len(set(ordered_ids)) != len(ordered_ids):
        raise ValueError("Category ids must not repeat")
    unknown = [pk for pk in ordered_ids if pk not in current]
    if unknown:
        raise ValueError(f"Unknown category ids: {unknown}")

    requested = set(ordered_ids)
    reordered = [current[pk] for pk in ordered_ids]
    reordered += sorted(
        (c for pk, c in current.items() if pk not in requested),
        key=lambda c: c.sort_order
    )
    for position, category in enumerate(reordered, start=1):
        category.sort_order = position

    def commit(categories):
        with store.atomic():
            return [
                store.update(category.pk, sort_order=category.sort_order)
                for category in categories
            ]

    def refresh():
        return store.filter(order_by=['sort_order', 'name'])

    return apply_optimistic(reordered, commit=commit, refresh=refresh)


def _event_fields(data: EventData, start_date: date, span: Optional[timedelta] = None) -> dict:
    """Field values for one stored occurrence of an event."""
    if span is None:
        span = _span(data)
    return {
        'title': data.title,
        'description': data.description,
        'event_type': data.event_type,
        'category_id': data.category_id,
        'start_date': start_date,
        'end_date': start_date + span if span is not None else None,
        'start_time': data.start_time,
        'end_time': data.end_time,
        'location': data.location,
        'max_attendees': data.max_attendees,
        'is_active': data.is_active,
    }


def _span(data: EventData) -> Optional[timedelta]:
    """Length of a multi-day event, carried over to every occurrence."""
    if data.end_date is None:
        return None
    return data.end_date - data.start_date


def _validate_event_data(
    event_type: str,
    start_date: date,
    end_date: Optional[date],
    max_attendees: Optional[int]
) -> None:
    """Validate event creation and update data."""
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown event type: {event_type}")

    if end_date and end_date < start_date:
        raise ValueError("End date cannot be before start date")

    if max_attendees is not None and max_attendees <= 0:
        raise ValueError("Max attendees must be positive")

