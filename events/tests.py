"""
Tests for the events calendar.

Tests cover:
- Recurrence expansion (pure date generation)
- RecurrenceRule parsing
- Service layer against an in-memory store and against the database
- Event and category API endpoints
- Management commands
"""

import copy
from contextlib import nullcontext
from datetime import date, time, timedelta
from io import StringIO
from types import SimpleNamespace

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from . import services
from .models import Event, EventCategory
from .recurrence import expand, horizon_date, to_js_weekday
from .store import RecordNotFound, StoreError
from .types import EventData, EventUpdateData, RecurrenceRule


def weekly(days=(), interval=1, **kwargs):
    return RecurrenceRule(type='weekly', interval=interval, days_of_week=frozenset(days), **kwargs)


class InMemoryStore:
    """RecordStore keeping rows in a dict; hands out copies like a real backend."""

    name = 'memory'

    def __init__(self, defaults=None, fail_updates=False):
        self.rows = {}
        self.defaults = defaults or {}
        self.fail_updates = fail_updates
        self._next_id = 1

    def atomic(self):
        return nullcontext()

    def create(self, **fields):
        row = SimpleNamespace(**{**self.defaults, **fields})
        row.pk = row.id = self._next_id
        self._next_id += 1
        self.rows[row.pk] = row
        return copy.copy(row)

    def bulk_create(self, rows):
        return [self.create(**row) for row in rows]

    def get(self, pk):
        if pk not in self.rows:
            raise RecordNotFound(f"memory record {pk} does not exist")
        return copy.copy(self.rows[pk])

    def filter(self, order_by=None, **lookups):
        matches = [
            copy.copy(row) for row in self.rows.values()
            if all(_matches(row, key, value) for key, value in lookups.items())
        ]
        for key in reversed(order_by or []):
            name = key.lstrip('-')
            matches.sort(
                key=lambda row: (getattr(row, name) is None, getattr(row, name)),
                reverse=key.startswith('-')
            )
        return matches

    def update(self, pk, **fields):
        if self.fail_updates:
            raise StoreError("update rejected")
        for key, value in fields.items():
            setattr(self.rows[pk], key, value)
        return copy.copy(self.rows[pk])

    def delete(self, pk):
        del self.rows[pk]

    def delete_where(self, **lookups):
        doomed = [row.pk for row in self.filter(**lookups)]
        for pk in doomed:
            del self.rows[pk]
        return len(doomed)


def _matches(row, lookup, value):
    """Evaluate one Django-style lookup (exact, __in, __gte, __lte) against a row."""
    name, _, op = lookup.partition('__')
    actual = getattr(row, name)
    if op == 'in':
        return actual in value
    if op == 'gte':
        return actual >= value
    if op == 'lte':
        return actual <= value
    return actual == value


def event_memory_store(**kwargs):
    return InMemoryStore(defaults={'recurrence_rule': None, 'parent_event_id': None}, **kwargs)


class RecurrenceExpansionTests(SimpleTestCase):
    """Test expansion of recurrence rules into dates."""

    def test_non_recurring_rule_yields_start_date_only(self):
        """Test that type 'none' returns exactly the start date."""
        start = date(2026, 3, 14)
        self.assertEqual(expand(start, RecurrenceRule()), [start])

    def test_weekly_monday_wednesday_friday(self):
        """Test the Mon/Wed/Fri pattern ending after five occurrences."""
        rule = weekly(days=[1, 3, 5], end_type='after', end_after_occurrences=5)

        dates = expand(date(2026, 1, 5), rule)

        self.assertEqual(dates, [
            date(2026, 1, 5),
            date(2026, 1, 7),
            date(2026, 1, 9),
            date(2026, 1, 12),
            date(2026, 1, 14),
        ])

    def test_weekly_without_days_uses_start_weekday(self):
        """Test that an empty weekday set repeats on the start date's weekday."""
        rule = weekly(end_type='after', end_after_occurrences=3)

        dates = expand(date(2026, 1, 5), rule)

        self.assertEqual(dates, [date(2026, 1, 5), date(2026, 1, 12), date(2026, 1, 19)])

    def test_weekly_first_date_is_first_matching_weekday(self):
        """Test that a series starting mid-week begins on the next selected weekday."""
        rule = weekly(days=[1], end_type='after', end_after_occurrences=2)

        dates = expand(date(2026, 1, 7), rule)  # Wednesday

        self.assertEqual(dates, [date(2026, 1, 12), date(2026, 1, 19)])

    def test_weekly_interval_skips_weeks(self):
        """Test every other week on Monday and Wednesday."""
        rule = weekly(days=[1, 3], interval=2, end_type='after', end_after_occurrences=4)

        dates = expand(date(2026, 1, 5), rule)

        self.assertEqual(dates, [
            date(2026, 1, 5),
            date(2026, 1, 7),
            date(2026, 1, 19),
            date(2026, 1, 21),
        ])

    def test_weekly_dates_match_selected_weekdays(self):
        """Test that every weekly date falls on a selected weekday."""
        rule = weekly(days=[0, 2, 6], interval=3)

        dates = expand(date(2026, 2, 3), rule)

        self.assertTrue(dates)
        for d in dates:
            self.assertIn(to_js_weekday(d), {0, 2, 6})

    def test_weekly_with_no_match_before_end_falls_back_to_start(self):
        """Test that a weekly rule with nothing inside its bound keeps the start date."""
        rule = weekly(days=[1], end_type='on_date', end_date=date(2026, 1, 8))

        self.assertEqual(expand(date(2026, 1, 7), rule), [date(2026, 1, 7)])

    def test_daily_interval(self):
        """Test that the k-th daily date is start + k * interval days."""
        start = date(2026, 4, 1)
        rule = RecurrenceRule(type='daily', interval=3, end_type='after', end_after_occurrences=10)

        dates = expand(start, rule)

        self.assertEqual(len(dates), 10)
        for k, d in enumerate(dates):
            self.assertEqual(d, start + timedelta(days=3 * k))

    def test_daily_never_is_capped(self):
        """Test that an open-ended daily series stops at the occurrence cap."""
        start = date(2026, 1, 1)
        dates = expand(start, RecurrenceRule(type='daily'))

        self.assertEqual(len(dates), 365)
        self.assertEqual(dates[-1], date(2026, 12, 31))

    def test_on_date_end_is_inclusive(self):
        """Test that the end date itself is part of the series."""
        rule = RecurrenceRule(type='daily', end_type='on_date', end_date=date(2026, 1, 20))

        dates = expand(date(2026, 1, 5), rule)

        self.assertEqual(len(dates), 16)
        self.assertEqual(dates[-1], date(2026, 1, 20))

    def test_on_date_beyond_horizon_is_clipped(self):
        """Test that an end date past the horizon still stops at twelve months."""
        start = date(2026, 1, 5)
        rule = weekly(end_type='on_date', end_date=date(2030, 1, 1))

        dates = expand(start, rule)

        self.assertLessEqual(dates[-1], horizon_date(start))
        self.assertEqual(dates[-1], date(2027, 1, 4))

    def test_monthly_end_of_month_is_clamped(self):
        """Test that Jan 31 clamps to the last day of shorter months without drifting."""
        dates = expand(date(2026, 1, 31), RecurrenceRule(type='monthly'))

        self.assertEqual(dates[:4], [
            date(2026, 1, 31),
            date(2026, 2, 28),
            date(2026, 3, 31),
            date(2026, 4, 30),
        ])
        self.assertEqual(len(dates), 13)
        self.assertEqual(dates[-1], date(2027, 1, 31))

    def test_monthly_leap_february(self):
        """Test that Jan 31 lands on Feb 29 in a leap year."""
        rule = RecurrenceRule(type='monthly', end_type='after', end_after_occurrences=2)

        self.assertEqual(expand(date(2028, 1, 31), rule), [date(2028, 1, 31), date(2028, 2, 29)])

    def test_monthly_interval_months(self):
        """Test that the k-th monthly date is k * interval months after the start."""
        start = date(2026, 11, 15)
        dates = expand(start, RecurrenceRule(type='monthly', interval=2))

        self.assertEqual(len(dates), 7)
        for k, d in enumerate(dates):
            months = start.month - 1 + 2 * k
            self.assertEqual((d.year, d.month, d.day), (start.year + months // 12, months % 12 + 1, 15))

    def test_end_after_bounds_length(self):
        """Test that an 'after' rule never returns more dates than requested."""
        rule = RecurrenceRule(type='monthly', interval=5, end_type='after', end_after_occurrences=10)

        self.assertEqual(len(expand(date(2026, 1, 1), rule)), 3)

    def test_zero_interval_is_clamped(self):
        """Test that interval 0 behaves as interval 1 instead of looping forever."""
        rule = RecurrenceRule(type='daily', interval=0, end_type='after', end_after_occurrences=3)

        self.assertEqual(
            expand(date(2026, 1, 1), rule),
            [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)]
        )

    def test_zero_occurrences_is_clamped(self):
        """Test that ending after 0 occurrences still yields the first date."""
        rule = RecurrenceRule(type='daily', end_type='after', end_after_occurrences=0)

        self.assertEqual(expand(date(2026, 1, 1), rule), [date(2026, 1, 1)])

    def test_end_date_before_start(self):
        """Test that an end date before the start collapses to the start date."""
        rule = RecurrenceRule(type='daily', end_type='on_date', end_date=date(2025, 12, 1))

        self.assertEqual(expand(date(2026, 1, 1), rule), [date(2026, 1, 1)])

    def test_never_passes_horizon(self):
        """Test that no rule produces a date past twelve months from the start."""
        start = date(2026, 5, 31)
        rules = [
            RecurrenceRule(type='daily', interval=2),
            weekly(days=[0, 6]),
            RecurrenceRule(type='monthly'),
            RecurrenceRule(type='daily', end_type='after', end_after_occurrences=1000),
        ]
        for rule in rules:
            dates = expand(start, rule)
            self.assertLessEqual(dates[-1], horizon_date(start))
            self.assertEqual(dates, sorted(set(dates)))

    def test_expand_is_repeatable(self):
        """Test that expanding twice gives identical results."""
        rule = weekly(days=[2, 4], interval=2)
        start = date(2026, 6, 1)

        self.assertEqual(expand(start, rule), expand(start, rule))


class RecurrenceRuleTests(SimpleTestCase):
    """Test RecurrenceRule construction and its stored form."""

    def test_from_stored_json(self):
        """Test parsing the camelCase form stored on events."""
        rule = RecurrenceRule.from_dict({
            'type': 'weekly',
            'interval': 2,
            'daysOfWeek': [1, 3],
            'endType': 'on_date',
            'endDate': '2026-06-30',
        })

        self.assertEqual(rule.days_of_week, frozenset({1, 3}))
        self.assertEqual(rule.end_date, date(2026, 6, 30))
        self.assertEqual(RecurrenceRule.from_dict(rule.to_dict()), rule)

    def test_from_snake_case(self):
        """Test parsing snake_case keys."""
        rule = RecurrenceRule.from_dict({'type': 'daily', 'end_type': 'after', 'end_after_occurrences': 4})

        self.assertEqual(rule.end_type, 'after')
        self.assertEqual(rule.end_after_occurrences, 4)

    def test_malformed_stored_values_fall_back(self):
        """Test that bad stored values are replaced rather than rejected."""
        rule = RecurrenceRule.from_dict({
            'type': 'fortnightly',
            'interval': 0,
            'daysOfWeek': [1, 9],
            'endType': 'someday',
        })

        self.assertEqual(rule, RecurrenceRule(type='none', days_of_week=frozenset({1})))

        rule = RecurrenceRule.from_dict({'type': 'weekly', 'interval': -3, 'daysOfWeek': [8]})
        self.assertEqual(rule.interval, 1)
        self.assertEqual(rule.days_of_week, frozenset())

    def test_non_numeric_stored_values_fall_back(self):
        """Test that values int() cannot read are replaced with defaults."""
        self.assertEqual(RecurrenceRule.from_dict({'type': 'daily', 'interval': 'two'}).interval, 1)

        rule = RecurrenceRule.from_dict({
            'type': 'weekly',
            'interval': None,
            'daysOfWeek': ['mon', 3, None],
            'endType': 'after',
            'endAfterOccurrences': 'five',
            'endDate': 'not-a-date',
        })

        self.assertEqual(rule.interval, 1)
        self.assertEqual(rule.days_of_week, frozenset({3}))
        self.assertIsNone(rule.end_after_occurrences)
        self.assertIsNone(rule.end_date)
        self.assertEqual(expand(date(2026, 1, 5), rule)[:2], [date(2026, 1, 7), date(2026, 1, 14)])

    def test_empty_is_not_recurring(self):
        self.assertFalse(RecurrenceRule.from_dict(None).is_recurring)

    def test_unknown_type_rejected(self):
        """Test that an unknown recurrence type raises ValueError."""
        with self.assertRaises(ValueError):
            RecurrenceRule(type='yearly')

    def test_weekday_out_of_range_rejected(self):
        with self.assertRaises(ValueError):
            weekly(days=[7])


class EventServiceStoreTests(SimpleTestCase):
    """Test event services against an injected in-memory store."""

    def setUp(self):
        self.store = event_memory_store()
        self.data = EventData(
            title="Seedling Pickup",
            event_type='shipping',
            start_date=date(2026, 1, 5),
            start_time=time(9, 0),
        )

    def test_series_persists_parent_and_children(self):
        """Test that a series stores one parent with the rule and linked children."""
        rule = weekly(days=[1, 3, 5], end_type='after', end_after_occurrences=5)

        parent, created = services.create_event(self.data, rule, store=self.store)

        self.assertEqual(created, 4)
        self.assertEqual(len(self.store.rows), 5)
        self.assertEqual(parent.recurrence_rule, rule.to_dict())
        self.assertEqual(parent.start_date, date(2026, 1, 5))

        children = self.store.filter(parent_event_id=parent.pk, order_by=['start_date'])
        self.assertEqual(
            [c.start_date for c in children],
            [date(2026, 1, 7), date(2026, 1, 9), date(2026, 1, 12), date(2026, 1, 14)]
        )
        for child in children:
            self.assertIsNone(child.recurrence_rule)
            self.assertEqual(child.start_time, time(9, 0))

    def test_non_recurring_event_has_no_children(self):
        """Test that a 'none' rule stores a single event."""
        event, created = services.create_event(self.data, RecurrenceRule(), store=self.store)

        self.assertEqual(created, 0)
        self.assertEqual(len(self.store.rows), 1)
        self.assertIsNone(event.recurrence_rule)

    def test_multi_day_span_is_kept_on_instances(self):
        """Test that every instance of a two-day event also lasts two days."""
        self.data.end_date = date(2026, 1, 6)
        rule = weekly(end_type='after', end_after_occurrences=3)

        services.create_event(self.data, rule, store=self.store)

        for row in self.store.rows.values():
            self.assertEqual(row.end_date - row.start_date, timedelta(days=1))

    def test_invalid_event_type_stores_nothing(self):
        """Test that validation fails before anything is written."""
        self.data.event_type = 'concert'

        with self.assertRaises(ValueError):
            services.create_event(self.data, weekly(), store=self.store)
        self.assertEqual(self.store.rows, {})

    def test_delete_series_from_instance(self):
        """Test that deleting a series through one instance removes all of it."""
        parent, _ = services.create_event(
            self.data, weekly(end_type='after', end_after_occurrences=4), store=self.store
        )
        child = self.store.filter(parent_event_id=parent.pk)[0]

        deleted = services.delete_event(child, delete_series=True, store=self.store)

        self.assertEqual(deleted, 4)
        self.assertEqual(self.store.rows, {})

    def test_delete_single_instance(self):
        """Test that deleting one instance leaves the rest of the series."""
        parent, _ = services.create_event(
            self.data, weekly(end_type='after', end_after_occurrences=4), store=self.store
        )
        child = self.store.filter(parent_event_id=parent.pk)[0]

        self.assertEqual(services.delete_event(child, store=self.store), 1)
        self.assertEqual(len(self.store.rows), 3)

    def test_update_does_not_reexpand(self):
        """Test that moving one instance only changes that instance."""
        parent, _ = services.create_event(
            self.data, weekly(end_type='after', end_after_occurrences=3), store=self.store
        )
        child = self.store.filter(parent_event_id=parent.pk)[0]

        services.update_event(child, EventUpdateData(start_date=date(2026, 1, 13)), store=self.store)

        self.assertEqual(len(self.store.rows), 3)
        self.assertEqual(self.store.get(child.pk).start_date, date(2026, 1, 13))

    def test_update_rejects_end_before_start(self):
        event, _ = services.create_event(self.data, store=self.store)

        with self.assertRaises(ValueError):
            services.update_event(event, EventUpdateData(end_date=date(2026, 1, 1)), store=self.store)

    def test_update_clears_optional_fields(self):
        """Test that fields named in `cleared` are set back to null."""
        self.data.end_date = date(2026, 1, 6)
        event, _ = services.create_event(self.data, store=self.store)

        updated = services.update_event(
            event, EventUpdateData(cleared=frozenset({'end_date', 'start_time'})), store=self.store
        )

        self.assertIsNone(updated.end_date)
        self.assertIsNone(self.store.get(event.pk).start_time)
        self.assertEqual(self.store.get(event.pk).title, "Seedling Pickup")

    def test_update_rejects_clearing_required_field(self):
        event, _ = services.create_event(self.data, store=self.store)

        with self.assertRaises(ValueError):
            services.update_event(event, EventUpdateData(cleared=frozenset({'title'})), store=self.store)

    def test_events_in_range(self):
        """Test range queries through the injected store."""
        parent, _ = services.create_event(
            self.data, weekly(end_type='after', end_after_occurrences=4), store=self.store
        )
        hidden = self.store.filter(parent_event_id=parent.pk, order_by=['start_date'])[0]
        services.update_event(hidden, EventUpdateData(is_active=False), store=self.store)

        visible = services.get_events_in_range(date(2026, 1, 10), date(2026, 1, 31), store=self.store)
        everything = services.get_events_in_range(
            date(2026, 1, 10), date(2026, 1, 31), active_only=False, store=self.store
        )
        workshops = services.get_events_in_range(
            date(2026, 1, 1), date(2026, 1, 31), event_type='workshop', store=self.store
        )

        self.assertEqual([e.start_date for e in visible], [date(2026, 1, 19), date(2026, 1, 26)])
        self.assertEqual(
            [e.start_date for e in everything],
            [date(2026, 1, 12), date(2026, 1, 19), date(2026, 1, 26)]
        )
        self.assertEqual(workshops, [])

    def test_toggle_commits(self):
        """Test that a successful toggle returns the new local state."""
        event, _ = services.create_event(self.data, store=self.store)

        result = services.toggle_event_active(event.pk, store=self.store)

        self.assertTrue(result.committed)
        self.assertFalse(result.state.is_active)
        self.assertFalse(self.store.get(event.pk).is_active)

    def test_toggle_failure_returns_fresh_state(self):
        """Test that a rejected toggle reports the stored state instead."""
        event, _ = services.create_event(self.data, store=self.store)
        self.store.fail_updates = True

        result = services.toggle_event_active(event.pk, store=self.store)

        self.assertFalse(result.committed)
        self.assertTrue(result.state.is_active)


class CategoryReorderStoreTests(SimpleTestCase):
    """Test drag-and-drop category reordering against an in-memory store."""

    def setUp(self):
        self.store = InMemoryStore()
        self.workshop = services.create_category('Workshop', store=self.store)
        self.open_hours = services.create_category('Open Hours', store=self.store)
        self.shipping = services.create_category('Shipping Day', store=self.store)

    def test_new_categories_append(self):
        self.assertEqual(
            [self.workshop.sort_order, self.open_hours.sort_order, self.shipping.sort_order],
            [1, 2, 3]
        )

    def test_reorder_commits(self):
        """Test that a reorder stores consecutive positions."""
        result = services.reorder_categories(
            [self.shipping.pk, self.workshop.pk, self.open_hours.pk], store=self.store
        )

        self.assertTrue(result.committed)
        self.assertEqual([c.name for c in result.state], ['Shipping Day', 'Workshop', 'Open Hours'])
        self.assertEqual(self.store.get(self.shipping.pk).sort_order, 1)

    def test_partial_reorder_keeps_remaining_after(self):
        """Test that categories left out of the request follow in their old order."""
        result = services.reorder_categories([self.shipping.pk], store=self.store)

        self.assertEqual([c.name for c in result.state], ['Shipping Day', 'Workshop', 'Open Hours'])

    def test_reorder_failure_rolls_back(self):
        """Test that a failed write returns the order still in the store."""
        self.store.fail_updates = True

        result = services.reorder_categories(
            [self.shipping.pk, self.workshop.pk, self.open_hours.pk], store=self.store
        )

        self.assertFalse(result.committed)
        self.assertEqual([c.name for c in result.state], ['Workshop', 'Open Hours', 'Shipping Day'])

    def test_reorder_unknown_id(self):
        with self.assertRaises(ValueError):
            services.reorder_categories([self.workshop.pk, 999], store=self.store)

    def test_blank_name_rejected(self):
        with self.assertRaises(ValueError):
            services.create_category('  ', store=self.store)


class EventModelTests(TestCase):
    """Test Event model and validation."""

    def test_end_date_before_start_rejected(self):
        """Test that end_date cannot precede start_date."""
        with self.assertRaises(ValidationError):
            Event.objects.create(
                title="Plant Sale",
                event_type='farm_event',
                start_date=date(2026, 4, 10),
                end_date=date(2026, 4, 9),
            )

    def test_instance_cannot_carry_rule(self):
        """Test that a child event cannot have its own recurrence rule."""
        parent = Event.objects.create(
            title="Open Hours",
            event_type='open_hours',
            start_date=date(2026, 4, 4),
            recurrence_rule=weekly().to_dict(),
        )
        with self.assertRaises(ValidationError):
            Event.objects.create(
                title="Open Hours",
                event_type='open_hours',
                start_date=date(2026, 4, 11),
                parent_event=parent,
                recurrence_rule=weekly().to_dict(),
            )

    def test_series_roles(self):
        """Test the one-time, parent and instance querysets."""
        parent = Event.objects.create(
            title="Open Hours",
            event_type='open_hours',
            start_date=date(2026, 4, 4),
            recurrence_rule=weekly(days=[6]).to_dict(),
        )
        instance = Event.objects.create(
            title="Open Hours",
            event_type='open_hours',
            start_date=date(2026, 4, 11),
            parent_event=parent,
        )
        single = Event.objects.create(title="Plant Sale", event_type='farm_event', start_date=date(2026, 4, 18))

        self.assertEqual(list(Event.objects.parents()), [parent])
        self.assertEqual(list(Event.objects.instances()), [instance])
        self.assertEqual(list(Event.objects.one_time()), [single])
        self.assertEqual(RecurrenceRule.from_dict(parent.recurrence_rule), weekly(days=[6]))


class EventServiceDatabaseTests(TestCase):
    """Test event services with the default Django-backed store."""

    def setUp(self):
        self.data = EventData(
            title="Container Gardening Workshop",
            event_type='workshop',
            start_date=date(2026, 1, 5),
            start_time=time(11, 0),
            end_time=time(13, 0),
            location="Education Center",
        )

    def test_create_series(self):
        """Test that a series is stored as a parent with linked instances."""
        rule = weekly(days=[1, 3, 5], end_type='after', end_after_occurrences=5)

        parent, created = services.create_event(self.data, rule)

        self.assertEqual(created, 4)
        self.assertEqual(Event.objects.count(), 5)
        self.assertEqual(Event.objects.parents().get(), parent)
        self.assertEqual(Event.objects.instances().filter(parent_event=parent).count(), 4)
        self.assertEqual(len(services.get_series(parent)), 5)

    def test_series_lookup_from_instance(self):
        parent, _ = services.create_event(self.data, weekly(end_type='after', end_after_occurrences=3))
        instance = Event.objects.instances().last()

        series = services.get_series(instance)

        self.assertEqual(series[0], parent)
        self.assertEqual([e.start_date for e in series], [date(2026, 1, 5), date(2026, 1, 12), date(2026, 1, 19)])

    def test_deleting_parent_removes_instances(self):
        """Test that deleting a series parent cascades to its instances."""
        parent, _ = services.create_event(self.data, weekly(end_type='after', end_after_occurrences=3))

        services.delete_event(parent)

        self.assertEqual(Event.objects.count(), 0)

    def test_events_in_range_skips_inactive(self):
        """Test range queries only return visible events by default."""
        parent, _ = services.create_event(self.data, weekly(end_type='after', end_after_occurrences=3))
        services.toggle_event_active(parent.pk)

        visible = services.get_events_in_range(date(2026, 1, 1), date(2026, 1, 31))
        everything = services.get_events_in_range(date(2026, 1, 1), date(2026, 1, 31), active_only=False)

        self.assertEqual(len(visible), 2)
        self.assertEqual(len(everything), 3)

    def test_events_in_range_rejects_inverted_range(self):
        with self.assertRaises(ValueError):
            services.get_events_in_range(date(2026, 2, 1), date(2026, 1, 1))

    def test_reorder_categories(self):
        """Test reordering categories through the database store."""
        first = services.create_category('Workshop')
        second = services.create_category('Farm Event')

        result = services.reorder_categories([second.pk, first.pk])

        self.assertTrue(result.committed)
        self.assertEqual(list(EventCategory.objects.values_list('name', flat=True)), ['Farm Event', 'Workshop'])


class EventAPITests(APITestCase):
    """Test event API endpoints."""

    def setUp(self):
        """Set up test client."""
        self.client = APIClient()

    def _create_series(self):
        return self.client.post('/api/events/', {
            "title": "Weekly Shipping",
            "event_type": "shipping",
            "start_date": "2026-01-05",
            "start_time": "09:00:00",
            "recurrence_rule": {
                "type": "weekly",
                "interval": 1,
                "daysOfWeek": [1, 3, 5],
                "endType": "after",
                "endAfterOccurrences": 5
            }
        }, format='json')

    def test_create_recurring_event(self):
        """Test creating a recurring event via API."""
        response = self._create_series()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['instances_created'], 4)
        self.assertEqual(response.data['event']['recurrence_rule']['daysOfWeek'], [1, 3, 5])
        self.assertEqual(Event.objects.count(), 5)

    def test_create_one_time_event(self):
        """Test creating an event without a recurrence rule."""
        response = self.client.post('/api/events/', {
            "title": "Spring Plant Sale",
            "event_type": "farm_event",
            "start_date": "2026-04-18",
            "end_date": "2026-04-19"
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['instances_created'], 0)
        self.assertFalse(response.data['event']['is_recurring'])

    def test_rule_missing_end_count_rejected(self):
        """Test that endType 'after' requires endAfterOccurrences."""
        response = self.client.post('/api/events/', {
            "title": "Weekly Shipping",
            "event_type": "shipping",
            "start_date": "2026-01-05",
            "recurrence_rule": {"type": "daily", "endType": "after"}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Event.objects.count(), 0)

    def test_list_events_in_range(self):
        """Test listing events with a date range."""
        self._create_series()

        response = self.client.get('/api/events/', {'start': '2026-01-01', 'end': '2026-01-09'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['start_date'] for e in response.data], ['2026-01-05', '2026-01-07', '2026-01-09'])

    def test_list_requires_range(self):
        response = self.client.get('/api/events/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_event(self):
        """Test updating a single event."""
        self._create_series()
        event = Event.objects.first()

        response = self.client.patch(f'/api/events/{event.id}/', {"title": "Holiday Shipping"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['title'], "Holiday Shipping")
        self.assertEqual(Event.objects.filter(title="Weekly Shipping").count(), 4)

    def test_update_advances_updated_at(self):
        """Test that a PATCH stamps the event as modified."""
        self._create_series()
        event = Event.objects.first()
        yesterday = timezone.now() - timedelta(days=1)
        Event.objects.filter(pk=event.pk).update(updated_at=yesterday)

        response = self.client.patch(f'/api/events/{event.id}/', {"title": "Holiday Shipping"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        event.refresh_from_db()
        self.assertGreater(event.updated_at, yesterday)

    def test_toggle_advances_updated_at(self):
        self._create_series()
        event = Event.objects.first()
        yesterday = timezone.now() - timedelta(days=1)
        Event.objects.filter(pk=event.pk).update(updated_at=yesterday)

        self.client.post(f'/api/events/{event.id}/toggle/')

        event.refresh_from_db()
        self.assertGreater(event.updated_at, yesterday)

    def test_update_clears_start_time(self):
        """Test that sending null clears an optional field."""
        self._create_series()
        event = Event.objects.first()

        response = self.client.patch(f'/api/events/{event.id}/', {"start_time": None}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['start_time'])
        event.refresh_from_db()
        self.assertIsNone(event.start_time)
        self.assertEqual(event.title, "Weekly Shipping")

    def test_update_rejects_null_title(self):
        self._create_series()
        event = Event.objects.first()

        response = self.client.patch(f'/api/events/{event.id}/', {"title": None}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_series(self):
        """Test deleting a whole series through one of its instances."""
        self._create_series()
        instance = Event.objects.filter(parent_event__isnull=False).first()

        response = self.client.delete(f'/api/events/{instance.id}/?delete_series=true')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted'], 5)
        self.assertFalse(Event.objects.exists())

    def test_toggle_event(self):
        """Test hiding an event from the public calendar."""
        self._create_series()
        event = Event.objects.first()

        response = self.client.post(f'/api/events/{event.id}/toggle/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['committed'])
        event.refresh_from_db()
        self.assertFalse(event.is_active)

    def test_series_listing(self):
        self._create_series()
        parent = Event.objects.parents().get()

        response = self.client.get(f'/api/events/{parent.id}/series/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 5)

    def test_preview(self):
        """Test previewing a rule without creating events."""
        response = self.client.post('/api/events/preview/', {
            "start_date": "2026-01-31",
            "recurrence_rule": {"type": "monthly", "endType": "after", "endAfterOccurrences": 3}
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['dates'], ['2026-01-31', '2026-02-28', '2026-03-31'])
        self.assertFalse(Event.objects.exists())


class EventAdminTests(TestCase):
    """Test the event admin changelist."""

    def setUp(self):
        admin_user = get_user_model().objects.create_superuser('admin', 'admin@example.com', 'password')
        self.client.force_login(admin_user)
        services.create_event(
            EventData(title="Open Hours", event_type='open_hours', start_date=date(2026, 4, 4)),
            weekly(end_type='after', end_after_occurrences=3)
        )
        services.create_event(EventData(title="Plant Sale", start_date=date(2026, 4, 18)))

    def test_filter_by_series_role(self):
        """Test the series role filter on the changelist."""
        expected = {'instances': 2, 'parents': 1, 'one_time': 1}
        for role, count in expected.items():
            response = self.client.get('/admin/events/event/', {'series': role})

            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.context['cl'].result_count, count)


class EventCategoryAPITests(APITestCase):
    """Test event category API endpoints."""

    def test_create_and_reorder(self):
        """Test creating categories and dragging the last one to the top."""
        ids = []
        for name in ["Workshop", "Open Hours", "Farm Event"]:
            response = self.client.post('/api/event-categories/', {"name": name}, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
            ids.append(response.data['id'])

        response = self.client.post(
            '/api/event-categories/reorder/',
            {"ordered_ids": [ids[2], ids[0], ids[1]]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['committed'])
        listing = self.client.get('/api/event-categories/')
        self.assertEqual([c['name'] for c in listing.data], ["Farm Event", "Workshop", "Open Hours"])

    def test_list_active_only(self):
        EventCategory.objects.create(name="Workshop", sort_order=1)
        EventCategory.objects.create(name="Retired", sort_order=2, is_active=False)

        response = self.client.get('/api/event-categories/', {'active': 'true'})

        self.assertEqual([c['name'] for c in response.data], ["Workshop"])
        self.assertEqual(len(self.client.get('/api/event-categories/').data), 2)

    def test_reorder_unknown_category(self):
        response = self.client.post('/api/event-categories/reorder/', {"ordered_ids": [42]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PreviewRecurrenceCommandTests(SimpleTestCase):
    """Test the preview_recurrence management command."""

    def test_prints_dates(self):
        """Test that the command lists each occurrence with its weekday."""
        out = StringIO()
        call_command(
            'preview_recurrence', '2026-01-05',
            '--type=weekly', '--days=1,3,5', '--end-after=5',
            stdout=out
        )

        output = out.getvalue()
        self.assertIn('2026-01-05  Monday', output)
        self.assertIn('2026-01-14  Wednesday', output)
        self.assertIn('5 occurrence(s)', output)
