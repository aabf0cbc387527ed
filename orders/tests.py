"""
Tests for orders.

Tests cover:
- Status label and colour lookup for orders and legacy orders
- Status changes and their history, against the database and an in-memory store
- Order and legacy order API endpoints
- Management commands
"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from events.tests import InMemoryStore

from . import services
from .models import LegacyOrder, Order, OrderStatusHistory
from .statuses import (
    ORDER_STATUS_CONFIG,
    ORDER_STATUSES,
    StatusDisplay,
    get_legacy_order_status_display,
    get_order_status_display,
    get_order_status_label,
    normalize_order_status,
)


def make_order(number='ATL-1001', order_status='processing', **kwargs):
    return Order.objects.create(
        order_number=number,
        customer_email=kwargs.pop('customer_email', 'grower@example.com'),
        status=order_status,
        total=kwargs.pop('total', Decimal('42.50')),
        **kwargs
    )


class OrderStatusDisplayTests(SimpleTestCase):
    """Test status label and colour lookup."""

    def test_every_status_has_a_label(self):
        """Test that each workflow status is configured."""
        self.assertEqual(set(ORDER_STATUSES), set(ORDER_STATUS_CONFIG))
        self.assertEqual(len(ORDER_STATUSES), 8)

    def test_known_status(self):
        self.assertEqual(
            get_order_status_display('pending_payment'),
            StatusDisplay('Pending Payment', 'bg-amber-500')
        )
        self.assertEqual(get_order_status_label('on_hold'), 'On Hold')

    def test_unknown_status_is_humanized(self):
        """Test that unknown codes fall back to the code with spaces."""
        display = get_order_status_display('awaiting_pickup_slot')

        self.assertEqual(display.label, 'awaiting pickup slot')
        self.assertEqual(display.color, 'bg-slate-500')

    def test_missing_status(self):
        self.assertEqual(get_order_status_label(None), 'Unknown')
        self.assertEqual(get_order_status_label(''), 'Unknown')

    def test_legacy_status_is_case_insensitive(self):
        """Test that imported codes match regardless of case."""
        self.assertEqual(get_legacy_order_status_display('On-Hold').label, 'On Hold')
        self.assertEqual(get_legacy_order_status_display('COMPLETED').color, 'bg-emerald-500')

    def test_legacy_sets_differ(self):
        """Test that the legacy table uses the imported codes, not the current ones."""
        self.assertEqual(get_legacy_order_status_display('pending').label, 'Pending')
        self.assertEqual(get_legacy_order_status_display('pending_payment').label, 'pending payment')
        self.assertEqual(get_legacy_order_status_display('checkout-draft').label, 'checkout draft')

    def test_normalize(self):
        """Test mapping pre-workflow codes onto the current workflow."""
        self.assertEqual(normalize_order_status('pending'), 'pending_payment')
        self.assertEqual(normalize_order_status('packed'), 'processing')
        self.assertEqual(normalize_order_status('delivered'), 'completed')
        self.assertEqual(normalize_order_status('partial_refund'), 'refunded')
        self.assertEqual(normalize_order_status('shipped'), 'shipped')
        self.assertEqual(normalize_order_status('on_hold'), 'on_hold')


class OrderServiceTests(TestCase):
    """Test order status services."""

    def setUp(self):
        self.order = make_order()

    def test_update_status_records_history(self):
        """Test that a status change writes a history entry."""
        services.update_order_status(self.order, 'shipped', note='Label printed', changed_by='packer')

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'shipped')
        entry = OrderStatusHistory.objects.get(order=self.order)
        self.assertEqual((entry.from_status, entry.status), ('processing', 'shipped'))
        self.assertEqual(entry.changed_by, 'packer')

    def test_any_transition_allowed(self):
        """Test that moving backwards through the workflow is allowed."""
        services.update_order_status(self.order, 'completed')
        services.update_order_status(self.order, 'pending_payment')

        self.assertEqual(self.order.status, 'pending_payment')
        self.assertEqual(len(services.get_order_history(self.order)), 2)

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValueError):
            services.update_order_status(self.order, 'teleported')
        self.assertFalse(OrderStatusHistory.objects.exists())

    def test_cancel_twice(self):
        """Test that cancelling a cancelled order raises ValueError."""
        services.cancel_order(self.order)

        with self.assertRaises(ValueError):
            services.cancel_order(self.order)

    def test_bulk_update(self):
        """Test moving several orders at once."""
        other = make_order('ATL-1002', 'on_hold')

        updated = services.bulk_update_status([self.order.pk, other.pk], 'completed')

        self.assertEqual(updated, 2)
        self.assertEqual(Order.objects.with_status('completed').count(), 2)
        self.assertEqual(
            OrderStatusHistory.objects.filter(note='Bulk status change to Completed').count(), 2
        )

    def test_normalize_statuses(self):
        """Test rewriting pre-workflow statuses."""
        make_order('ATL-0001', 'paid')
        make_order('ATL-0002', 'delivered')

        self.assertEqual(services.normalize_statuses(), 2)
        self.assertEqual(
            sorted(Order.objects.values_list('status', flat=True)),
            ['completed', 'processing', 'processing']
        )
        self.assertEqual(services.normalize_statuses(), 0)


class OrderServiceStoreTests(SimpleTestCase):
    """Test order services against an in-memory store."""

    def setUp(self):
        self.orders = InMemoryStore()
        self.history = InMemoryStore(defaults={'created_at': None})
        self.order = self.orders.create(order_number='ATL-2001', status='processing')

    def test_update_status_records_history(self):
        """Test that a status change goes through the injected stores."""
        updated = services.update_order_status(
            self.order, 'shipped', note='Label printed', changed_by='packer',
            store=self.orders, history=self.history
        )

        self.assertEqual(updated.status, 'shipped')
        self.assertEqual(self.order.status, 'shipped')
        self.assertEqual(self.orders.get(self.order.pk).status, 'shipped')
        entries = services.get_order_history(self.order, history=self.history)
        self.assertEqual(
            [(e.order_id, e.from_status, e.status, e.changed_by) for e in entries],
            [(self.order.pk, 'processing', 'shipped', 'packer')]
        )

    def test_unknown_status_leaves_stores_untouched(self):
        with self.assertRaises(ValueError):
            services.update_order_status(self.order, 'teleported', store=self.orders, history=self.history)

        self.assertEqual(self.orders.get(self.order.pk).status, 'processing')
        self.assertEqual(self.history.rows, {})

    def test_history_newest_first(self):
        services.update_order_status(self.order, 'shipped', store=self.orders, history=self.history)
        services.update_order_status(self.order, 'completed', store=self.orders, history=self.history)

        entries = services.get_order_history(self.order, history=self.history)
        self.assertEqual([e.status for e in entries], ['completed', 'shipped'])

        latest = services.get_order_history(self.order, limit=1, history=self.history)
        self.assertEqual([e.status for e in latest], ['completed'])

    def test_bulk_update_skips_missing_ids(self):
        """Test that ids with no order are ignored."""
        other = self.orders.create(order_number='ATL-2002', status='on_hold')

        updated = services.bulk_update_status(
            [self.order.pk, other.pk, 999], 'completed', store=self.orders, history=self.history
        )

        self.assertEqual(updated, 2)
        self.assertEqual({row.status for row in self.orders.rows.values()}, {'completed'})
        self.assertEqual(
            {row.note for row in self.history.rows.values()}, {'Bulk status change to Completed'}
        )

    def test_normalize_statuses(self):
        """Test rewriting pre-workflow statuses through the injected stores."""
        self.orders.create(order_number='ATL-0001', status='paid')
        self.orders.create(order_number='ATL-0002', status='delivered')

        normalized = services.normalize_statuses(store=self.orders, history=self.history)

        self.assertEqual(normalized, 2)
        self.assertEqual(
            sorted(row.status for row in self.orders.rows.values()),
            ['completed', 'processing', 'processing']
        )
        self.assertEqual(
            sorted((row.from_status, row.status, row.changed_by) for row in self.history.rows.values()),
            [('delivered', 'completed', 'system'), ('paid', 'processing', 'system')]
        )


class OrderAPITests(APITestCase):
    """Test order API endpoints."""

    def setUp(self):
        """Set up test client and data."""
        self.client = APIClient()
        self.order = make_order(customer_name='Dana Reyes')
        make_order('ATL-1002', 'completed', delivery_method='pickup')

    def test_list_with_labels(self):
        """Test that listed orders carry their status label and colour."""
        response = self.client.get('/api/orders/', {'status': 'processing'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status_label'], 'Processing')
        self.assertEqual(response.data[0]['status_color'], 'bg-blue-500')

    def test_list_by_delivery_method_and_search(self):
        response = self.client.get('/api/orders/', {'delivery_method': 'pickup'})
        self.assertEqual([o['order_number'] for o in response.data], ['ATL-1002'])

        response = self.client.get('/api/orders/', {'search': 'reyes'})
        self.assertEqual([o['order_number'] for o in response.data], ['ATL-1001'])

    def test_update_status(self):
        """Test changing status through the API."""
        response = self.client.post(
            f'/api/orders/{self.order.id}/status/',
            {"status": "on_hold", "note": "Customer asked to wait"},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status_label'], 'On Hold')
        self.assertEqual(len(response.data['status_history']), 1)

    def test_update_status_advances_updated_at(self):
        """Test that a status change stamps the order as modified."""
        yesterday = timezone.now() - timedelta(days=1)
        Order.objects.filter(pk=self.order.pk).update(updated_at=yesterday)

        response = self.client.post(
            f'/api/orders/{self.order.id}/status/', {"status": "shipped"}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertGreater(self.order.updated_at, yesterday)

    def test_history(self):
        """Test listing an order's status changes, newest first."""
        services.update_order_status(self.order, 'on_hold', note='Waiting on stock')
        services.update_order_status(self.order, 'completed')

        response = self.client.get(f'/api/orders/{self.order.id}/history/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([h['status'] for h in response.data], ['completed', 'on_hold'])
        self.assertEqual(response.data[1]['from_status'], 'processing')

        response = self.client.get(f'/api/orders/{self.order.id}/history/', {'limit': 1})
        self.assertEqual([h['status'] for h in response.data], ['completed'])

    def test_history_rejects_bad_limit(self):
        response = self.client.get(f'/api/orders/{self.order.id}/history/', {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_status_rejects_unknown(self):
        response = self.client.post(
            f'/api/orders/{self.order.id}/status/', {"status": "lost"}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel(self):
        response = self.client.post(f'/api/orders/{self.order.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/orders/{self.order.id}/cancel/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_status(self):
        response = self.client.post('/api/orders/bulk-status/', {
            "order_ids": list(Order.objects.values_list('id', flat=True)),
            "status": "refunded"
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 2)

    def test_statuses_table(self):
        """Test that the statuses endpoint lists codes in display order."""
        response = self.client.get('/api/orders/statuses/')

        self.assertEqual([s['code'] for s in response.data['orders']], list(ORDER_STATUSES))
        self.assertIn('on-hold', [s['code'] for s in response.data['legacy_orders']])


class LegacyOrderAPITests(APITestCase):
    """Test legacy order API endpoints."""

    def setUp(self):
        self.legacy = LegacyOrder.objects.create(
            legacy_order_id='8812',
            order_number='8812',
            status='On-Hold',
            customer_email='old@example.com',
            total=Decimal('19.99'),
        )
        LegacyOrder.objects.create(legacy_order_id='8813', status='wc-mystery')

    def test_detail_label(self):
        response = self.client.get(f'/api/legacy-orders/{self.legacy.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status_label'], 'On Hold')
        self.assertEqual(response.data['status_color'], 'bg-purple-500')

    def test_unknown_legacy_status(self):
        response = self.client.get('/api/legacy-orders/', {'status': 'wc-mystery'})

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status_label'], 'wc mystery')


class NormalizeOrderStatusesCommandTests(TestCase):
    """Test the normalize_order_statuses management command."""

    def test_dry_run_changes_nothing(self):
        make_order('ATL-0001', 'allocated')
        out = StringIO()

        call_command('normalize_order_statuses', '--dry-run', stdout=out)

        self.assertIn('1 order(s) would be normalized', out.getvalue())
        self.assertEqual(Order.objects.get().status, 'allocated')

    def test_normalizes(self):
        make_order('ATL-0001', 'allocated')
        out = StringIO()

        call_command('normalize_order_statuses', stdout=out)

        self.assertIn('Successfully normalized 1', out.getvalue())
        self.assertEqual(Order.objects.get().status, 'processing')
