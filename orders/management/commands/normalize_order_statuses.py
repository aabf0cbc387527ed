"""
Management command to move orders off pre-workflow status codes.

Orders created before the current status workflow may still carry codes
such as 'paid' or 'delivered'; this rewrites them and records the change.
"""

from django.core.management.base import BaseCommand

from orders import services
from orders.models import Order


class Command(BaseCommand):
    help = 'Rewrite pre-workflow order statuses onto the current workflow'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many orders would change'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            pending = Order.objects.with_pre_workflow_status().count()
            self.stdout.write(f'{pending} order(s) would be normalized')
            return

        total = services.normalize_statuses()

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully normalized {total} order status(es)'
            )
        )
