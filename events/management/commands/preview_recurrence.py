"""
Management command to print the dates a recurrence rule expands to.

Useful for checking a rule before creating a recurring event from the admin.
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from events import services
from events.recurrence import to_js_weekday
from events.types import END_AFTER, END_NEVER, END_ON_DATE, RECURRENCE_TYPES, WEEKDAY_NAMES, RecurrenceRule


class Command(BaseCommand):
    help = 'Print the occurrence dates of a recurrence rule (nothing is saved)'

    def add_arguments(self, parser):
        parser.add_argument('start_date', help='First day of the series (YYYY-MM-DD)')
        parser.add_argument(
            '--type',
            choices=RECURRENCE_TYPES,
            default='weekly',
            help='Recurrence type (default: weekly)'
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=1,
            help='Repeat every N days/weeks/months (default: 1)'
        )
        parser.add_argument(
            '--days',
            default='',
            help='Comma separated weekdays for weekly rules, 0=Sunday..6=Saturday'
        )
        parser.add_argument(
            '--end-after',
            type=int,
            help='Stop after this many occurrences'
        )
        parser.add_argument(
            '--end-date',
            help='Stop after this date (YYYY-MM-DD)'
        )

    def handle(self, *args, **options):
        try:
            start_date = date.fromisoformat(options['start_date'])
            end_date = date.fromisoformat(options['end_date']) if options['end_date'] else None
            days = [int(day) for day in options['days'].split(',') if day.strip()]
        except ValueError as e:
            raise CommandError(str(e))

        if options['end_after'] is not None:
            end_type = END_AFTER
        elif end_date is not None:
            end_type = END_ON_DATE
        else:
            end_type = END_NEVER

        try:
            rule = RecurrenceRule(
                type=options['type'],
                interval=options['interval'],
                days_of_week=frozenset(days),
                end_type=end_type,
                end_after_occurrences=options['end_after'],
                end_date=end_date,
            )
        except ValueError as e:
            raise CommandError(str(e))

        dates = services.preview_series(start_date, rule)

        for occurrence_date in dates:
            weekday = WEEKDAY_NAMES[to_js_weekday(occurrence_date)]
            self.stdout.write(f'{occurrence_date.isoformat()}  {weekday}')

        self.stdout.write(
            self.style.SUCCESS(
                f'{len(dates)} occurrence(s) from {dates[0].isoformat()} to {dates[-1].isoformat()}'
            )
        )
