"""
Deactivate tickets whose session window has ended.

Meant to run from cron every few minutes.

Usage:
    python manage.py deactivate_expired_tickets
    python manage.py deactivate_expired_tickets --dry-run
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.tickets.services.expiry import deactivate_expired_tickets, find_expired_ticket_ids


class Command(BaseCommand):
    help = 'Deactivate booked/playing tickets whose time has run out'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many tickets would be deactivated without changing them',
        )

    def handle(self, *args, **options):
        now = timezone.now()

        if options['dry_run']:
            count = len(find_expired_ticket_ids(now=now))
            self.stdout.write(
                self.style.WARNING(f'--dry-run mode: {count} ticket(s) would be deactivated.')
            )
            return

        count = deactivate_expired_tickets(now=now)
        self.stdout.write(self.style.SUCCESS(f'Deactivated {count} expired ticket(s).'))
