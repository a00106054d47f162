"""
Run Expiry Sweep Management Command

Closes published announcements whose rent end date or expiry date has
passed. Normally run by Celery Beat; this command runs a pass on demand:

    python manage.py run_expiry_sweep
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from announcements.services.expiry_sweeper import get_expiry_sweeper


class Command(BaseCommand):
    help = 'Close published announcements that are past their end/expiry date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the announcements that would be closed without closing them',
        )

    def handle(self, *args, **options):
        self.stdout.write(f'\n[{timezone.now().strftime("%Y-%m-%d %H:%M:%S")}] '
                          f'Running announcement expiry sweep...\n')

        sweeper = get_expiry_sweeper()

        if options['dry_run']:
            expired = sweeper.expired_queryset()
            for announcement in expired:
                self.stdout.write(f'  would close {announcement.id} (expiry {announcement.expiry_date})')
            self.stdout.write(self.style.SUCCESS(f'{expired.count()} announcement(s) would be closed'))
            return

        result = sweeper.sweep()

        if result['skipped']:
            self.stdout.write(self.style.WARNING('Another sweep is still running, nothing done'))
            return

        if result['errors']:
            self.stdout.write(
                self.style.WARNING(f"{result['errors']} announcement(s) could not be closed")
            )
        self.stdout.write(self.style.SUCCESS(f"{result['closed']} announcement(s) closed"))
