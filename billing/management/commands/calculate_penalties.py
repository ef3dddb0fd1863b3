"""
Apply late-payment penalties for a month.

Usage:
    python manage.py calculate_penalties
    python manage.py calculate_penalties --month 3 --year 2025 --dry-run

Runs daily from common.scheduler; nothing is charged for the current month
before the rent due day, and a record is only penalised once.
"""
from django.core.management.base import BaseCommand

from billing.services import BillingService
from core.constants import MONTH_NAMES
from core.exceptions import ValidationError
from core.validators import PeriodValidator


class Command(BaseCommand):
    help = 'Apply building late-payment penalties to unpaid rent'

    def add_arguments(self, parser):
        parser.add_argument('--month', help='Month number or name (defaults to the current month)')
        parser.add_argument('--year', type=int, help='Year (defaults to the current year)')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show the penalties without saving them',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        try:
            month, year = PeriodValidator.parse_period(options.get('month'), options.get('year'))
        except ValidationError as e:
            self.stderr.write(self.style.ERROR(e.message))
            return

        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write(f"  LATE PENALTIES - {MONTH_NAMES[month - 1]} {year}")
        self.stdout.write(f"{'=' * 60}\n")
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No penalties will be saved\n"))

        applied = BillingService().calculate_penalties(month, year, dry_run=dry_run)
        for record, amount in applied:
            self.stdout.write(self.style.SUCCESS(
                f"  + {record.tenant.name} ({record.tenant.house_number}) - penalty {amount}"
            ))

        total = sum((amount for _, amount in applied), 0)
        self.stdout.write(f"\n{'=' * 60}")
        if dry_run:
            self.stdout.write(self.style.WARNING(f"  Would penalise: {len(applied)} record(s), total {total}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"  Penalised: {len(applied)} record(s), total {total}"))
        self.stdout.write(f"{'=' * 60}\n")
