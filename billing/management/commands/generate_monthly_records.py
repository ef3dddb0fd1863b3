"""
Open the monthly billing record of every tenant billable in a month.
Missing earlier months are filled in first so advance credit carries over.

Usage:
    python manage.py generate_monthly_records
    python manage.py generate_monthly_records --month 3 --year 2025 --dry-run

Scheduled on the 1st of every month by common.scheduler.
"""
from django.core.management.base import BaseCommand

from billing.models import MonthlyRecord
from billing.services import BillingService
from core.constants import MONTH_NAMES
from core.exceptions import ValidationError
from core.validators import PeriodValidator
from tenants.models import Tenant


class Command(BaseCommand):
    help = 'Generate monthly billing records for all billable tenants'

    def add_arguments(self, parser):
        parser.add_argument('--month', help='Month number or name (defaults to the current month)')
        parser.add_argument('--year', type=int, help='Year (defaults to the current year)')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be created without actually creating records',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        try:
            month, year = PeriodValidator.parse_period(options.get('month'), options.get('year'))
        except ValidationError as e:
            self.stderr.write(self.style.ERROR(e.message))
            return

        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write(f"  MONTHLY RECORD GENERATION - {MONTH_NAMES[month - 1]} {year}")
        self.stdout.write(f"{'=' * 60}\n")
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No records will be created\n"))

        service = BillingService()
        tenants = Tenant.objects.billable_in(month, year).select_related('building')
        existing = set(
            MonthlyRecord.objects.filter(month=month, year=year).values_list('tenant_id', flat=True)
        )

        created_count = 0
        skipped_count = 0
        for tenant in tenants:
            label = f"{tenant.name} ({tenant.building.name} - {tenant.house_number})"
            if tenant.id in existing:
                skipped_count += 1
                self.stdout.write(f"  ✓ {label} - Already has a record")
                continue

            if dry_run:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  + {label} - Would create record: {tenant.monthly_rent}"))
                continue

            record = service.ensure_record(tenant, month, year)
            if record is None:
                skipped_count += 1
                continue
            created_count += 1
            advance = f" (advance {record.advance_balance})" if record.advance_balance else ""
            self.stdout.write(self.style.SUCCESS(f"  + {label} - Created record: {record.total_due}{advance}"))

        self.stdout.write(f"\n{'=' * 60}")
        self.stdout.write("  SUMMARY")
        self.stdout.write(f"{'=' * 60}")
        self.stdout.write(f"  Tenants: {created_count + skipped_count}")
        self.stdout.write(f"  Already had records: {skipped_count}")
        if dry_run:
            self.stdout.write(self.style.WARNING(f"  Would create: {created_count}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"  Created: {created_count}"))
        self.stdout.write(f"{'=' * 60}\n")
