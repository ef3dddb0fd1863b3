"""
Billing service: monthly records, payments, advance settlement, late
penalties and receipts.

Credit flow between months:
  * an overpayment goes to Tenant.tenant_credit;
  * when the next monthly record is opened the credit moves onto it as
    carried_forward / advance_balance and tenant_credit drops to zero;
  * the advance stays unapplied (and is offset in the effective balance)
    until the month is settled or the next payment is recorded.
"""
import time
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from audit.models import AuditLog
from common.models import SiteSettings
from core.constants import PaymentMethod, TenantStatus
from core.dto import SettlementDTO, ReceiptDTO
from core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from core.services import BaseService
from tenants.models import Tenant
from . import calculations
from .models import MonthlyRecord, Transaction, Penalty

ZERO = Decimal('0.00')


def next_period(month, year):
    return (1, year + 1) if month == 12 else (month + 1, year)


def periods_between(start, end):
    """Inclusive (month, year) pairs from start to end"""
    month, year = start
    while (year, month) <= (end[1], end[0]):
        yield month, year
        month, year = next_period(month, year)


def cash_reference():
    return f"CASH-{str(int(time.time() * 1000))[-8:]}"


class BillingService(BaseService):

    def __init__(self, user=None, request=None, today=None):
        super().__init__(user=user, request=request)
        self.today = today or timezone.localdate()

    @property
    def due_day(self):
        return SiteSettings.load().rent_due_day

    # ------------------------------------------------------------------
    # Monthly records
    # ------------------------------------------------------------------

    def _is_billable(self, tenant, month, year):
        if (year, month) < (tenant.entry_date.year, tenant.entry_date.month):
            return False
        if (year, month) > (self.today.year, self.today.month):
            return False
        if tenant.status == TenantStatus.LEFT and tenant.leaving_date:
            if (year, month) > (tenant.leaving_date.year, tenant.leaving_date.month):
                return False
        return True

    def _open_record(self, tenant, month, year, carry_credit=True):
        credit = tenant.tenant_credit if carry_credit else ZERO
        record = MonthlyRecord(
            tenant=tenant,
            month=month,
            year=year,
            monthly_rent=tenant.monthly_rent,
            water_bill=tenant.default_water_bill,
            garbage_bill=tenant.garbage_bill,
            carried_forward=credit,
            advance_balance=credit,
        )
        record.save()
        if credit > 0:
            tenant.tenant_credit = ZERO
            tenant.save(update_fields=['tenant_credit', 'updated_at'])
        return record

    @transaction.atomic
    def ensure_record(self, tenant, month, year):
        """
        Return the tenant's record for the month, opening it (and any missing
        months before it) when the tenant was billable then. Returns None for
        months before entry, after leaving, or in the future.

        Credit is carried from the locked tenant row, never from the instance
        passed in; that instance's tenant_credit is refreshed afterwards.
        """
        record = MonthlyRecord.objects.filter(tenant=tenant, month=month, year=year).first()
        if record or not self._is_billable(tenant, month, year):
            return record

        locked = Tenant.objects.select_for_update().get(pk=tenant.pk)
        record = MonthlyRecord.objects.filter(tenant=locked, month=month, year=year).first()
        if record is None:
            record = self._open_missing(locked, month, year)
        tenant.tenant_credit = locked.tenant_credit
        return record

    def _open_missing(self, tenant, month, year):
        last = tenant.monthly_records.order_by('-year', '-month').first()
        if last and (last.year, last.month) > (year, month):
            # Back-filling a gap; credit already flowed into later months
            return self._open_record(tenant, month, year, carry_credit=False)

        if last:
            start = next_period(last.month, last.year)
        else:
            start = (tenant.entry_date.month, tenant.entry_date.year)

        record = None
        for m, y in periods_between(start, (month, year)):
            record = self._open_record(tenant, m, y)
        return record

    def ensure_records(self, month, year):
        """Open the month's record for every tenant billable in it"""
        records = []
        for tenant in Tenant.objects.billable_in(month, year).select_related('building'):
            record = self.ensure_record(tenant, month, year)
            if record:
                records.append(record)
        return records

    def sync_current_record(self, tenant):
        """Push changed default charges onto the tenant's current month"""
        record = MonthlyRecord.objects.filter(
            tenant=tenant, month=self.today.month, year=self.today.year
        ).first()
        if not record:
            return None
        record.monthly_rent = tenant.monthly_rent
        record.garbage_bill = tenant.garbage_bill
        record.save()
        return record

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def _lock(self, tenant_id, month, year):
        tenant = Tenant.objects.select_for_update().filter(pk=tenant_id).first()
        if not tenant:
            raise NotFoundError(resource_type='Tenant', resource_id=tenant_id)
        record = self.ensure_record(tenant, month, year)
        if record is None:
            raise BusinessLogicError(
                message=f"{tenant.name} has no bill for {month}/{year}",
                code="NO_RECORD"
            )
        record = MonthlyRecord.objects.select_for_update().get(pk=record.pk)
        return tenant, record

    def _apply_advance(self, tenant, record, extra_credit=ZERO):
        """Use the record's advance (plus extra credit) on what is still owed"""
        remaining = calculations.outstanding(record.charges, record.paid)
        applied = {c: ZERO for c in calculations.EXCESS_ORDER}
        left = calculations.apply_credit(record.advance_balance + extra_credit, remaining, applied)
        record.add_applied(applied)
        record.advance_balance = ZERO
        return applied, left

    @transaction.atomic
    def record_payment(self, tenant_id, month, year, amounts, deposit=ZERO, method=PaymentMethod.MPESA,
                       reference='', date=None, notes='', water_bill=None):
        """
        Capture a payment for a tenant's month.

        amounts: {'rent', 'water', 'garbage', 'penalties'} as entered.
        water_bill: when given, replaces the month's water bill first.

        Returns (record, transaction, credit_added); transaction is None when
        only the water bill changed.
        """
        amounts = {c: calculations.to_decimal(amounts.get(c)) for c in calculations.EXCESS_ORDER}
        deposit = calculations.to_decimal(deposit)
        total = sum(amounts.values(), ZERO)

        if method not in dict(PaymentMethod.CHOICES):
            raise ValidationError(message=f"Unknown payment method: {method}", code="INVALID_METHOD")
        reference = (reference or '').strip()
        if method == PaymentMethod.CASH and not reference and total + deposit > 0:
            reference = cash_reference()
        elif method != PaymentMethod.CASH and not reference and total > 0:
            raise ValidationError(message="Payment reference is required", code="REFERENCE_REQUIRED")

        tenant, record = self._lock(tenant_id, month, year)

        if water_bill is not None:
            water_bill = calculations.to_decimal(water_bill)
            if water_bill == record.water_bill:
                water_bill = None
        if total == 0 and deposit == 0 and water_bill is None:
            raise ValidationError(
                message="Enter at least one payment amount or update the water bill",
                code="EMPTY_PAYMENT"
            )
        if water_bill is not None:
            record.water_bill = water_bill

        credit_added = ZERO
        if record.advance_balance > 0:
            _, credit_added = self._apply_advance(tenant, record)

        remaining = calculations.outstanding(record.charges, record.paid)
        allocation = calculations.allocate_payment(amounts, remaining)
        record.add_applied(allocation)
        record.deposit_paid += deposit
        record.save()

        credit_added += allocation.credit
        tenant.tenant_credit += credit_added
        tenant.deposit_paid += deposit
        tenant.save(update_fields=['tenant_credit', 'deposit_paid', 'updated_at'])

        if total + deposit == 0:
            self.log_info("Water bill updated", tenant=tenant.id, month=month, year=year,
                          water_bill=str(record.water_bill))
            self.audit(
                AuditLog.ACTION_UPDATE, AuditLog.RESOURCE_RECORD, record.id,
                f"Water bill set to {record.water_bill} for {tenant.name} - {record.month_name} {year}",
                tenant_id=tenant.id,
            )
            return record, None, credit_added

        payment = Transaction.objects.create(
            tenant=tenant,
            record=record,
            rent=amounts['rent'],
            water=amounts['water'],
            garbage=amounts['garbage'],
            penalty=amounts['penalties'],
            deposit=deposit,
            total_amount=total,
            water_bill=record.water_bill if water_bill is not None else None,
            applied_rent=allocation.rent,
            applied_water=allocation.water,
            applied_garbage=allocation.garbage,
            applied_penalties=allocation.penalties,
            credit=allocation.credit,
            method=method,
            reference=reference,
            date=date or self.today,
            month=month,
            year=year,
            notes=notes or '',
            created_by=self.user if self.user and self.user.is_authenticated else None,
        )

        self.log_info("Payment recorded", tenant=tenant.id, month=month, year=year,
                      total=str(total), credit=str(credit_added))
        self.audit(
            AuditLog.ACTION_PAYMENT, AuditLog.RESOURCE_RECORD, record.id,
            f"Payment of {total} ({method}) for {tenant.name} - {record.month_name} {year}",
            tenant_id=tenant.id, transaction_id=payment.id, reference=reference,
            credit_added=str(credit_added), deposit=str(deposit),
        )
        return record, payment, credit_added

    @transaction.atomic
    def settle(self, tenant_id, month, year):
        """
        Apply the month's advance balance and the tenant's stored credit to
        the month's outstanding charges. Unused credit stays with the tenant.
        """
        tenant, record = self._lock(tenant_id, month, year)
        pool = record.advance_balance + tenant.tenant_credit
        if pool <= 0:
            raise BusinessLogicError(message="Tenant has no advance balance to settle with", code="NO_CREDIT")
        if record.balance_due <= 0:
            raise BusinessLogicError(message="Nothing is outstanding for this month", code="NOTHING_DUE")

        applied, left = self._apply_advance(tenant, record, extra_credit=tenant.tenant_credit)
        record.save()
        tenant.tenant_credit = left
        tenant.save(update_fields=['tenant_credit', 'updated_at'])

        result = SettlementDTO(settlements=applied, remaining_credit=left)
        self.log_info("Advance settled", tenant=tenant.id, month=month, year=year,
                      settled=str(result.total_settled))
        self.audit(
            AuditLog.ACTION_SETTLE, AuditLog.RESOURCE_RECORD, record.id,
            f"Settled {result.total_settled} from credit for {tenant.name} - {record.month_name} {year}",
            tenant_id=tenant.id, remaining_credit=str(left),
        )
        return record, result

    # ------------------------------------------------------------------
    # Penalties
    # ------------------------------------------------------------------

    @transaction.atomic
    def calculate_penalties(self, month=None, year=None, dry_run=False):
        """
        Charge the building's penalty percentage on unpaid rent for every
        record of the month that has no penalty yet. The current month is
        only penalised from the due day on.

        A dry run opens missing records inside a savepoint and rolls it back,
        so it reports exactly what a real run would charge.

        Returns a list of (record, amount).
        """
        month = month or self.today.month
        year = year or self.today.year
        if (year, month) > (self.today.year, self.today.month):
            return []
        if (year, month) == (self.today.year, self.today.month) and self.today.day < self.due_day:
            return []

        rates = dict(Penalty.objects.values_list('building_id', 'percentage'))
        if not rates:
            return []

        if dry_run:
            with transaction.atomic():
                applied = self._charge_penalties(month, year, rates, save=False)
                transaction.set_rollback(True)
        else:
            applied = self._charge_penalties(month, year, rates, save=True)

        self.log_info("Penalties calculated", month=month, year=year, count=len(applied), dry_run=dry_run)
        return applied

    def _charge_penalties(self, month, year, rates, save):
        self.ensure_records(month, year)
        records = MonthlyRecord.objects.select_for_update().select_related('tenant').filter(
            month=month, year=year, penalties=0, tenant__building_id__in=list(rates)
        )
        applied = []
        for record in records:
            amount = calculations.late_penalty(
                record.monthly_rent, record.rent_paid, record.advance_balance,
                rates[record.tenant.building_id]
            )
            if amount <= 0:
                continue
            applied.append((record, amount))
            if not save:
                continue
            record.penalties = amount
            record.save()
            self.audit(
                AuditLog.ACTION_PENALTY, AuditLog.RESOURCE_RECORD, record.id,
                f"Late penalty {amount} for {record.tenant.name} - {record.month_name} {year}",
                tenant_id=record.tenant_id,
            )
        return applied

    # ------------------------------------------------------------------
    # Status and receipts
    # ------------------------------------------------------------------

    def payment_status(self, record):
        return calculations.status_for_period(
            record.effective_balance, record.month, record.year, self.today, self.due_day
        )

    def build_receipt(self, tenant, month, year):
        record = self.ensure_record(tenant, month, year)
        if record is None:
            raise NotFoundError(message=f"No bill for {tenant.name} in {month}/{year}")
        total = record.total_due
        effective = record.effective_balance
        amount_paid, balance = calculations.receipt_amounts(total, effective)
        return ReceiptDTO(
            receipt_no=f"RCP-{year}{month:02d}-{tenant.id:05d}",
            tenant_id=tenant.id,
            tenant_name=tenant.name,
            house_number=tenant.house_number,
            building_name=tenant.building.name,
            month=month,
            year=year,
            monthly_rent=record.monthly_rent,
            water_bill=record.water_bill,
            garbage_bill=record.garbage_bill,
            penalties=record.penalties,
            total_due=total,
            amount_paid=amount_paid,
            balance_due=balance,
            status=self.payment_status(record),
        )
