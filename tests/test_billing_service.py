from datetime import date
from decimal import Decimal

import pytest

from audit.models import AuditLog
from billing.models import MonthlyRecord, Penalty
from billing.services import BillingService, periods_between
from core.constants import PaymentMethod, PaymentStatus, TenantStatus
from core.exceptions import BusinessLogicError, ValidationError
from tenants.models import Tenant

D = Decimal
MARCH = date(2025, 3, 10)


@pytest.fixture
def resident(building):
    return Tenant.objects.create(
        name='Peter Otieno',
        mobile='0722000111',
        building=building,
        house_number='B4',
        monthly_rent=D('10000'),
        default_water_bill=D('500'),
        garbage_bill=D('150'),
        entry_date=date(2025, 3, 1),
    )


def pay(service, tenant, month=3, year=2025, **amounts):
    method = amounts.pop('method', PaymentMethod.CASH)
    return service.record_payment(tenant.id, month, year, amounts, method=method)


def test_periods_between_crosses_year_end():
    assert list(periods_between((11, 2024), (2, 2025))) == [(11, 2024), (12, 2024), (1, 2025), (2, 2025)]


def test_ensure_record_fills_missing_months_from_entry(building, resident):
    resident.entry_date = date(2025, 1, 15)
    resident.save()

    record = BillingService(today=MARCH).ensure_record(resident, 3, 2025)

    assert record.month == 3
    assert list(resident.monthly_records.values_list('month', flat=True).order_by('month')) == [1, 2, 3]
    assert record.total_due == D('10650')


def test_no_record_for_future_month_or_before_entry(resident):
    service = BillingService(today=MARCH)
    assert service.ensure_record(resident, 4, 2025) is None
    assert service.ensure_record(resident, 2, 2025) is None
    assert not MonthlyRecord.objects.exists()


def test_exact_payment_clears_the_month(resident):
    service = BillingService(today=MARCH)
    record, payment, credit = pay(service, resident, rent=D('10000'), water=D('500'), garbage=D('150'))

    assert credit == D('0')
    assert record.balance_due == D('0')
    assert record.effective_balance == D('0')
    assert service.payment_status(record) == PaymentStatus.PAID
    assert payment.reference.startswith('CASH-')
    assert payment.total_amount == D('10650')
    assert AuditLog.objects.filter(action=AuditLog.ACTION_PAYMENT, resource_id=record.id).exists()


def test_overpayment_becomes_tenant_credit(resident):
    service = BillingService(today=MARCH)
    record, payment, credit = pay(service, resident, rent=D('12000'))

    assert record.rent_paid == D('10000')
    assert record.water_paid == D('500')
    assert record.garbage_paid == D('150')
    assert credit == D('1350')
    assert payment.credit == D('1350')
    resident.refresh_from_db()
    assert resident.tenant_credit == D('1350')


def test_partial_payment_leaves_balance(resident):
    service = BillingService(today=MARCH)
    record, _, _ = pay(service, resident, rent=D('4000'))

    assert record.balance_due == D('6650')
    assert service.payment_status(record) == PaymentStatus.OVERDUE


def test_water_bill_update_without_payment(resident):
    service = BillingService(today=MARCH)
    record, payment, credit = service.record_payment(resident.id, 3, 2025, {}, water_bill=D('820'))

    assert payment is None
    assert credit == D('0')
    assert record.water_bill == D('820')
    assert record.total_due == D('10970')


def test_empty_payment_is_rejected(resident):
    with pytest.raises(ValidationError) as exc:
        BillingService(today=MARCH).record_payment(resident.id, 3, 2025, {})
    assert exc.value.code == 'EMPTY_PAYMENT'


def test_unchanged_water_bill_counts_as_empty(resident):
    service = BillingService(today=MARCH)
    service.ensure_record(resident, 3, 2025)
    with pytest.raises(ValidationError):
        service.record_payment(resident.id, 3, 2025, {}, water_bill=D('500'))


def test_non_cash_payment_needs_reference(resident):
    with pytest.raises(ValidationError) as exc:
        pay(BillingService(today=MARCH), resident, rent=D('100'), method=PaymentMethod.MPESA)
    assert exc.value.code == 'REFERENCE_REQUIRED'


def test_payment_for_future_month_has_no_record(resident):
    with pytest.raises(BusinessLogicError) as exc:
        pay(BillingService(today=MARCH), resident, month=5, rent=D('100'))
    assert exc.value.code == 'NO_RECORD'


def test_credit_carries_into_next_month(resident):
    pay(BillingService(today=MARCH), resident, rent=D('12000'))

    april = BillingService(today=date(2025, 4, 2)).ensure_record(resident, 4, 2025)

    assert april.carried_forward == D('1350')
    assert april.advance_balance == D('1350')
    assert april.effective_balance == D('9300')
    resident.refresh_from_db()
    assert resident.tenant_credit == D('0')


def test_carried_credit_is_read_from_the_stored_tenant(resident):
    BillingService(today=MARCH).ensure_record(resident, 3, 2025)
    stale = Tenant.objects.get(pk=resident.pk)
    Tenant.objects.filter(pk=resident.pk).update(tenant_credit=D('150'))

    april = BillingService(today=date(2025, 4, 2)).ensure_record(stale, 4, 2025)

    assert april.carried_forward == D('150')
    assert stale.tenant_credit == D('0')
    resident.refresh_from_db()
    assert resident.tenant_credit == D('0')


def test_settle_applies_advance_in_excess_order(resident):
    pay(BillingService(today=MARCH), resident, rent=D('12000'))
    service = BillingService(today=date(2025, 4, 2))
    service.ensure_record(resident, 4, 2025)

    record, result = service.settle(resident.id, 4, 2025)

    assert result.settlements == {'penalties': D('0'), 'water': D('500'), 'garbage': D('150'), 'rent': D('700')}
    assert result.total_settled == D('1350')
    assert result.remaining_credit == D('0')
    assert record.advance_balance == D('0')
    assert record.balance_due == D('9300')
    assert record.effective_balance == D('9300')


def test_next_payment_uses_advance_first(resident):
    pay(BillingService(today=MARCH), resident, rent=D('12000'))
    service = BillingService(today=date(2025, 4, 2))
    service.ensure_record(resident, 4, 2025)

    record, _, credit = pay(service, resident, month=4, rent=D('9300'))

    assert credit == D('0')
    assert record.advance_balance == D('0')
    assert record.balance_due == D('0')


def test_settle_without_credit_is_rejected(resident):
    service = BillingService(today=MARCH)
    service.ensure_record(resident, 3, 2025)
    with pytest.raises(BusinessLogicError) as exc:
        service.settle(resident.id, 3, 2025)
    assert exc.value.code == 'NO_CREDIT'


def test_penalties_after_due_day(building, resident):
    Penalty.objects.create(building=building, percentage=D('10'))
    service = BillingService(today=MARCH)
    pay(service, resident, rent=D('4000'))

    applied = service.calculate_penalties(3, 2025)

    assert [(r.tenant_id, amount) for r, amount in applied] == [(resident.id, D('600.00'))]
    record = MonthlyRecord.objects.get(tenant=resident, month=3, year=2025)
    assert record.penalties == D('600.00')
    assert record.balance_due == D('7250.00')
    # Already penalised
    assert service.calculate_penalties(3, 2025) == []


def test_no_penalties_before_due_day_or_in_dry_run(building, resident):
    Penalty.objects.create(building=building, percentage=D('10'))

    assert BillingService(today=date(2025, 3, 3)).calculate_penalties(3, 2025) == []

    service = BillingService(today=MARCH)
    service.ensure_record(resident, 3, 2025)
    assert len(service.calculate_penalties(3, 2025, dry_run=True)) == 1
    assert MonthlyRecord.objects.get(tenant=resident).penalties == D('0')


def test_receipt_figures_add_up(resident):
    service = BillingService(today=MARCH)
    pay(service, resident, rent=D('6000'))

    receipt = service.build_receipt(resident, 3, 2025)

    assert receipt.receipt_no == f"RCP-202503-{resident.id:05d}"
    assert receipt.total_due == D('10650')
    assert receipt.amount_paid == D('6000')
    assert receipt.amount_paid + receipt.balance_due == receipt.total_due


def test_left_tenant_is_not_billed_after_leaving(resident):
    resident.status = TenantStatus.LEFT
    resident.leaving_date = date(2025, 3, 20)
    resident.save()

    service = BillingService(today=date(2025, 5, 10))
    assert service.ensure_record(resident, 3, 2025) is not None
    assert service.ensure_record(resident, 4, 2025) is None


def test_dry_run_counts_months_without_records(building, resident):
    Penalty.objects.create(building=building, percentage=D('10'))
    service = BillingService(today=date(2025, 4, 10))

    preview = service.calculate_penalties(3, 2025, dry_run=True)

    assert [amount for _, amount in preview] == [D('1000.00')]
    assert not MonthlyRecord.objects.exists()
    resident.refresh_from_db()
    assert resident.tenant_credit == D('0')

    applied = service.calculate_penalties(3, 2025)
    assert [amount for _, amount in applied] == [D('1000.00')]
