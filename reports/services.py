"""
Report builders.

Each report returns (data, summary). Billing figures come from monthly
records; income figures come from transactions, i.e. money actually
received.
"""
from collections import OrderedDict
from datetime import date

from django.db.models import Sum, Count

from api.filters import filter_by_building
from billing import calculations
from billing.models import MonthlyRecord, Transaction
from billing.services import BillingService
from core.constants import MONTH_NAMES, PaymentStatus
from core.exceptions import ValidationError
from core.services import BaseService
from core.validators import PeriodValidator, MoneyValidator
from maintenance.models import MaintenanceRequest

ZERO = calculations.ZERO
PAYMENT_AMOUNTS = ('rent', 'water', 'garbage', 'penalty', 'deposit', 'total_amount')


def _parse_date(value, field):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(message=f"{field} must be a date (YYYY-MM-DD)", code="INVALID_DATE")


def _rate(part, whole):
    if not whole:
        return 0.0
    return round(float(part) / float(whole) * 100, 1)


class ReportService(BaseService):
    """Builds the reports listed in REPORTS from request query parameters"""

    def __init__(self, params, user=None, request=None):
        super().__init__(user=user, request=request)
        self.params = params
        self.billing = BillingService(user=user, request=request)

    def _period(self):
        return PeriodValidator.parse_period(self.params.get('month'), self.params.get('year'))

    def _year(self):
        return PeriodValidator.parse_period(None, self.params.get('year'))[1]

    def _records(self, month, year):
        self.billing.ensure_records(month, year)
        records = MonthlyRecord.objects.filter(month=month, year=year).select_related('tenant__building')
        records = filter_by_building(records, self.params, field='tenant__building')
        return records.order_by('tenant__building__name', 'tenant__house_number')

    def _transactions(self):
        transactions = Transaction.objects.select_related('tenant__building')
        return filter_by_building(transactions, self.params, field='tenant__building')

    def describe_filters(self):
        parts = []
        for key in ('buildingName', 'month', 'year', 'status', 'startDate', 'endDate'):
            if self.params.get(key):
                parts.append(f"{key}: {self.params[key]}")
        return ', '.join(parts)

    # ------------------------------------------------------------------

    def _balance_row(self, record):
        effective = record.effective_balance
        return {
            'tenantId': record.tenant_id,
            'tenantName': record.tenant.name,
            'mobile': record.tenant.mobile,
            'houseNumber': record.tenant.house_number,
            'buildingName': record.tenant.building.name,
            'month': record.month_name,
            'year': record.year,
            'monthlyRent': record.monthly_rent,
            'waterBill': record.water_bill,
            'garbageBill': record.garbage_bill,
            'penalties': record.penalties,
            'totalDue': record.total_due,
            'totalPaid': record.total_applied,
            'advanceBalance': record.advance_balance,
            'balanceDue': effective,
            'status': self.billing.payment_status(record),
        }

    def tenant_balances(self):
        month, year = self._period()
        rows = [self._balance_row(r) for r in self._records(month, year)]
        status_filter = self.params.get('status')
        if status_filter and status_filter != 'all':
            rows = [r for r in rows if r['status'] == status_filter]

        summary = {
            'month': MONTH_NAMES[month - 1],
            'year': year,
            'totalTenants': len(rows),
            'totalExpected': sum((r['totalDue'] for r in rows), ZERO),
            'totalCollected': sum((r['totalPaid'] for r in rows), ZERO),
            'totalBalanceDue': sum((r['balanceDue'] for r in rows), ZERO),
            'totalAdvance': sum((r['advanceBalance'] for r in rows), ZERO),
            'paidTenants': sum(1 for r in rows if r['status'] == PaymentStatus.PAID),
            'pendingTenants': sum(1 for r in rows if r['status'] == PaymentStatus.PENDING),
            'overdueTenants': sum(1 for r in rows if r['status'] == PaymentStatus.OVERDUE),
        }
        summary['collectionRate'] = _rate(summary['totalCollected'], summary['totalExpected'])
        return rows, summary

    def outstanding_balances(self):
        rows, _ = self.tenant_balances()
        min_balance = MoneyValidator.parse_amount(self.params.get('minBalance'), 'minBalance')
        rows = [r for r in rows if r['balanceDue'] > 0 and r['balanceDue'] >= min_balance]
        rows.sort(key=lambda r: r['balanceDue'], reverse=True)

        limit = self.params.get('limit')
        if limit and str(limit).isdigit():
            rows = rows[:int(limit)]
        summary = {
            'count': len(rows),
            'totalOutstanding': sum((r['balanceDue'] for r in rows), ZERO),
            'largestBalance': rows[0]['balanceDue'] if rows else ZERO,
        }
        return rows, summary

    def payment_history(self):
        transactions = self._transactions()
        if self.params.get('tenantId'):
            transactions = transactions.filter(tenant_id=self.params['tenantId'])
        start = _parse_date(self.params.get('startDate'), 'startDate')
        end = _parse_date(self.params.get('endDate'), 'endDate')
        if start:
            transactions = transactions.filter(date__gte=start)
        if end:
            transactions = transactions.filter(date__lte=end)
        if self.params.get('month') or self.params.get('year'):
            month, year = self._period()
            transactions = transactions.filter(month=month, year=year)

        totals = transactions.aggregate(total=Sum('total_amount'), deposits=Sum('deposit'), count=Count('id'))
        by_method = {
            row['method']: row['amount']
            for row in transactions.values('method').annotate(amount=Sum('total_amount')).order_by('method')
        }

        limit = self.params.get('limit')
        if limit and str(limit).isdigit():
            transactions = transactions[:int(limit)]

        rows = [{
            'id': t.id,
            'date': t.date,
            'tenantId': t.tenant_id,
            'tenantName': t.tenant.name,
            'houseNumber': t.tenant.house_number,
            'buildingName': t.tenant.building.name,
            'month': t.month_name,
            'year': t.year,
            'rent': t.rent,
            'water': t.water,
            'garbage': t.garbage,
            'penalty': t.penalty,
            'deposit': t.deposit,
            'totalAmount': t.total_amount,
            'method': t.method,
            'reference': t.reference,
        } for t in transactions]
        summary = {
            'count': totals['count'],
            'totalAmount': totals['total'] or ZERO,
            'totalDeposits': totals['deposits'] or ZERO,
            'byMethod': by_method,
        }
        return rows, summary

    def monthly_income(self):
        year = self._year()
        sums = {f'sum_{f}': Sum(f) for f in PAYMENT_AMOUNTS}
        per_month = {
            row['month']: row
            for row in self._transactions().filter(year=year).values('month').annotate(count=Count('id'), **sums)
        }

        rows = []
        for month in range(1, 13):
            row = per_month.get(month, {})
            rows.append({
                'month': MONTH_NAMES[month - 1],
                'monthNumber': month,
                'year': year,
                'rent': row.get('sum_rent') or ZERO,
                'water': row.get('sum_water') or ZERO,
                'garbage': row.get('sum_garbage') or ZERO,
                'penalties': row.get('sum_penalty') or ZERO,
                'deposits': row.get('sum_deposit') or ZERO,
                'total': row.get('sum_total_amount') or ZERO,
                'transactions': row.get('count') or 0,
            })
        summary = {
            'year': year,
            'totalIncome': sum((r['total'] for r in rows), ZERO),
            'totalRent': sum((r['rent'] for r in rows), ZERO),
            'totalWater': sum((r['water'] for r in rows), ZERO),
            'totalGarbage': sum((r['garbage'] for r in rows), ZERO),
            'totalPenalties': sum((r['penalties'] for r in rows), ZERO),
            'totalDeposits': sum((r['deposits'] for r in rows), ZERO),
        }
        best = max(rows, key=lambda r: r['total'])
        summary['bestMonth'] = best['month'] if best['total'] > 0 else None
        return rows, summary

    def annual_summary(self):
        year = self._year()
        records = MonthlyRecord.objects.filter(year=year)
        records = filter_by_building(records, self.params, field='tenant__building')
        expected = {
            row['month']: row for row in records.values('month').annotate(
                rent=Sum('monthly_rent'), water=Sum('water_bill'), garbage=Sum('garbage_bill'),
                penalty_total=Sum('penalties'), balance=Sum('balance_due'), tenants=Count('tenant', distinct=True),
            )
        }
        collected = {
            row['month']: row['total'] for row in
            self._transactions().filter(year=year).values('month').annotate(total=Sum('total_amount'))
        }
        maintenance = MaintenanceRequest.objects.filter(date__year=year)
        maintenance = filter_by_building(maintenance, self.params, field='building')
        maintenance_cost = maintenance.aggregate(total=Sum('cost'))['total'] or ZERO

        months = []
        for month in range(1, 13):
            row = expected.get(month, {})
            total_expected = calculations.total_due(
                row.get('rent'), row.get('water'), row.get('garbage'), row.get('penalty_total')
            )
            months.append({
                'month': MONTH_NAMES[month - 1],
                'monthNumber': month,
                'tenants': row.get('tenants') or 0,
                'expected': total_expected,
                'collected': collected.get(month) or ZERO,
                'outstanding': row.get('balance') or ZERO,
            })

        total_expected = sum((m['expected'] for m in months), ZERO)
        total_collected = sum((m['collected'] for m in months), ZERO)
        data = OrderedDict([
            ('year', year),
            ('totalExpected', total_expected),
            ('totalCollected', total_collected),
            ('totalOutstanding', sum((m['outstanding'] for m in months), ZERO)),
            ('collectionRate', _rate(total_collected, total_expected)),
            ('maintenanceCost', maintenance_cost),
            ('netIncome', total_collected - maintenance_cost),
            ('months', months),
        ])
        summary = {k: v for k, v in data.items() if k != 'months'}
        return data, summary

    def monthly_payments_detail(self):
        month, year = self._period()
        rows = []
        for record in self._records(month, year):
            effective = record.effective_balance
            total_paid = record.total_applied
            rows.append({
                'tenantId': record.tenant_id,
                'tenantName': record.tenant.name,
                'mobile': record.tenant.mobile,
                'houseNumber': record.tenant.house_number,
                'buildingName': record.tenant.building.name,
                'monthlyRent': record.monthly_rent,
                'expectedRent': record.monthly_rent,
                'expectedWater': record.water_bill,
                'expectedGarbage': record.garbage_bill,
                'expectedPenalties': record.penalties,
                'rentPaid': record.rent_paid,
                'waterPaid': record.water_paid,
                'garbagePaid': record.garbage_paid,
                'penaltiesPaid': record.penalties_paid,
                'totalExpected': record.total_due,
                'totalPaid': total_paid,
                'balance': effective,
                'outstanding': effective,
                'advance': record.advance_balance,
                'paymentStatus': self.billing.payment_status(record),
                'collectionRate': _rate(record.total_due - effective, record.total_due),
            })

        def total(key):
            return sum((r[key] for r in rows), ZERO)

        summary = {
            'month': MONTH_NAMES[month - 1],
            'year': year,
            'totalTenants': len(rows),
            'totalExpectedRent': total('expectedRent'),
            'totalExpectedWater': total('expectedWater'),
            'totalExpectedGarbage': total('expectedGarbage'),
            'totalExpectedPenalties': total('expectedPenalties'),
            'totalRentPaid': total('rentPaid'),
            'totalWaterPaid': total('waterPaid'),
            'totalGarbagePaid': total('garbagePaid'),
            'totalPenaltiesPaid': total('penaltiesPaid'),
            'totalBalanceDue': total('balance'),
            'totalAdvanceBalance': total('advance'),
            'totalExpected': total('totalExpected'),
            'totalCollected': total('totalPaid'),
            'paidTenants': sum(1 for r in rows if r['balance'] == 0),
            'partialTenants': sum(1 for r in rows if r['balance'] > 0 and r['totalPaid'] > 0),
            'notPaidTenants': sum(1 for r in rows if r['balance'] > 0 and r['totalPaid'] == 0),
            'overdueTenants': sum(1 for r in rows if r['paymentStatus'] == PaymentStatus.OVERDUE),
        }
        return rows, summary


# name -> (title, builder, export columns as (heading, key), key of the exported rows in data)
REPORTS = {
    'tenant-balances': ('Tenant Balances', ReportService.tenant_balances, [
        ('Tenant', 'tenantName'), ('Building', 'buildingName'), ('House', 'houseNumber'),
        ('Rent', 'monthlyRent'), ('Water', 'waterBill'), ('Garbage', 'garbageBill'),
        ('Penalties', 'penalties'), ('Total Due', 'totalDue'), ('Paid', 'totalPaid'),
        ('Advance', 'advanceBalance'), ('Balance', 'balanceDue'), ('Status', 'status'),
    ], None),
    'payment-history': ('Payment History', ReportService.payment_history, [
        ('Date', 'date'), ('Tenant', 'tenantName'), ('Building', 'buildingName'), ('House', 'houseNumber'),
        ('Period', 'month'), ('Rent', 'rent'), ('Water', 'water'), ('Garbage', 'garbage'),
        ('Penalty', 'penalty'), ('Deposit', 'deposit'), ('Total', 'totalAmount'),
        ('Method', 'method'), ('Reference', 'reference'),
    ], None),
    'monthly-income': ('Monthly Income', ReportService.monthly_income, [
        ('Month', 'month'), ('Rent', 'rent'), ('Water', 'water'), ('Garbage', 'garbage'),
        ('Penalties', 'penalties'), ('Deposits', 'deposits'), ('Total', 'total'),
        ('Transactions', 'transactions'),
    ], None),
    'outstanding-balances': ('Outstanding Balances', ReportService.outstanding_balances, [
        ('Tenant', 'tenantName'), ('Mobile', 'mobile'), ('Building', 'buildingName'),
        ('House', 'houseNumber'), ('Total Due', 'totalDue'), ('Paid', 'totalPaid'),
        ('Balance', 'balanceDue'), ('Status', 'status'),
    ], None),
    'annual-summary': ('Annual Summary', ReportService.annual_summary, [
        ('Month', 'month'), ('Tenants', 'tenants'), ('Expected', 'expected'),
        ('Collected', 'collected'), ('Outstanding', 'outstanding'),
    ], 'months'),
    'monthly-payments-detail': ('Monthly Payments Detail', ReportService.monthly_payments_detail, [
        ('Tenant', 'tenantName'), ('Building', 'buildingName'), ('House', 'houseNumber'),
        ('Expected', 'totalExpected'), ('Rent Paid', 'rentPaid'), ('Water Paid', 'waterPaid'),
        ('Garbage Paid', 'garbagePaid'), ('Penalties Paid', 'penaltiesPaid'),
        ('Balance', 'balance'), ('Advance', 'advance'), ('Status', 'paymentStatus'),
    ], None),
}
