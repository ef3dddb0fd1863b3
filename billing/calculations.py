"""
Billing arithmetic.

Plain functions over Decimal amounts, shared by the monthly record model,
the billing service, receipts and reports. Nothing here touches the database.

    total_due  = rent + water + garbage + penalties
    effective  = max(0, total_due - advance) if advance > 0 else balance_due
    status     = paid if effective == 0
                 else pending before the due day, overdue from it
"""
from decimal import Decimal

from core.constants import PaymentStatus, HistoryStatus, DefaultLimits
from core.dto import AllocationDTO

ZERO = Decimal('0.00')

# Order in which overpaid amounts are moved to other outstanding charges
EXCESS_ORDER = ('penalties', 'water', 'garbage', 'rent')


def to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def total_due(rent, water, garbage, penalties):
    return to_decimal(rent) + to_decimal(water) + to_decimal(garbage) + to_decimal(penalties)


def balance_due(total, applied):
    """Outstanding amount after applied payments, never negative"""
    return max(ZERO, to_decimal(total) - to_decimal(applied))


def effective_balance(total, advance_balance, balance):
    """
    Balance the tenant still owes for the month. An unapplied advance is
    offset against the whole month's charges.
    """
    advance_balance = to_decimal(advance_balance)
    if advance_balance > 0:
        return max(ZERO, to_decimal(total) - advance_balance)
    return max(ZERO, to_decimal(balance))


def payment_status(effective, day_of_month, due_day=DefaultLimits.RENT_DUE_DAY):
    if to_decimal(effective) == 0:
        return PaymentStatus.PAID
    if day_of_month < due_day:
        return PaymentStatus.PENDING
    return PaymentStatus.OVERDUE


def status_for_period(effective, month, year, today, due_day=DefaultLimits.RENT_DUE_DAY):
    """
    Payment status of a given month as seen on `today`. Past months with a
    balance are overdue, future months are pending.
    """
    if (year, month) < (today.year, today.month):
        day = 31
    elif (year, month) > (today.year, today.month):
        day = 0
    else:
        day = today.day
    return payment_status(effective, day, due_day)


def history_status(effective, applied, deposit_paid):
    """
    Label of a month in a tenant's payment history. A month is `deposit`
    only when the deposit is the sole payment; a deposit month with bill
    payments is `partial` (or `paid` once cleared).
    """
    if to_decimal(effective) == 0:
        return HistoryStatus.PAID
    if to_decimal(applied) > 0:
        return HistoryStatus.PARTIAL
    if to_decimal(deposit_paid) > 0:
        return HistoryStatus.DEPOSIT
    return HistoryStatus.UNPAID


def outstanding(charges, paid):
    """Remaining amount per category; both arguments are keyed by EXCESS_ORDER names"""
    return {
        category: max(ZERO, to_decimal(charges.get(category)) - to_decimal(paid.get(category)))
        for category in EXCESS_ORDER
    }


def allocate_payment(amounts, remaining):
    """
    Split a payment over the outstanding charges.

    Each category first takes what was paid towards it, up to what it still
    owes. Whatever is left over is pooled and given to the other outstanding
    categories in EXCESS_ORDER. Anything still left becomes credit.
    """
    remaining = {c: to_decimal(remaining.get(c)) for c in EXCESS_ORDER}
    allocated = {c: ZERO for c in EXCESS_ORDER}
    excess = ZERO

    for category in EXCESS_ORDER:
        amount = to_decimal(amounts.get(category))
        if amount < 0:
            raise ValueError(f"Negative {category} amount")
        take = min(amount, remaining[category])
        allocated[category] += take
        remaining[category] -= take
        excess += amount - take

    excess = apply_credit(excess, remaining, allocated)
    return AllocationDTO(credit=excess, **allocated)


def apply_credit(credit, remaining, allocated=None):
    """
    Use a credit amount against outstanding charges in EXCESS_ORDER.
    Updates `remaining` (and `allocated` when given) in place and returns
    the credit that could not be used.
    """
    credit = to_decimal(credit)
    for category in EXCESS_ORDER:
        if credit <= 0:
            break
        take = min(credit, remaining[category])
        if take > 0:
            remaining[category] -= take
            credit -= take
            if allocated is not None:
                allocated[category] += take
    return credit


def late_penalty(monthly_rent, rent_paid, advance_balance, percentage):
    """Penalty on the rent still unpaid, rounded to cents"""
    unpaid = to_decimal(monthly_rent) - to_decimal(rent_paid) - to_decimal(advance_balance)
    if unpaid <= 0 or to_decimal(percentage) <= 0:
        return ZERO
    return (unpaid * to_decimal(percentage) / Decimal(100)).quantize(Decimal('0.01'))


def receipt_amounts(total, effective):
    """(amount_paid, balance_due) as printed on a receipt; they always add up to total"""
    total = to_decimal(total)
    effective = min(max(ZERO, to_decimal(effective)), total)
    return total - effective, effective
