from datetime import date
from decimal import Decimal

import pytest

from billing import calculations
from core.constants import PaymentStatus, HistoryStatus

D = Decimal


def test_total_due_adds_all_charges():
    assert calculations.total_due(D('10000'), D('500'), D('150'), D('1000')) == D('11650')
    assert calculations.total_due(None, 500, '150.50', 0) == D('650.50')


def test_balance_due_never_negative():
    assert calculations.balance_due(D('100'), D('40')) == D('60')
    assert calculations.balance_due(D('100'), D('140')) == D('0')


def test_effective_balance_offsets_unapplied_advance():
    assert calculations.effective_balance(D('10650'), D('1350'), D('10650')) == D('9300')
    assert calculations.effective_balance(D('1000'), D('5000'), D('1000')) == D('0')
    assert calculations.effective_balance(D('10650'), D('0'), D('200')) == D('200')


@pytest.mark.parametrize('effective,day,expected', [
    (D('0'), 20, PaymentStatus.PAID),
    (D('10'), 3, PaymentStatus.PENDING),
    (D('10'), 5, PaymentStatus.OVERDUE),
    (D('10'), 28, PaymentStatus.OVERDUE),
])
def test_payment_status(effective, day, expected):
    assert calculations.payment_status(effective, day, due_day=5) == expected


def test_status_for_past_and_future_months():
    today = date(2025, 3, 2)
    assert calculations.status_for_period(D('5'), 2, 2025, today, 5) == PaymentStatus.OVERDUE
    assert calculations.status_for_period(D('5'), 3, 2025, today, 5) == PaymentStatus.PENDING
    assert calculations.status_for_period(D('5'), 4, 2025, today, 5) == PaymentStatus.PENDING
    assert calculations.status_for_period(D('0'), 2, 2025, today, 5) == PaymentStatus.PAID


def test_history_status():
    assert calculations.history_status(D('0'), D('100'), D('0')) == HistoryStatus.PAID
    assert calculations.history_status(D('50'), D('100'), D('0')) == HistoryStatus.PARTIAL
    assert calculations.history_status(D('50'), D('0'), D('2000')) == HistoryStatus.DEPOSIT
    assert calculations.history_status(D('50'), D('0'), D('0')) == HistoryStatus.UNPAID
    assert calculations.history_status(D('50'), D('100'), D('2000')) == HistoryStatus.PARTIAL


def test_allocation_moves_excess_in_order_and_keeps_credit():
    remaining = {'rent': D('10000'), 'water': D('500'), 'garbage': D('150'), 'penalties': D('200')}
    allocation = calculations.allocate_payment({'rent': D('12000')}, remaining)

    assert allocation.rent == D('10000')
    assert allocation.penalties == D('200')
    assert allocation.water == D('500')
    assert allocation.garbage == D('150')
    assert allocation.credit == D('1150')


def test_allocation_never_exceeds_outstanding_and_accounts_for_every_shilling():
    remaining = {'rent': D('3000'), 'water': D('0'), 'garbage': D('150'), 'penalties': D('0')}
    paid = {'rent': D('1000'), 'water': D('700'), 'garbage': D('150')}
    allocation = calculations.allocate_payment(paid, remaining)

    for category, outstanding in remaining.items():
        assert getattr(allocation, category) <= outstanding
    assert allocation.applied + allocation.credit == sum(paid.values())
    assert allocation.rent == D('1700')
    assert allocation.credit == D('0')


def test_allocation_rejects_negative_amounts():
    with pytest.raises(ValueError):
        calculations.allocate_payment({'rent': D('-1')}, {'rent': D('100')})


def test_apply_credit_returns_unused_credit():
    remaining = {'rent': D('100'), 'water': D('0'), 'garbage': D('50'), 'penalties': D('0')}
    left = calculations.apply_credit(D('500'), remaining)
    assert left == D('350')
    assert remaining['rent'] == D('0')
    assert remaining['garbage'] == D('0')


def test_late_penalty_on_unpaid_rent():
    assert calculations.late_penalty(D('10000'), D('4000'), D('0'), D('10')) == D('600.00')
    assert calculations.late_penalty(D('10000'), D('4000'), D('1000'), D('10')) == D('500.00')
    assert calculations.late_penalty(D('10000'), D('10000'), D('0'), D('10')) == D('0')
    assert calculations.late_penalty(D('333'), D('0'), D('0'), D('7.5')) == D('24.98')


def test_receipt_amounts_always_add_up():
    for total, effective in [(D('10650'), D('650')), (D('10650'), D('0')), (D('100'), D('400'))]:
        paid, balance = calculations.receipt_amounts(total, effective)
        assert paid + balance == total
        assert balance >= 0
