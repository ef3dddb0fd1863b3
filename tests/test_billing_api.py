from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.core import mail
from django.utils import timezone

from billing.models import Penalty, Transaction

pytestmark = pytest.mark.django_db


def period():
    today = timezone.localdate()
    return today.month, today.year


def upsert(client, tenant, **transaction):
    month, year = period()
    transaction.setdefault('method', 'mpesa')
    transaction.setdefault('reference', 'QWE123RTY')
    return client.post('/api/v1/admin/transactions/upsert', {
        'tenantId': tenant.id,
        'transaction': transaction,
        'record': {'month': month, 'year': year},
    }, format='json')


def test_upsert_allocates_payment_and_reports_credit(admin_client, tenant):
    response = upsert(admin_client, tenant, rent='11000', water='500', garbage='150')

    assert response.status_code == 200, response.json()
    body = response.json()
    assert body['success'] is True
    assert body['creditAdded'] == 1000
    record = body['record']
    assert record['rentPaid'] == 10000
    assert record['balanceDue'] == 0
    assert record['status'] == 'paid'
    assert len(record['transactions']) == 1

    tenant.refresh_from_db()
    assert tenant.tenant_credit == Decimal('1000')


def test_upsert_ignores_client_computed_totals(admin_client, tenant):
    month, year = period()
    response = admin_client.post('/api/v1/admin/transactions/upsert', {
        'tenantId': tenant.id,
        'transaction': {'rent': '2000', 'method': 'cash'},
        'record': {'month': month, 'year': year, 'rentPaid': 99999, 'balanceDue': 0},
    }, format='json')

    assert response.status_code == 200
    assert response.json()['record']['rentPaid'] == 2000
    assert response.json()['record']['balanceDue'] == 8650


def test_upsert_water_bill_only(admin_client, tenant):
    response = upsert(admin_client, tenant, waterBill='750')

    assert response.status_code == 200
    assert response.json()['record']['waterBill'] == 750
    assert not Transaction.objects.exists()


def test_upsert_requires_reference_for_mpesa(admin_client, tenant):
    response = upsert(admin_client, tenant, rent='100', reference='')

    assert response.status_code == 400
    assert response.json()['code'] == 'REFERENCE_REQUIRED'


def test_upsert_rejects_negative_amounts(admin_client, tenant):
    response = upsert(admin_client, tenant, rent='-5')
    assert response.status_code == 400


def test_viewer_cannot_record_payments(viewer_client, tenant):
    response = upsert(viewer_client, tenant, rent='100')
    assert response.status_code == 403


def test_settle_uses_tenant_credit(admin_client, tenant):
    month, year = period()
    admin_client.get('/api/v1/tenants/getTenants')
    tenant.tenant_credit = Decimal('800')
    tenant.save()

    response = admin_client.post('/api/v1/admin/transactions/settle',
                                 {'tenantId': tenant.id, 'month': month, 'year': year}, format='json')

    assert response.status_code == 200, response.json()
    body = response.json()
    assert body['settlements'] == {'penalties': 0, 'water': 500, 'garbage': 150, 'rent': 150}
    assert body['totalSettled'] == 800
    assert body['remainingTenantCredit'] == 0
    assert body['record']['balanceDue'] == 9850


def test_settle_without_credit_conflicts(admin_client, tenant):
    month, year = period()
    response = admin_client.post('/api/v1/admin/transactions/settle',
                                 {'tenantId': tenant.id, 'month': month, 'year': year}, format='json')

    assert response.status_code == 409
    assert response.json()['code'] == 'NO_CREDIT'


def test_monthly_transactions_and_tenant_transactions(admin_client, viewer_client, tenant):
    upsert(admin_client, tenant, rent='5000')
    month, year = period()

    monthly = viewer_client.get('/api/v1/transactions/getTransactions/monthly', {'month': month, 'year': year})
    assert monthly.status_code == 200
    assert monthly.json()['count'] == 1
    assert monthly.json()['records'][0]['tenantName'] == tenant.name

    history = viewer_client.get(f'/api/v1/transactions/tenant/{tenant.id}')
    assert history.json()['count'] == 1
    assert history.json()['records'][0]['reference'] == 'QWE123RTY'


def test_penalty_crud_one_per_building(admin_client, viewer_client, building):
    created = admin_client.post('/api/v1/admin/penalties/create',
                                {'buildingId': building.id, 'percentage': '5'}, format='json')
    assert created.status_code == 201, created.json()
    penalty_id = created.json()['data']['id']

    duplicate = admin_client.post('/api/v1/admin/penalties/create',
                                  {'buildingId': building.id, 'percentage': '7'}, format='json')
    assert duplicate.status_code == 400

    listed = viewer_client.get('/api/v1/penalties/get')
    assert listed.json()['data'][0]['buildingName'] == building.name

    updated = admin_client.put(f'/api/v1/admin/penalties/update/{penalty_id}', {'percentage': '8'}, format='json')
    assert updated.status_code == 200
    assert Penalty.objects.get(pk=penalty_id).percentage == Decimal('8')

    deleted = admin_client.delete(f'/api/v1/admin/penalties/delete/{penalty_id}')
    assert deleted.status_code == 200
    assert not Penalty.objects.exists()


def test_receipt_json(viewer_client, admin_client, tenant):
    upsert(admin_client, tenant, rent='6000')
    month, year = period()

    response = viewer_client.get(f'/api/v1/receipts/{tenant.id}', {'month': month, 'year': year})

    assert response.status_code == 200
    data = response.json()['data']
    assert data['receiptNo'] == f"RCP-{year}{month:02d}-{tenant.id:05d}"
    assert data['amountPaid'] + data['balanceDue'] == data['totalDue']
    assert data['amountPaid'] == 6000


def test_receipt_pdf(viewer_client, tenant):
    response = viewer_client.get(f'/api/v1/receipts/{tenant.id}/pdf')

    assert response.status_code == 200
    assert response['Content-Type'] == 'application/pdf'
    assert response.content.startswith(b'%PDF')


def test_send_receipt_email_attaches_pdf(admin_client, tenant):
    month, year = period()
    response = admin_client.post('/api/v1/admin/receipts/send-email', {
        'email': 'jane@example.com', 'tenantId': tenant.id, 'month': month, 'year': year,
    }, format='json')

    assert response.status_code == 200, response.json()
    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ['jane@example.com']
    filename, content, mimetype = message.attachments[0]
    assert filename.startswith('RCP-')
    assert mimetype == 'application/pdf'


def test_send_receipt_sms_reports_cost(admin_client):
    gateway = mock.Mock()
    gateway.json.return_value = {'status': 'sent', 'cost': 'KES 0.80'}
    with mock.patch('common.notifications.requests.post', return_value=gateway) as post:
        response = admin_client.post('/api/v1/admin/receipts/send-sms', {
            'phone': '0712345678', 'tenantName': 'Jane', 'month': 'March', 'year': 2025,
            'amountPaid': '6000', 'balanceDue': '4650', 'receiptNo': 'RCP-202503-00001',
        }, format='json')

    assert response.status_code == 200, response.json()
    assert response.json()['cost'] == 'KES 0.80'
    assert post.call_args.kwargs['json']['to'] == '+254712345678'


def test_send_receipt_sms_rejects_bad_phone(admin_client):
    response = admin_client.post('/api/v1/admin/receipts/send-sms', {
        'phone': '12345', 'tenantName': 'Jane', 'month': 'March', 'year': 2025,
        'amountPaid': '6000', 'balanceDue': '0', 'receiptNo': 'RCP-202503-00001',
    }, format='json')

    assert response.status_code == 400
    assert response.json()['code'] == 'INVALID_PHONE'


def test_calculate_penalties_endpoint(admin_client, building, tenant):
    Penalty.objects.create(building=building, percentage=Decimal('10'))
    today = timezone.localdate()
    last_month = today.replace(day=1) - timedelta(days=1)
    tenant.entry_date = last_month.replace(day=1)
    tenant.save()

    response = admin_client.post('/api/v1/admin/penalties/calculate',
                                 {'month': last_month.month, 'year': last_month.year}, format='json')

    assert response.status_code == 200, response.json()
    assert response.json()['count'] == 1
    assert response.json()['data'][0]['penalty'] == 1000
