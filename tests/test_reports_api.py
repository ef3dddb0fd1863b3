import csv
import io

import pytest
from django.utils import timezone

from reports.services import REPORTS

pytestmark = pytest.mark.django_db


@pytest.fixture
def paid_tenant(admin_client, tenant):
    today = timezone.localdate()
    admin_client.post('/api/v1/admin/transactions/upsert', {
        'tenantId': tenant.id,
        'transaction': {'rent': '4000', 'water': '500', 'method': 'cash'},
        'record': {'month': today.month, 'year': today.year},
    }, format='json')
    return tenant


@pytest.mark.parametrize('name', sorted(REPORTS))
def test_every_report_renders(viewer_client, paid_tenant, name):
    response = viewer_client.get(f'/api/v1/reports/{name}')

    assert response.status_code == 200, response.json()
    body = response.json()
    assert body['success'] is True
    assert 'summary' in body


def test_unknown_report(viewer_client):
    response = viewer_client.get('/api/v1/reports/profit-forecast')

    assert response.status_code == 404
    assert response.json()['code'] == 'UNKNOWN_REPORT'


def test_tenant_balances_summary(viewer_client, paid_tenant):
    summary = viewer_client.get('/api/v1/reports/tenant-balances').json()['summary']

    assert summary['totalTenants'] == 1
    assert summary['totalExpected'] == 10650
    assert summary['totalCollected'] == 4500
    assert summary['totalBalanceDue'] == 6150
    assert summary['collectionRate'] == 42.3


def test_outstanding_balances_respects_min_balance(viewer_client, paid_tenant):
    assert viewer_client.get('/api/v1/reports/outstanding-balances').json()['summary']['count'] == 1

    response = viewer_client.get('/api/v1/reports/outstanding-balances', {'minBalance': '7000'})
    assert response.json()['summary']['count'] == 0


def test_payment_history_groups_by_method(viewer_client, paid_tenant):
    body = viewer_client.get('/api/v1/reports/payment-history').json()

    assert body['summary']['count'] == 1
    assert body['summary']['byMethod'] == {'cash': 4500}
    assert body['data'][0]['reference'].startswith('CASH-')


def test_building_filter_excludes_other_buildings(viewer_client, paid_tenant):
    response = viewer_client.get('/api/v1/reports/tenant-balances', {'buildingName': 'Hilltop Flats'})
    assert response.json()['data'] == []


def test_invalid_date_filter(viewer_client):
    response = viewer_client.get('/api/v1/reports/payment-history', {'startDate': '01/02/2025'})

    assert response.status_code == 400
    assert response.json()['code'] == 'INVALID_DATE'


def test_csv_export(viewer_client, paid_tenant):
    response = viewer_client.get('/api/v1/reports/tenant-balances/csv')

    assert response.status_code == 200
    assert response['Content-Type'].startswith('text/csv')
    rows = list(csv.reader(io.StringIO(response.content.decode())))
    assert rows[0][:3] == ['Tenant', 'Building', 'House']
    assert rows[1][0] == paid_tenant.name


def test_pdf_export(viewer_client, paid_tenant):
    response = viewer_client.get('/api/v1/reports/annual-summary/pdf')

    assert response.status_code == 200
    assert response['Content-Type'] == 'application/pdf'
    assert 'annual-summary-' in response['Content-Disposition']
    assert response.content.startswith(b'%PDF')
