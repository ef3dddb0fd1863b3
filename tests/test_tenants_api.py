from decimal import Decimal

import pytest
from django.utils import timezone

from billing.models import MonthlyRecord
from buildings.models import Unit
from core.constants import TenantStatus
from tenants.models import Tenant

pytestmark = pytest.mark.django_db


def new_tenant_payload(building, house_type, **overrides):
    payload = {
        'name': 'John Kamau',
        'mobile': '0711222333',
        'email': 'john@example.com',
        'buildingId': building.id,
        'houseTypeId': house_type.id,
        'houseNumber': 'B2',
        'garbageBill': '150',
        'depositRequired': '10000',
    }
    payload.update(overrides)
    return payload


def test_admin_adds_tenant_with_house_type(admin_client, building, bedsitter):
    response = admin_client.post('/api/v1/admin/tenants/addNewTenant',
                                 new_tenant_payload(building, bedsitter), format='json')

    assert response.status_code == 201, response.json()
    data = response.json()['data']
    assert data['monthlyRent'] == 10000
    assert data['houseSize'] == 'Bedsitter'
    assert data['buildingName'] == building.name

    tenant = Tenant.objects.get(pk=data['id'])
    assert tenant.entry_date == timezone.localdate()
    assert tenant.unit.unit_number == 'B2'
    assert tenant.unit.is_occupied
    today = timezone.localdate()
    assert MonthlyRecord.objects.filter(tenant=tenant, month=today.month, year=today.year).exists()


def test_building_can_be_given_by_name(admin_client, building, bedsitter):
    payload = new_tenant_payload(building, bedsitter, buildingName='sunrise apartments')
    del payload['buildingId']

    response = admin_client.post('/api/v1/admin/tenants/addNewTenant', payload, format='json')

    assert response.status_code == 201
    assert response.json()['data']['buildingId'] == building.id


def test_occupied_house_number_is_rejected(admin_client, building, bedsitter, tenant):
    payload = new_tenant_payload(building, bedsitter, houseNumber='A1')

    response = admin_client.post('/api/v1/admin/tenants/addNewTenant', payload, format='json')

    assert response.status_code == 400
    assert 'houseNumber' in response.json()['errors']


@pytest.mark.parametrize('field,value', [
    ('mobile', '12345'),
    ('name', 'J'),
    ('houseNumber', ''),
    ('monthlyRent', '-1'),
])
def test_invalid_tenant_fields(admin_client, building, bedsitter, field, value):
    payload = new_tenant_payload(building, bedsitter, **{field: value})

    response = admin_client.post('/api/v1/admin/tenants/addNewTenant', payload, format='json')

    assert response.status_code == 400
    assert response.json()['success'] is False
    assert field in response.json()['errors']


def test_viewer_cannot_add_tenant(viewer_client, building, bedsitter):
    response = viewer_client.post('/api/v1/admin/tenants/addNewTenant',
                                  new_tenant_payload(building, bedsitter), format='json')
    assert response.status_code == 403


def test_tenant_list_merges_current_month(viewer_client, tenant):
    today = timezone.localdate()
    response = viewer_client.get('/api/v1/tenants/getTenants',
                                 {'month': today.strftime('%B'), 'year': today.year})

    assert response.status_code == 200
    body = response.json()
    assert body['count'] == 1
    record = body['records'][0]
    assert record['name'] == 'Jane Wanjiku'
    assert record['totalBill'] == 10650
    assert record['balanceDue'] == 10650
    assert record['recordId'] is not None
    assert record['paymentStatus'] in ('pending', 'overdue')


def test_tenant_list_filters_by_building(viewer_client, tenant):
    response = viewer_client.get('/api/v1/tenants/getTenants', {'buildingName': 'Elsewhere'})
    assert response.json()['count'] == 0

    response = viewer_client.get('/api/v1/tenants/getTenants', {'buildingName': 'all'})
    assert response.json()['count'] == 1


def test_tenant_history(viewer_client, tenant):
    response = viewer_client.get(f'/api/v1/tenants/{tenant.id}/monthly-records')

    assert response.status_code == 200
    body = response.json()
    assert body['tenant']['id'] == tenant.id
    assert body['count'] == 1
    assert body['records'][0]['status'] == 'unpaid'
    assert body['records'][0]['totalDue'] == 10650


def test_all_monthly_records(viewer_client, tenant):
    response = viewer_client.get('/api/v1/tenants/getAllMonthlyRecords')

    assert response.status_code == 200
    records = response.json()['records']
    assert len(records) == 1
    assert records[0]['tenantId'] == tenant.id
    assert records[0]['effectiveBalance'] == 10650


def test_marking_tenant_left_frees_the_unit(admin_client, tenant):
    unit_id = tenant.unit_id

    response = admin_client.put(f'/api/v1/admin/tenants/updateTenant/{tenant.id}',
                                {'status': 'left'}, format='json')

    assert response.status_code == 200, response.json()
    data = response.json()['data']
    assert data['status'] == TenantStatus.LEFT
    assert data['leavingDate'] == timezone.localdate().isoformat()
    assert not Unit.objects.get(pk=unit_id).is_occupied


def test_rent_change_updates_current_record(admin_client, tenant):
    admin_client.get('/api/v1/tenants/getTenants')

    response = admin_client.put(f'/api/v1/admin/tenants/updateTenant/{tenant.id}',
                                {'monthlyRent': '12000'}, format='json')

    assert response.status_code == 200
    today = timezone.localdate()
    record = MonthlyRecord.objects.get(tenant=tenant, month=today.month, year=today.year)
    assert record.monthly_rent == Decimal('12000')


def test_leaving_date_before_entry_is_rejected(admin_client, tenant):
    response = admin_client.put(f'/api/v1/admin/tenants/updateTenant/{tenant.id}',
                                {'status': 'left', 'leavingDate': '2000-01-01'}, format='json')
    assert response.status_code == 400


def test_delete_tenant(admin_client, tenant):
    unit_id = tenant.unit_id

    response = admin_client.delete(f'/api/v1/admin/tenants/deleteTenant/{tenant.id}')

    assert response.status_code == 200
    assert not Tenant.objects.filter(pk=tenant.id).exists()
    assert not Unit.objects.get(pk=unit_id).is_occupied


def test_unknown_tenant_is_404(viewer_client):
    response = viewer_client.get('/api/v1/tenants/9999')

    assert response.status_code == 404
    assert response.json()['success'] is False
