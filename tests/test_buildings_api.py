import pytest

from buildings.models import Building, Unit, UnitType
from audit.models import AuditLog

pytestmark = pytest.mark.django_db


def test_admin_creates_building_with_generated_code(admin_client):
    response = admin_client.post('/api/v1/admin/buildings', {
        'name': 'Green Court', 'city': 'Nakuru', 'type': 'residential',
    }, format='json')

    assert response.status_code == 201, response.json()
    data = response.json()['data']
    assert data['code'] == 'GC'
    assert data['total_units'] == 0
    assert AuditLog.objects.filter(resource_type=AuditLog.RESOURCE_BUILDING, action=AuditLog.ACTION_CREATE).exists()


def test_generated_codes_stay_unique():
    Building.objects.create(name='Green Court')
    second = Building.objects.create(name='Garden City')
    assert second.code == 'GC2'


def test_viewer_cannot_create_buildings(viewer_client):
    response = viewer_client.post('/api/v1/admin/buildings', {'name': 'Green Court'}, format='json')
    assert response.status_code == 403


def test_building_unit_type_creates_unit_type_by_name(admin_client, building):
    response = admin_client.post('/api/v1/admin/settings/building-unit-types', {
        'building_id': building.id, 'name': 'One Bedroom', 'monthly_rent': '18000',
    }, format='json')

    assert response.status_code == 201, response.json()
    assert response.json()['data']['unit_type_name'] == 'One Bedroom'
    assert UnitType.objects.filter(name='One Bedroom').exists()

    duplicate = admin_client.post('/api/v1/admin/settings/building-unit-types', {
        'building_id': building.id, 'name': 'One Bedroom', 'monthly_rent': '19000',
    }, format='json')
    assert duplicate.status_code == 400


def test_units_and_staff(admin_client, viewer_client, building, bedsitter):
    unit = admin_client.post('/api/v1/admin/buildings/units', {
        'building_id': building.id, 'unit_type_id': bedsitter.id, 'unit_number': 'C3',
    }, format='json')
    assert unit.status_code == 201, unit.json()
    assert unit.json()['data']['monthly_rent'] == 10000

    clash = admin_client.post('/api/v1/admin/buildings/units', {
        'building_id': building.id, 'unit_number': 'c3',
    }, format='json')
    assert clash.status_code == 400
    assert 'unit_number' in clash.json()['errors']

    staff = admin_client.post('/api/v1/admin/buildings/staff', {
        'building_id': building.id, 'role': 'Caretaker', 'name': 'Peter Otieno', 'phone': '0722000111',
    }, format='json')
    assert staff.status_code == 201

    units = viewer_client.get(f'/api/v1/buildings/{building.id}/units').json()['data']
    assert [u['unit_number'] for u in units] == ['C3']
    assert units[0]['tenant_name'] is None
    staff_list = viewer_client.get(f'/api/v1/buildings/{building.id}/staff').json()['data']
    assert staff_list[0]['name'] == 'Peter Otieno'


def test_full_listing_nests_units_and_prices(viewer_client, tenant, bedsitter):
    response = viewer_client.get('/api/v1/buildings/full')

    assert response.status_code == 200
    body = response.json()
    assert body['count'] == 1
    building = body['data'][0]
    assert building['occupied_units'] == 1
    assert building['units'][0]['tenant_name'] == tenant.name
    assert building['unitTypes'][0]['monthly_rent'] == 10000


def test_buildings_with_unit_types(viewer_client, bedsitter):
    response = viewer_client.get('/api/v1/settings/buildings-with-unit-types')

    assert response.status_code == 200
    assert response.json()['data'][0]['unitTypes'][0]['unit_type_name'] == 'Bedsitter'


def test_cannot_delete_building_with_active_tenants(admin_client, tenant):
    response = admin_client.delete(f'/api/v1/admin/buildings/{tenant.building_id}')

    assert response.status_code == 409
    assert response.json()['code'] == 'BUILDING_HAS_TENANTS'
    assert Building.objects.filter(pk=tenant.building_id).exists()


def test_cannot_delete_occupied_unit(admin_client, tenant):
    response = admin_client.delete(f'/api/v1/admin/buildings/units/{tenant.unit_id}')
    assert response.status_code == 409


def test_delete_empty_building(admin_client, building):
    Unit.objects.create(building=building, unit_number='Z9')
    response = admin_client.delete(f'/api/v1/admin/buildings/{building.id}')

    assert response.status_code == 200
    assert not Building.objects.exists()
