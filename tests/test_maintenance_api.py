import pytest

from maintenance.models import MaintenanceRequest

pytestmark = pytest.mark.django_db


@pytest.fixture
def job(admin_client, tenant):
    response = admin_client.post('/api/v1/admin/maintenance', {
        'buildingId': tenant.building_id,
        'tenantId': tenant.id,
        'issueTitle': '  Leaking kitchen sink ',
        'priority': 'high',
        'assignedTo': 'Plumber',
    }, format='json')
    assert response.status_code == 201, response.json()
    return response.json()['data']


def test_create_accepts_camel_case_and_links_unit(job, tenant, admin_user):
    assert job['issue_title'] == 'Leaking kitchen sink'
    assert job['status'] == 'pending'
    assert job['unit_number'] == 'A1'
    assert job['tenant_name'] == tenant.name
    assert MaintenanceRequest.objects.get(pk=job['id']).created_by == admin_user


def test_tenant_must_live_in_building(admin_client, tenant):
    from buildings.models import Building
    other = Building.objects.create(name='Hilltop Flats')
    response = admin_client.post('/api/v1/admin/maintenance', {
        'buildingId': other.id, 'tenantId': tenant.id, 'issueTitle': 'Broken door',
    }, format='json')

    assert response.status_code == 400
    assert 'tenant_id' in response.json()['errors']


def test_list_includes_summary(viewer_client, job):
    response = viewer_client.get('/api/v1/maintenance', {'priority': 'high'})

    assert response.status_code == 200
    body = response.json()
    assert len(body['data']) == 1
    assert body['summary']['total'] == 1
    assert body['summary']['pending'] == 1
    assert body['summary']['byPriority']['high'] == 1


def test_status_transitions(admin_client, job):
    url = f"/api/v1/admin/maintenance/{job['id']}/status"

    started = admin_client.patch(url, {'status': 'in_progress'}, format='json')
    assert started.status_code == 200
    assert started.json()['data']['status'] == 'in_progress'

    done = admin_client.patch(url, {'status': 'completed'}, format='json')
    assert done.json()['data']['completed_at'] is not None

    reopened = admin_client.patch(url, {'status': 'cancelled'}, format='json')
    assert reopened.status_code == 409
    assert reopened.json()['code'] == 'INVALID_TRANSITION'


def test_unknown_status_is_rejected(admin_client, job):
    response = admin_client.patch(f"/api/v1/admin/maintenance/{job['id']}/status", {'status': 'done'}, format='json')

    assert response.status_code == 400
    assert response.json()['code'] == 'INVALID_STATUS'


def test_expenses_accumulate_cost(admin_client, viewer_client, job):
    url = f"/api/v1/admin/maintenance/{job['id']}/expenses"
    first = admin_client.post(url, {'description': 'New tap', 'amount': '1200', 'paymentMethod': 'cash'},
                              format='json')
    assert first.status_code == 201, first.json()
    second = admin_client.post(url, {'description': 'Labour', 'amount': '800', 'paidBy': 'Caretaker'},
                               format='json')
    assert second.json()['data']['totalCost'] == 2000

    expenses = viewer_client.get('/api/v1/maintenance/expenses').json()
    assert expenses['count'] == 2
    assert {e['issue_title'] for e in expenses['data']} == {'Leaking kitchen sink'}

    detail = viewer_client.get(f"/api/v1/maintenance/{job['id']}").json()['data']
    assert detail['cost'] == 2000


def test_no_expenses_on_cancelled_request(admin_client, job):
    admin_client.patch(f"/api/v1/admin/maintenance/{job['id']}/status", {'status': 'cancelled'}, format='json')

    response = admin_client.post(f"/api/v1/admin/maintenance/{job['id']}/expenses",
                                 {'description': 'New tap', 'amount': '1200'}, format='json')

    assert response.status_code == 409
    assert response.json()['code'] == 'REQUEST_CANCELLED'


def test_expense_amount_must_be_positive(admin_client, job):
    response = admin_client.post(f"/api/v1/admin/maintenance/{job['id']}/expenses",
                                 {'description': 'Nothing', 'amount': '0'}, format='json')
    assert response.status_code == 400
