import pytest
from django.conf import settings

from audit.models import AuditLog
from core.constants import UserStatus

LOGIN = '/api/v1/auth/login'
REFRESH = '/api/v1/auth/refresh'
LOGOUT = '/api/v1/auth/logout'
ME = '/api/v1/auth/me'


def login(client, username='admin', password='Str0ng-pass!'):
    return client.post(LOGIN, {'username': username, 'password': password}, format='json')


@pytest.mark.django_db
def test_login_returns_access_token_and_sets_refresh_cookie(api_client, admin_user):
    response = login(api_client)

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert body['accessToken']
    assert body['user']['username'] == 'admin'
    assert body['user']['role'] == 'admin'

    cookie = response.cookies[settings.REFRESH_COOKIE_NAME]
    assert cookie.value
    assert cookie['httponly']
    assert AuditLog.objects.filter(action=AuditLog.ACTION_LOGIN, user=admin_user).exists()


@pytest.mark.django_db
def test_access_token_authenticates_requests(api_client, admin_user):
    token = login(api_client).json()['accessToken']

    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    response = api_client.get(ME)

    assert response.status_code == 200
    assert response.json()['data']['username'] == 'admin'


@pytest.mark.django_db
def test_wrong_password_is_unauthorized(api_client, admin_user):
    response = login(api_client, password='nope')

    assert response.status_code == 401
    assert response.json()['success'] is False
    assert response.json()['message'] == 'Invalid username or password'


@pytest.mark.django_db
def test_suspended_user_cannot_log_in(api_client, viewer_user):
    viewer_user.status = UserStatus.SUSPENDED
    viewer_user.save()

    response = login(api_client, username='viewer')

    assert response.status_code == 403
    assert response.json()['code'] == 'SUSPENDED'


@pytest.mark.django_db
def test_suspension_is_hidden_without_the_right_password(api_client, viewer_user):
    viewer_user.status = UserStatus.SUSPENDED
    viewer_user.save()

    response = login(api_client, username='viewer', password='wrong-pass')

    assert response.status_code == 401
    assert response.json().get('code') != 'SUSPENDED'


@pytest.mark.django_db
def test_refresh_rotates_cookie(api_client, admin_user):
    first = login(api_client).cookies[settings.REFRESH_COOKIE_NAME].value

    response = api_client.post(REFRESH)

    assert response.status_code == 200
    assert response.json()['accessToken']
    assert response.json()['user']['id'] == admin_user.id
    assert response.cookies[settings.REFRESH_COOKIE_NAME].value != first


@pytest.mark.django_db
def test_refresh_without_cookie_is_session_expired(api_client):
    response = api_client.post(REFRESH)

    assert response.status_code == 401
    assert 'Session expired' in response.json()['message']


@pytest.mark.django_db
def test_logout_blacklists_refresh_token(api_client, admin_user):
    token = login(api_client).cookies[settings.REFRESH_COOKIE_NAME].value

    response = api_client.post(LOGOUT)
    assert response.status_code == 200
    assert response.cookies[settings.REFRESH_COOKIE_NAME].value == ''

    api_client.cookies[settings.REFRESH_COOKIE_NAME] = token
    response = api_client.post(REFRESH)
    assert response.status_code == 401


@pytest.mark.django_db
def test_unauthenticated_requests_are_rejected(api_client):
    response = api_client.get('/api/v1/tenants/getTenants')

    assert response.status_code == 401
    assert response.json()['success'] is False


@pytest.mark.django_db
def test_viewer_cannot_use_admin_endpoints(viewer_client, building):
    response = viewer_client.post('/api/v1/admin/buildings', {'name': 'Another'}, format='json')

    assert response.status_code == 403
    assert response.json()['success'] is False


@pytest.mark.django_db
def test_suspended_user_token_stops_working(viewer_client, viewer_user):
    viewer_user.status = UserStatus.SUSPENDED
    viewer_user.save()

    response = viewer_client.get('/api/v1/buildings/full')

    assert response.status_code == 403
