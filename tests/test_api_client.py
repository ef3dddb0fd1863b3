import pytest

from common.api_client import ApiClient, ApiError, SessionExpiredError


class FakeResponse:

    def __init__(self, status_code, payload=None, content_type='application/json', content=b''):
        self.status_code = status_code
        self._payload = payload
        self.headers = {'Content-Type': content_type}
        self.reason = 'Error' if status_code >= 400 else 'OK'
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:
    """Replays queued responses and records every call"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, headers=None, **kwargs):
        self.calls.append((method, url, dict(headers or {})))
        return self.responses.pop(0)


def make_client(*responses, **kwargs):
    session = FakeSession(*responses)
    client = ApiClient('https://rent.example.test/', session=session, **kwargs)
    client.access_token = 'old-token'
    return client, session


def test_paths_get_the_api_prefix():
    client, session = make_client(FakeResponse(200, {'success': True, 'records': []}))

    client.get('/tenants/getTenants')

    method, url, headers = session.calls[0]
    assert url == 'https://rent.example.test/api/v1/tenants/getTenants'
    assert headers['Authorization'] == 'Bearer old-token'


def test_expired_access_token_is_refreshed_once():
    client, session = make_client(
        FakeResponse(401, {'success': False, 'message': 'Token is invalid or expired'}),
        FakeResponse(200, {'success': True, 'accessToken': 'new-token', 'user': {'username': 'admin'}}),
        FakeResponse(200, {'success': True, 'records': [1]}),
    )

    result = client.get('/tenants/getTenants')

    assert result['records'] == [1]
    assert [call[1].rsplit('/api/v1', 1)[1] for call in session.calls] == [
        '/tenants/getTenants', '/auth/refresh', '/tenants/getTenants',
    ]
    assert session.calls[2][2]['Authorization'] == 'Bearer new-token'
    assert client.user == {'username': 'admin'}


def test_failed_refresh_ends_session():
    logged_out = []
    client, session = make_client(
        FakeResponse(401, {'success': False, 'message': 'Token is invalid or expired'}),
        FakeResponse(401, {'success': False, 'message': 'Session expired'}),
        on_logout=lambda: logged_out.append(True),
    )

    with pytest.raises(SessionExpiredError):
        client.get('/tenants/getTenants')

    assert client.access_token is None
    assert logged_out == [True]
    assert len(session.calls) == 2


def test_session_expired_message_skips_refresh():
    client, session = make_client(FakeResponse(401, {'success': False, 'message': 'Session expired. Please log in'}))

    with pytest.raises(SessionExpiredError):
        client.get('/auth/me')

    assert len(session.calls) == 1


def test_session_has_expired_message_ends_session():
    logged_out = []
    client, session = make_client(
        FakeResponse(401, {'success': False, 'message': 'Your session has expired'}),
        on_logout=lambda: logged_out.append(True),
    )

    with pytest.raises(SessionExpiredError):
        client.get('/tenants/getTenants')

    assert len(session.calls) == 1
    assert logged_out == [True]


def test_auth_paths_are_not_retried():
    client, session = make_client(FakeResponse(401, {'success': False, 'message': 'Invalid username or password'}))

    with pytest.raises(ApiError) as excinfo:
        client.login('admin', 'wrong')

    assert excinfo.value.message == 'Invalid username or password'
    assert len(session.calls) == 1


def test_error_envelope_raises_api_error():
    client, _ = make_client(FakeResponse(409, {'success': False, 'message': 'Nothing to settle', 'code': 'NO_CREDIT'}))

    with pytest.raises(ApiError) as excinfo:
        client.post('/admin/transactions/settle', json={'tenantId': 1})

    assert excinfo.value.status_code == 409
    assert excinfo.value.payload['code'] == 'NO_CREDIT'


def test_binary_responses_are_returned_raw():
    client, _ = make_client(FakeResponse(200, content_type='application/pdf', content=b'%PDF-1.4'))

    assert client.get('/receipts/1/pdf') == b'%PDF-1.4'
