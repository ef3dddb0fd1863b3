"""
HTTP client for the SmartRent REST API.

The access token is sent as a bearer header. The refresh token lives in the
session's cookie jar (the server sets it as an HTTP-only cookie on login).
When a request comes back 401 the client refreshes once through
POST /api/v1/auth/refresh and retries the original request a single time.
Auth endpoints are never retried, and a "session expired" answer ends the
session instead of refreshing.
"""
import logging
import requests

logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1'
AUTH_PATHS = ('/auth/login', '/auth/refresh', '/auth/logout')
DEFAULT_TIMEOUT = 30
SESSION_EXPIRED_MARKERS = ('session expired', 'session has expired')


class ApiError(Exception):
    """Non-2xx response from the API"""

    def __init__(self, status_code, message, payload=None):
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}
        super().__init__(f"{status_code}: {message}")


class SessionExpiredError(ApiError):
    """The refresh token is gone or rejected; the user must log in again"""


def _payload(response):
    try:
        return response.json()
    except ValueError:
        return {}


def _is_session_expired(message):
    text = str(message).lower()
    return any(marker in text for marker in SESSION_EXPIRED_MARKERS)


def _message(payload, default):
    if isinstance(payload, dict):
        return payload.get('message') or payload.get('detail') or default
    return default


class ApiClient:
    """
    Usage:
        client = ApiClient('https://rent.example.com')
        client.login('admin', 'secret')
        tenants = client.get('/tenants/getTenants', params={'month': 'March', 'year': 2025})
    """

    def __init__(self, base_url, session=None, timeout=DEFAULT_TIMEOUT, on_logout=None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = None
        self.user = None
        self.on_logout = on_logout

    def _url(self, path):
        if path.startswith('http://') or path.startswith('https://'):
            return path
        if not path.startswith(API_PREFIX):
            path = API_PREFIX + (path if path.startswith('/') else '/' + path)
        return self.base_url + path

    @staticmethod
    def _is_auth_path(path):
        return any(auth_path in path for auth_path in AUTH_PATHS)

    def _send(self, method, path, **kwargs):
        headers = dict(kwargs.pop('headers', None) or {})
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'
        kwargs.setdefault('timeout', self.timeout)
        return self.session.request(method, self._url(path), headers=headers, **kwargs)

    def _store_session(self, payload):
        self.access_token = payload.get('accessToken')
        self.user = payload.get('user')

    def _end_session(self):
        self.access_token = None
        self.user = None
        if self.on_logout:
            self.on_logout()

    def request(self, method, path, **kwargs):
        """Send a request and return the decoded JSON body (or raw bytes for non-JSON)"""
        response = self._send(method, path, **kwargs)

        if response.status_code == 401 and not self._is_auth_path(path):
            payload = _payload(response)
            message = _message(payload, 'Unauthorized')
            if _is_session_expired(message):
                self._end_session()
                raise SessionExpiredError(401, message, payload)

            logger.info(f"Access token rejected for {method} {path}, refreshing")
            self.refresh()
            response = self._send(method, path, **kwargs)

        return self._handle(response)

    def _handle(self, response):
        content_type = response.headers.get('Content-Type', '')
        payload = _payload(response) if 'json' in content_type else None

        if response.status_code >= 400:
            message = _message(payload, response.reason or 'Request failed')
            if response.status_code == 401:
                self._end_session()
                raise SessionExpiredError(401, message, payload)
            raise ApiError(response.status_code, message, payload)

        if payload is None:
            return response.content
        if isinstance(payload, dict) and payload.get('success') is False:
            raise ApiError(response.status_code, _message(payload, 'Request failed'), payload)
        return payload

    def refresh(self):
        """Exchange the refresh cookie for a new access token"""
        response = self._send('POST', '/auth/refresh')
        payload = _payload(response)
        if response.status_code != 200 or not payload.get('accessToken'):
            self._end_session()
            raise SessionExpiredError(
                response.status_code, _message(payload, 'Session expired'), payload
            )
        self._store_session(payload)
        return payload

    def login(self, username, password):
        response = self._send('POST', '/auth/login', json={'username': username, 'password': password})
        payload = self._handle(response)
        self._store_session(payload)
        return payload

    def logout(self):
        try:
            self._send('POST', '/auth/logout')
        finally:
            self._end_session()

    def get(self, path, **kwargs):
        return self.request('GET', path, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self.request('POST', path, json=json, **kwargs)

    def put(self, path, json=None, **kwargs):
        return self.request('PUT', path, json=json, **kwargs)

    def patch(self, path, json=None, **kwargs):
        return self.request('PATCH', path, json=json, **kwargs)

    def delete(self, path, **kwargs):
        return self.request('DELETE', path, **kwargs)
