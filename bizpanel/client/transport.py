"""
HTTP transport for the panel API.

Every endpoint answers {"success": true, "data": ...} or
{"success": false, "error": ..., "code": ..., "details": [...]}; callers
branch on ``success``, never on the HTTP status.
"""
import logging
import time
from typing import Any, Dict, Optional

import requests

from .config import ClientConfig
from .errors import TransportError, RemoteRejected

logger = logging.getLogger('bizpanel.client.transport')


class ApiClient:
    """Thin envelope-aware wrapper over a requests.Session"""

    def __init__(self, config: Optional[ClientConfig] = None, session=None):
        self.config = config or ClientConfig.from_env()
        self.session = session if session is not None else requests.Session()
        self.access_token = None
        self.refresh_token = None

    def set_tokens(self, access: str, refresh: Optional[str] = None):
        self.access_token = access
        self.refresh_token = refresh
        self.session.headers.update({'Authorization': f'Bearer {access}'})

    def clear_tokens(self):
        self.access_token = None
        self.refresh_token = None
        self.session.headers.pop('Authorization', None)

    def url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, params: Optional[Dict] = None, json: Any = None, files=None) -> Any:
        """
        Send one call and return the envelope's data, raising on failure.

        An expired access token (401) is refreshed once and the call repeated;
        uploads and the auth endpoints themselves are not repeated.
        """
        try:
            return self._send(method, path, params, json, files)
        except RemoteRejected as e:
            if e.status_code != 401 or not self.refresh_token or files or path.startswith('auth/'):
                raise
            logger.info(f"{method} {path} rejected with 401, refreshing the access token")
        self.refresh()
        return self._send(method, path, params, json, files)

    def _send(self, method, path, params, json, files):
        url = self.url(path)
        start_time = time.time()
        try:
            response = self.session.request(method, url, params=params, json=json, files=files, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(f"Could not reach the server: {e}")
        elapsed_ms = round((time.time() - start_time) * 1000, 2)
        logger.debug(f"{method} {path} params={params or {}} -> {response.status_code} in {elapsed_ms}ms")

        try:
            body = response.json()
        except ValueError:
            raise TransportError(f"Unexpected non-JSON response (HTTP {response.status_code})", response.status_code)

        if not isinstance(body, dict) or 'success' not in body:
            raise TransportError(f"Malformed response envelope (HTTP {response.status_code})", response.status_code)

        if not body['success']:
            raise RemoteRejected(
                body.get('error') or 'Request failed',
                code=body.get('code'),
                details=body.get('details'),
                status_code=response.status_code,
            )
        return body.get('data')

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, json=None, params=None):
        return self.request('POST', path, params=params, json=json)

    def put(self, path, json=None, params=None):
        return self.request('PUT', path, params=params, json=json)

    def patch(self, path, json=None, params=None):
        return self.request('PATCH', path, params=params, json=json)

    def delete(self, path, params=None):
        return self.request('DELETE', path, params=params)

    def login(self, username: str, password: str) -> Dict:
        data = self.post('auth/login/', json={'username': username, 'password': password})
        self.set_tokens(data['access'], data.get('refresh'))
        logger.info(f"Signed in as {username} (business {data.get('business_id')})")
        return data

    def refresh(self) -> str:
        if not self.refresh_token:
            raise TransportError('No refresh token available')
        data = self.post('auth/refresh/', json={'refresh': self.refresh_token})
        self.set_tokens(data['access'], data.get('refresh', self.refresh_token))
        return data['access']

    def me(self) -> Dict:
        return self.get('auth/me/')

    def upload(self, fileobj, filename: str, content_type: str) -> str:
        """Upload an image and return its hosted URL"""
        data = self.request('POST', 'uploads/', files={'file': (filename, fileobj, content_type)})
        return data['url']

    def close(self):
        self.session.close()
