"""
Request Gateway - JSON over HTTP for the catalog and the backend.

Blocking requests calls run on a worker thread (asyncio.to_thread) so the
event loop keeps serving other work while a request is in flight. Status
handling and every state change happen back on the loop.
"""
import asyncio
import logging
from typing import Optional, Dict, Any

import requests

from ..config import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def payload_message(payload: Any) -> Optional[str]:
    """Error text the backend put in a response body, if any."""
    if isinstance(payload, dict):
        message = payload.get('message') or payload.get('error')
        if isinstance(message, str):
            return message
    return None


class ApiError(Exception):
    """A request failed: network error or non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def detail(self) -> Optional[str]:
        """Message supplied by the server, None for network or bare HTTP errors."""
        return payload_message(self.payload)


class UnauthorizedError(ApiError):
    """The session credential was rejected (401)."""


class NotFoundError(ApiError):
    """The requested resource does not exist (404)."""


class Gateway:
    """Unauthenticated JSON client for one base URL."""

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers['Content-Type'] = 'application/json'

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request('GET', path, params=params)

    async def post(self, path: str, body: Optional[dict] = None) -> Any:
        return await self.request('POST', path, body=body)

    async def delete(self, path: str) -> Any:
        return await self.request('DELETE', path)

    async def request(self, method: str, path: str, body: Optional[dict] = None,
                      params: Optional[dict] = None) -> Any:
        """Send a request and return the decoded JSON body."""
        response = await self._send(method, path, body, params, {})
        return self._decode(method, path, response)

    async def _send(self, method: str, path: str, body: Optional[dict],
                    params: Optional[dict], headers: Dict[str, str]) -> requests.Response:
        url = f'{self.base_url}{path}'
        try:
            return await asyncio.to_thread(
                self.session.request,
                method,
                url,
                json=body,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f'{method} {path} failed: {e}')
            raise ApiError(f'Network error: {e}') from e

    def _decode(self, method: str, path: str, response: requests.Response) -> Any:
        """Return the JSON body of a successful response, raise ApiError otherwise."""
        status = response.status_code
        if 200 <= status < 300:
            if status == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise ApiError(f'Invalid JSON from {path}', status) from e

        payload = self._payload(response)
        message = payload_message(payload) or f'HTTP {status}'
        logger.debug(f'{method} {path}: {status} {message}')
        if status == 401:
            raise UnauthorizedError(message, status, payload)
        if status == 404:
            raise NotFoundError(message, status, payload)
        raise ApiError(message, status, payload)

    @staticmethod
    def _payload(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None


class AuthenticatedGateway(Gateway):
    """
    Gateway for the backend: attaches the session's bearer token and
    reports rejected credentials to the session guard.

    The guard must provide `token` (current token or None) and
    `invalidate(token)`, called with None when the request went out
    unauthenticated.
    """

    def __init__(self, base_url: str, guard, timeout: float = REQUEST_TIMEOUT):
        super().__init__(base_url, timeout)
        self.guard = guard

    async def request(self, method: str, path: str, body: Optional[dict] = None,
                      params: Optional[dict] = None) -> Any:
        # Read the token at send time so a fresh establish() applies at once
        token = self.guard.token
        headers = {}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        else:
            logger.warning(f'No credential, sending {method} {path} unauthenticated')

        response = await self._send(method, path, body, params, headers)

        if response.status_code == 401:
            # Guard first, then the caller sees the rejection for local cleanup
            self.guard.invalidate(token)
        return self._decode(method, path, response)
