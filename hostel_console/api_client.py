"""Async HTTP client for the hostel management REST API.

Every failure leaves this module as one of the tagged errors in
:mod:`hostel_console.errors`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from .errors import ApiError, AuthError, TransientError, ValidationError
from .inflight import TIMEOUT_MESSAGE, with_timeout

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "No authentication token found. Please login again."
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
FORBIDDEN_MESSAGE = "Access denied - Insufficient permissions"
CONNECT_MESSAGE = "Unable to connect to server. Please try again later."
EMPTY_BODY_MESSAGE = "No data received from server"

_NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


def _error_message(resp: httpx.Response) -> str | None:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def classify_response(resp: httpx.Response) -> ApiError:
    """Map a non-2xx response to the matching error variant."""
    status = resp.status_code
    message = _error_message(resp)
    if status == 401:
        return AuthError(message or SESSION_EXPIRED_MESSAGE, status)
    if status == 403:
        return ValidationError(message or FORBIDDEN_MESSAGE, status)
    if 400 <= status < 500:
        return ValidationError(message or f"Request failed: {status}", status)
    return ApiError(message or f"Server error: {status}", status)


class HostelApiClient:
    """Bearer-token client for one admin account."""

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_unauthorized: Callable[[], None] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.token = token
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_s, connect=min(timeout_s, 10.0)),
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def clear_token(self) -> None:
        self.token = None

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await with_timeout(
                self._client.request(
                    method, path, params=params, json=json, headers=headers
                ),
                self.timeout_s,
            )
        except httpx.TimeoutException as e:
            raise TransientError(TIMEOUT_MESSAGE) from e
        except httpx.TransportError as e:
            logger.debug("%s %s transport error: %s", method, path, e)
            raise TransientError(CONNECT_MESSAGE) from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Raises:
            AuthError: No token, or the server answered 401 (token is dropped).
            TransientError: Timeout or connection failure.
            ValidationError: Other 4xx responses.
            ApiError: 5xx, empty or undecodable bodies.
        """
        if not self.token:
            raise AuthError(NO_TOKEN_MESSAGE)
        headers = {"Authorization": f"Bearer {self.token}"}
        if method.upper() == "GET":
            headers.update(_NO_CACHE_HEADERS)
        resp = await self._send(method, path, params=params, json=json, headers=headers)
        if not resp.is_success:
            error = classify_response(resp)
            logger.warning("%s %s -> %d: %s", method, path, resp.status_code, error)
            if isinstance(error, AuthError):
                self.clear_token()
                if self.on_unauthorized is not None:
                    self.on_unauthorized()
            raise error
        return self._decode(resp)

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            raise ApiError(EMPTY_BODY_MESSAGE, resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON from server: {resp.text[:200]}", resp.status_code
            ) from e
        if data is None:
            raise ApiError(EMPTY_BODY_MESSAGE, resp.status_code)
        return data

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        return await self.request("DELETE", path, json=json)

    async def login(self, email: str, password: str) -> str:
        """Exchange credentials for a JWT and keep it for later requests.

        Returns:
            The server's greeting message.
        """
        resp = await self._send(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        if not resp.is_success:
            raise classify_response(resp)
        data = self._decode(resp)
        token = data.get("jwtToken") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Login response did not include a token", resp.status_code)
        self.token = str(token)
        logger.info("Logged in to %s as %s", self.base_url, email)
        return str(data.get("message") or "Login successful")

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["HostelApiClient", "classify_response"]
