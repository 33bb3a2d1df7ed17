"""HTTP client for the pregnancy-tracking REST API."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Optional

import requests

from bumptrack.config.loader import ApiConfig

if TYPE_CHECKING:
    from bumptrack.auth.context import AuthContext

LOGGER = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for failures talking to the backend."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(ApiError):
    """The backend rejected the credentials (HTTP 401)."""


class RequestError(ApiError):
    """Any other non-2xx response, network failure or unreadable body."""


class ApiClient:
    """Sends JSON requests with the bearer token of the current context."""

    def __init__(
        self,
        config: ApiConfig,
        auth: "AuthContext",
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = config.base_url.rstrip("/")
        self._timeout_s = max(config.timeout_ms, 1) / 1000.0
        self._auth = auth
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, payload: Optional[dict] = None) -> Any:
        return self.request("POST", path, payload)

    def put(self, path: str, payload: Optional[dict] = None) -> Any:
        return self.request("PUT", path, payload)

    def patch(self, path: str, payload: Optional[dict] = None) -> Any:
        return self.request("PATCH", path, payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self._auth.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            start = time.perf_counter()
            response = self._session.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=self._timeout_s,
            )
            latency_ms = (time.perf_counter() - start) * 1000.0
        except requests.RequestException as exc:
            LOGGER.warning("%s %s failed: %s", method, path, exc.__class__.__name__)
            raise RequestError(f"{exc.__class__.__name__}: {exc}") from exc

        LOGGER.debug("%s %s -> %s in %.2fms", method, path, response.status_code, latency_ms)
        if response.status_code == 401:
            self._auth.logout()
            raise AuthError(_error_message(response, "Unauthorized"), status_code=401)
        if not response.ok:
            raise RequestError(
                _error_message(response, f"HTTP {response.status_code}"),
                status_code=response.status_code,
            )
        if not response.content or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RequestError(
                f"Invalid JSON from {method} {path}", status_code=response.status_code
            ) from exc


def _error_message(response: requests.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, list):
            return "; ".join(str(item) for item in message)
        if isinstance(message, str) and message:
            return message
    return default


__all__ = ["ApiClient", "ApiError", "AuthError", "RequestError"]
