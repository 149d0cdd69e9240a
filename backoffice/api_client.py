from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import requests


DEFAULT_TIMEOUT = 15


class ApiError(Exception):
    """Raised for any failed call to the backend (transport error or non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NotFoundError(ApiError):
    pass


def _error_message(response: requests.Response, default: str) -> tuple[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return default, None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, dict):
            message = message.get("message")
        if message:
            return str(message), payload
    return default, payload


class ApiClient:
    """Single point of outbound HTTP communication with the backend.

    Registered on the Flask app like any other extension. The bearer token is
    pulled from ``token_getter`` right before each request; ``refresh_hook``
    (optional) is asked for a new token once when the backend answers 401.
    """

    def __init__(self, app=None, base_url: str | None = None,
                 token_getter: Optional[Callable[[], Optional[str]]] = None,
                 refresh_hook: Optional[Callable[[], Optional[str]]] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.base_url = (base_url or "").rstrip("/")
        self.token_getter = token_getter
        self.refresh_hook = refresh_hook
        self.timeout = timeout
        self.transport = requests.Session()
        self.logger = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.base_url = (app.config.get("API_BASE_URL") or self.base_url).rstrip("/")
        self.timeout = float(app.config.get("API_TIMEOUT", self.timeout))
        self.logger = app.logger
        app.extensions["backend_api"] = self

    # ---------- Helpers ----------

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _current_token(self) -> Optional[str]:
        if self.token_getter is None:
            return None
        try:
            return self.token_getter()
        except RuntimeError:
            # outside of a request context there is no session to read
            return None

    def _send(self, method: str, path: str, token: Optional[str], params=None, json=None) -> requests.Response:
        try:
            return self.transport.request(
                method,
                self.url_for(path),
                headers=self._headers(token),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            if self.logger is not None:
                self.logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise ApiError(f"Could not reach the server ({exc.__class__.__name__})") from exc

    # ---------- Requests ----------

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Any:
        token = self._current_token()
        response = self._send(method, path, token, params=params, json=json)

        if response.status_code == 401 and self.refresh_hook is not None:
            new_token = self.refresh_hook()
            if new_token:
                response = self._send(method, path, new_token, params=params, json=json)

        if not 200 <= response.status_code < 300:
            message, payload = _error_message(response, f"Request failed with status {response.status_code}")
            if self.logger is not None:
                self.logger.warning("Backend %s %s -> %s: %s", method, path, response.status_code, message)
            error_cls = NotFoundError if response.status_code == 404 else ApiError
            raise error_cls(message, status_code=response.status_code, payload=payload)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("The server returned an invalid response", status_code=response.status_code) from exc

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def unwrap(payload: Any, *keys: str) -> Any:
    """Strip the backend's response envelope.

    Different endpoints wrap their record under ``data`` or a resource-named
    key (``user``, ``inventory``); some return it bare.
    """
    if isinstance(payload, dict):
        for key in keys + ("data",):
            if key in payload and payload[key] is not None:
                return payload[key]
    return payload


def unwrap_list(payload: Any, *keys: str) -> list:
    value = unwrap(payload, *keys)
    if isinstance(value, list):
        return value
    return []
