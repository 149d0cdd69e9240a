import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from app import create_app
from extensions import api


BASE_URL = "http://backend.test/api"

ADMIN_USER = {
    "id": "u-admin",
    "firstName": "Ada",
    "lastName": "Admin",
    "email": "admin@example.com",
    "role": "admin",
}
EMPLOYEE_USER = {
    "id": "u-emp",
    "firstName": "Eli",
    "lastName": "Clerk",
    "email": "eli@example.com",
    "role": "employee",
}


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.headers = {"Content-Type": "application/json"}

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def iter_content(self, chunk_size: int = 1):
        yield self.content


@dataclass
class Call:
    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


class FakeBackend:
    """Stands in for the requests.Session inside ApiClient.

    Routes are keyed by (METHOD, path relative to the API base URL). A route
    answers with (status, payload), or a callable taking the Call and returning
    one, or an exception to raise.
    """

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Call] = []

    def on(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status, payload)

    def on_call(self, method: str, path: str, handler: Callable[[Call], Tuple[int, Any]]) -> None:
        self.routes[(method.upper(), path)] = handler

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method.upper(), path)] = exc

    def request(self, method, url, headers=None, params=None, json=None, timeout=None, **kwargs):
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        call = Call(method.upper(), path, params=params, json=json, headers=dict(headers or {}))
        self.calls.append(call)

        route = self.routes.get((call.method, path))
        if route is None:
            return FakeResponse(404, {"message": f"No route for {call.method} {path}"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            route = route(call)
        status, payload = route
        return FakeResponse(status, payload)

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    @property
    def writes(self) -> List[Call]:
        return [c for c in self.calls if c.method != "GET"]


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeBackend:
    fake = FakeBackend()
    monkeypatch.setattr(api, "transport", fake)
    return fake


@pytest.fixture
def app(backend: FakeBackend):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "API_BASE_URL": BASE_URL,
        "DISPLAY_TIMEZONE": "UTC",
        "CURRENCY_LABEL": "Rs",
        "API_PROXY_ENABLED": False,
    })
    return app


def _sign_in(client, user: Dict[str, Any]) -> None:
    with client.session_transaction() as sess:
        sess["accessToken"] = "test-token"
        sess["currentUser"] = json.dumps(user)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    _sign_in(client, ADMIN_USER)
    return client


@pytest.fixture
def employee_client(app):
    client = app.test_client()
    _sign_in(client, EMPLOYEE_USER)
    return client
