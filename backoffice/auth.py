from __future__ import annotations

import json
from typing import Any, Dict, MutableMapping, Optional

from flask import flash, g, redirect, request, session, url_for

from .api_client import ApiError


ACCESS_TOKEN_KEY = "accessToken"
CURRENT_USER_KEY = "currentUser"


class SessionStore:
    """Read/write/clear access to the signed-in user's session state.

    Wraps any mutable mapping (the Flask session in requests, a plain dict in
    tests). Objects are stored serialized so the cookie only ever holds strings.
    """

    def __init__(self, storage: MutableMapping[str, Any]):
        self._storage = storage

    # ---------- Generic key/value ----------

    def get(self, key: str) -> Optional[str]:
        return self._storage.get(key)

    def set(self, key: str, value: str) -> None:
        self._storage[key] = value

    def remove(self, key: str) -> None:
        self._storage.pop(key, None)

    def get_object(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._storage.get(key)
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return value if isinstance(value, dict) else None

    def set_object(self, key: str, value: Dict[str, Any]) -> None:
        self._storage[key] = json.dumps(value)

    # ---------- Auth ----------

    @property
    def access_token(self) -> Optional[str]:
        return self.get(ACCESS_TOKEN_KEY)

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        return self.get_object(CURRENT_USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def role(self) -> Optional[str]:
        user = self.current_user or {}
        return user.get("role")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def user_id(self) -> Optional[str]:
        user = self.current_user or {}
        value = user.get("id") or user.get("_id")
        return str(value) if value is not None else None

    @property
    def display_name(self) -> str:
        user = self.current_user or {}
        name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip()
        return name or user.get("email") or "User"

    def sign_in(self, token: str, user: Dict[str, Any]) -> None:
        self.set(ACCESS_TOKEN_KEY, token)
        self.set_object(CURRENT_USER_KEY, user or {})

    def clear(self) -> None:
        self._storage.clear()


def current_session() -> SessionStore:
    store = g.get("session_store")
    if store is None:
        store = SessionStore(session)
        g.session_store = store
    return store


def session_token() -> Optional[str]:
    return session.get(ACCESS_TOKEN_KEY)


def require_login(admin: bool = False):
    """Return a redirect response when the visitor may not see the page, else None."""
    store = current_session()
    if not store.is_authenticated:
        return redirect(url_for("login", next=request.path))
    if admin and not store.is_admin:
        flash("⚠️ Only administrators can access that page", "warning")
        return redirect(url_for("dashboard.dashboard_home"))
    return None


def login_user(email: str, password: str) -> Dict[str, Any]:
    """Exchange credentials for a token with the backend and remember both."""
    from extensions import api  # extensions imports this module

    data = api.post("/login", json={"email": email, "password": password}) or {}
    token = data.get("token")
    if not token:
        raise ApiError("Invalid credentials")
    user = data.get("user") or {}
    current_session().sign_in(token, user)
    return user


def logout_user() -> None:
    current_session().clear()
