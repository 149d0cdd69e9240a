from __future__ import annotations

from typing import Any, Dict, List

from extensions import api
from backoffice.api_client import unwrap, unwrap_list

from .models import ConnectionType


def fetch_connection_types() -> List[ConnectionType]:
    payload = api.get("/connection-types")
    return [ConnectionType.from_api(r) for r in unwrap_list(payload, "connectionTypes")]


def fetch_connection_type(connection_id: str) -> ConnectionType:
    return ConnectionType.from_api(unwrap(api.get(f"/connection-types/{connection_id}"), "connectionType") or {})


def add_connection_type(data: Dict[str, Any]) -> Any:
    return api.post("/connection-types", json=data)


def update_connection_type(connection_id: str, data: Dict[str, Any]) -> Any:
    return api.put(f"/connection-types/{connection_id}", json=data)


def delete_connection_type(connection_id: str) -> None:
    api.delete(f"/connection-types/{connection_id}")
