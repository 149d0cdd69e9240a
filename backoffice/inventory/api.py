from __future__ import annotations

from typing import Any, Dict, List

from extensions import api
from backoffice.api_client import unwrap, unwrap_list

from .models import InventoryItem


def fetch_inventory() -> List[InventoryItem]:
    # {"inventory": [...]} or a bare list
    return [InventoryItem.from_api(r) for r in unwrap_list(api.get("/inventory"), "inventory")]


def fetch_inventory_item(item_id: str) -> InventoryItem:
    return InventoryItem.from_api(unwrap(api.get(f"/inventory/{item_id}"), "inventory") or {})


def add_inventory_item(data: Dict[str, Any]) -> Any:
    return api.post("/inventory", json=data)


def update_inventory_item(item_id: str, data: Dict[str, Any]) -> Any:
    return api.put(f"/inventory/{item_id}", json=data)


def delete_inventory_item(item_id: str) -> None:
    api.delete(f"/inventory/{item_id}")
