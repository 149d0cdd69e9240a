from __future__ import annotations

from typing import Any, Dict

from extensions import api
from backoffice.api_client import unwrap
from backoffice.listing import ITEMS_PER_PAGE, Page, Pagination

from .models import Customer


def fetch_customers(page: int = 1, limit: int = ITEMS_PER_PAGE, search: str = "",
                    status: str = "all") -> Page[Customer]:
    params: Dict[str, Any] = {"page": page, "limit": limit}
    if search:
        params["search"] = search
    if status and status != "all":
        params["status"] = status

    payload = api.get("/customers", params=params) or {}
    if isinstance(payload, list):
        records, raw_pagination, stats = payload, None, {}
    else:
        records = payload.get("data") or []
        raw_pagination = payload.get("pagination")
        stats = payload.get("stats") or {}

    items = [Customer.from_api(r) for r in records]
    return Page(items=items, pagination=Pagination.from_api(raw_pagination, len(items), limit), stats=stats)


def fetch_customer(customer_id: str) -> Customer:
    return Customer.from_api(unwrap(api.get(f"/customers/{customer_id}"), "customer") or {})


def add_customer(data: Dict[str, Any]) -> Any:
    return api.post("/customers", json=data)


def update_customer(customer_id: str, data: Dict[str, Any]) -> Any:
    return api.put(f"/customers/{customer_id}", json=data)


def delete_customer(customer_id: str) -> None:
    """Soft delete: the backend only marks the customer inactive."""
    api.delete(f"/customers/{customer_id}")


def activate_customer(customer_id: str) -> Any:
    return api.put(f"/customers/status/{customer_id}", json={"isActive": True})
