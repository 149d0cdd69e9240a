from __future__ import annotations

from typing import Any, Dict

from extensions import api
from backoffice.api_client import unwrap
from backoffice.listing import ITEMS_PER_PAGE, Page, Pagination

from .models import Payment


def fetch_payments(start_date: str = "", end_date: str = "", page: int = 1, limit: int = ITEMS_PER_PAGE,
                   status: str = "all", search: str = "") -> Page[Payment]:
    """One page of payments in a date range; search and status narrow it further."""
    params: Dict[str, Any] = {"page": page, "limit": limit}
    if start_date:
        params["startDate"] = start_date
    if end_date:
        params["endDate"] = end_date
    if status and status != "all":
        params["status"] = status
    if search:
        params["search"] = search

    payload = api.get("/payments", params=params) or {}
    if isinstance(payload, list):
        records, raw_pagination, stats = payload, None, {}
    else:
        records = payload.get("data") or []
        raw_pagination = payload.get("pagination")
        stats = payload.get("stats") or {}

    items = [Payment.from_api(r) for r in records]
    return Page(items=items, pagination=Pagination.from_api(raw_pagination, len(items), limit), stats=stats)


def fetch_payment(payment_id: str) -> Payment:
    return Payment.from_api(unwrap(api.get(f"/payments/{payment_id}"), "payment") or {})


def mark_payment_paid(payment_id: str, data: Dict[str, Any]) -> Any:
    return api.post(f"/payments/{payment_id}/mark-paid", json=data)
