from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .models import compute_total


def _clean(value: Any) -> str:
    return (value or "").strip()


def _getlist(form, name: str) -> List[str]:
    if hasattr(form, "getlist"):
        return list(form.getlist(name))
    value = form.get(name)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def blank_item() -> Dict[str, str]:
    return {"name": "", "price": "", "warranty": ""}


def invoice_form_items(form) -> List[Dict[str, str]]:
    """Line-item rows posted as parallel ``item_name`` / ``item_price`` / ``item_warranty`` lists."""
    names = _getlist(form, "item_name")
    prices = _getlist(form, "item_price")
    warranties = _getlist(form, "item_warranty")
    count = max(len(names), len(prices), len(warranties))
    rows = []
    for i in range(count):
        rows.append({
            "name": _clean(names[i] if i < len(names) else ""),
            "price": _clean(prices[i] if i < len(prices) else ""),
            "warranty": _clean(warranties[i] if i < len(warranties) else ""),
        })
    return rows or [blank_item()]


def add_item_row(items: List[Dict[str, str]]) -> List[Dict[str, str]]:
    return items + [blank_item()]


def remove_item_row(items: List[Dict[str, str]], index: int) -> List[Dict[str, str]]:
    """Drop one row; the last remaining row is kept."""
    if len(items) <= 1 or not 0 <= index < len(items):
        return items
    return items[:index] + items[index + 1:]


def validate_invoice_form(form) -> Tuple[Dict[str, Any], Dict[str, str]]:
    data: Dict[str, Any] = {
        "customerName": _clean(form.get("customerName")),
        "serviceCharges": _clean(form.get("serviceCharges")),
        "packageCharges": _clean(form.get("packageCharges")),
        "items": invoice_form_items(form),
    }
    data["total"] = compute_total(
        data["serviceCharges"], data["packageCharges"], [item["price"] for item in data["items"]]
    )

    errors: Dict[str, str] = {}
    if not data["customerName"]:
        errors["customerName"] = "Please enter customer name"

    return data, errors
