from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from backoffice.formatting import from_date_input

from .models import INVENTORY_CATEGORIES


TEXT_FIELDS = [
    "name",
    "description",
    "category",
    "brand",
    "model",
    "location",
    "supplier",
    "supplierContact",
    "serialNumber",
    "notes",
    "imageUrl",
]
INT_FIELDS = ["quantity", "minQuantity"]
DATE_FIELDS = ["purchaseDate", "warrantyExpiry"]


def _clean(value: Any) -> str:
    return (value or "").strip()


def _non_negative_int(value: str) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _non_negative_float(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def validate_inventory_field(field: str, value: Any) -> Optional[str]:
    value = _clean(value)
    if field == "name":
        if not value:
            return "Item name is required"
    elif field == "category":
        if not value:
            return "Category is required"
        if value not in INVENTORY_CATEGORIES:
            return "Unknown category"
    elif field in INT_FIELDS:
        if value and _non_negative_int(value) is None:
            return "Quantity must be a whole number of 0 or more"
    elif field == "unitPrice":
        if value and _non_negative_float(value) is None:
            return "Unit price must be 0 or more"
    elif field in DATE_FIELDS:
        if value and from_date_input(value) is None:
            return "Invalid date"
    return None


def validate_inventory_form(form: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    raw = {name: _clean(form.get(name)) for name in TEXT_FIELDS + INT_FIELDS + ["unitPrice"] + DATE_FIELDS}

    errors: Dict[str, str] = {}
    for name, value in raw.items():
        msg = validate_inventory_field(name, value)
        if msg:
            errors[name] = msg

    if errors:
        return raw, errors

    data: Dict[str, Any] = {name: raw[name] for name in TEXT_FIELDS}
    for name in INT_FIELDS:
        data[name] = _non_negative_int(raw[name]) if raw[name] else 0
    data["unitPrice"] = _non_negative_float(raw["unitPrice"]) if raw["unitPrice"] else 0.0
    for name in DATE_FIELDS:
        # inventory dates travel as YYYY-MM-DD strings, not timestamps
        data[name] = raw[name] or None
    return data, errors
