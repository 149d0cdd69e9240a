from typing import Any, Dict, Tuple

from .models import PAYMENT_METHODS

METHOD_VALUES = [value for value, _ in PAYMENT_METHODS]


def _clean(value: Any) -> str:
    return (value or "").strip()


def validate_mark_paid_form(form: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    data: Dict[str, Any] = {
        "paymentMethod": _clean(form.get("paymentMethod")) or "cash",
        "transactionRef": _clean(form.get("transactionRef")),
        "notes": _clean(form.get("notes")),
    }

    errors: Dict[str, str] = {}
    if data["paymentMethod"] not in METHOD_VALUES:
        errors["paymentMethod"] = "Unknown payment method"
    if len(data["notes"]) > 500:
        errors["notes"] = "Notes too long (max 500 chars)"

    return data, errors
