from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from backoffice.formatting import from_date_input


CUSTOMER_STEPS = ["basic", "contact", "connection"]

STEP_FIELDS: Dict[str, List[str]] = {
    "basic": ["name", "username", "password", "nationalId"],
    "contact": ["mobile", "phone", "email", "address"],
    "connection": ["connectionType", "plan", "connectionStartDate"],
}

CUSTOMER_FIELDS = [f for step in CUSTOMER_STEPS for f in STEP_FIELDS[step]]

DEFAULT_STATUS = "pending"

_email_re = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_digits_re = re.compile(r"^\d+$")


def _clean(value: Any) -> str:
    return (value or "").strip()


def validate_customer_field(field: str, value: Any, mode: str = "create") -> Optional[str]:
    """Error message for one field, or None when the value is acceptable."""
    value = _clean(value)

    if field == "name":
        if not value:
            return "Name is required"
    elif field == "username":
        if not value:
            return "Username is required"
        if len(value) < 3:
            return "Username must be at least 3 characters"
    elif field == "password":
        if mode == "create" and not value:
            return "Password is required"
        if value and len(value) < 4:
            return "Password must be at least 4 characters"
    elif field == "nationalId":
        if not value:
            return "National ID is required"
        if len(value) < 5 or len(value) > 13:
            return "National ID must be between 5 and 13 characters"
    elif field == "mobile":
        if not value:
            return "Mobile number is required"
        if len(value) < 10 or len(value) > 11:
            return "Mobile number must be 10 or 11 digits"
        if not _digits_re.match(value):
            return "Mobile number must contain only numbers"
    elif field == "email":
        if value and not _email_re.match(value):
            return "Invalid email format"
    elif field == "address":
        if len(value) > 500:
            return "Address too long (max 500 chars)"
    elif field == "plan":
        if not value:
            return "Plan is required"
    elif field == "connectionType":
        if not value:
            return "Connection type is required"
    elif field == "connectionStartDate":
        if mode == "edit" and not value:
            return "Activation date is required"
        if value and from_date_input(value) is None:
            return "Activation date must be a valid date"
    return None


def customer_form_data(form: Dict[str, Any]) -> Dict[str, str]:
    return {name: _clean(form.get(name)) for name in CUSTOMER_FIELDS}


def _validate_fields(data: Dict[str, str], fields: List[str], mode: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for name in fields:
        msg = validate_customer_field(name, data.get(name), mode)
        if msg:
            errors[name] = msg
    return errors


def validate_customer_step(form: Dict[str, Any], step: str,
                           mode: str = "create") -> Tuple[Dict[str, str], Dict[str, str]]:
    """Validate only the fields that belong to one wizard step."""
    data = customer_form_data(form)
    return data, _validate_fields(data, STEP_FIELDS.get(step, []), mode)


def validate_customer_form(form: Dict[str, Any], mode: str = "create") -> Tuple[Dict[str, str], Dict[str, str]]:
    data = customer_form_data(form)
    return data, _validate_fields(data, CUSTOMER_FIELDS, mode)


def first_step_with_errors(errors: Dict[str, str]) -> str:
    for step in CUSTOMER_STEPS:
        if any(name in errors for name in STEP_FIELDS[step]):
            return step
    return CUSTOMER_STEPS[-1]


def next_step(step: str) -> str:
    index = CUSTOMER_STEPS.index(step) if step in CUSTOMER_STEPS else 0
    return CUSTOMER_STEPS[min(index + 1, len(CUSTOMER_STEPS) - 1)]


def previous_step(step: str) -> str:
    index = CUSTOMER_STEPS.index(step) if step in CUSTOMER_STEPS else 0
    return CUSTOMER_STEPS[max(index - 1, 0)]


def build_customer_payload(data: Dict[str, str], mode: str = "create",
                           original_plan: Optional[str] = None, tz=None) -> Dict[str, Any]:
    """Shape validated form data into the backend's customer body.

    On edit an empty password is left out so the stored one is kept, and the
    plan is only sent when it actually changed.
    """
    payload: Dict[str, Any] = dict(data)

    start = from_date_input(data.get("connectionStartDate"), tz)
    if start is None:
        payload.pop("connectionStartDate", None)
    else:
        payload["connectionStartDate"] = start

    if mode == "create":
        payload["status"] = DEFAULT_STATUS
        return payload

    if not payload.get("password"):
        payload.pop("password", None)
    if original_plan is not None and payload.get("plan") == original_plan:
        payload.pop("plan", None)
    return payload
