import re
from typing import Any, Dict, Optional, Tuple

from .models import EMPLOYEE_ROLES

_email_re = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _clean(value: Any) -> str:
    return (value or "").strip()


def validate_employee_field(field: str, value: Any, mode: str = "create") -> Optional[str]:
    value = _clean(value)
    if field == "firstName":
        if not value:
            return "First name is required"
    elif field == "lastName":
        if not value:
            return "Last name is required"
    elif field == "email":
        if not value:
            return "Email is required"
        if not _email_re.match(value):
            return "Invalid email format"
    elif field == "phone":
        if not value:
            return "Phone is required"
    elif field == "password":
        if mode == "create" and not value:
            return "Password is required"
        if value and len(value) < 6:
            return "Password must be at least 6 characters"
    elif field == "role":
        if value not in EMPLOYEE_ROLES:
            return "Role must be admin or employee"
    return None


def validate_employee_form(form: Dict[str, Any], mode: str = "create") -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Validates employee form data coming from request.form.
    On edit an empty password is dropped from the returned data.
    """
    data: Dict[str, Any] = {
        "firstName": _clean(form.get("firstName")),
        "lastName": _clean(form.get("lastName")),
        "email": _clean(form.get("email")),
        "phone": _clean(form.get("phone")),
        "role": _clean(form.get("role")) or "employee",
        "password": _clean(form.get("password")),
    }

    errors: Dict[str, str] = {}
    for name, value in data.items():
        msg = validate_employee_field(name, value, mode)
        if msg:
            errors[name] = msg

    if mode == "edit" and not data["password"]:
        data.pop("password")

    return data, errors
