from typing import Any, Dict, Optional, Tuple


def _clean(value: Any) -> str:
    return (value or "").strip()


def validate_connection_field(field: str, value: Any) -> Optional[str]:
    value = _clean(value)
    if field == "name" and not value:
        return "Name is required"
    if field == "description" and len(value) > 500:
        return "Description too long (max 500 chars)"
    return None


def validate_connection_form(form: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    data: Dict[str, Any] = {
        "name": _clean(form.get("name")),
        "description": _clean(form.get("description")),
    }

    errors: Dict[str, str] = {}
    for name, value in data.items():
        msg = validate_connection_field(name, value)
        if msg:
            errors[name] = msg

    return data, errors
