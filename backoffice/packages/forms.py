from typing import Any, Dict, Optional, Tuple


def _clean(value: Any) -> str:
    return (value or "").strip()


def _positive(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def validate_package_field(field: str, value: Any) -> Optional[str]:
    value = _clean(value)
    if field == "name":
        if not value:
            return "Package name is required"
    elif field == "price":
        if not value:
            return "Price is required"
        if _positive(value) is None:
            return "Price must be greater than 0"
    elif field == "speed":
        if not value:
            return "Speed is required"
        if _positive(value) is None:
            return "Speed must be greater than 0"
    return None


def validate_package_form(form: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Validates package form data coming from request.form.
    Returns (cleaned_data, errors); price and speed come back as numbers when valid.
    """
    data: Dict[str, Any] = {
        "name": _clean(form.get("name")),
        "price": _clean(form.get("price")),
        "speed": _clean(form.get("speed")),
        "description": _clean(form.get("description")),
    }

    errors: Dict[str, str] = {}
    for name in ("name", "price", "speed"):
        msg = validate_package_field(name, data[name])
        if msg:
            errors[name] = msg

    if "price" not in errors:
        data["price"] = float(data["price"])
    if "speed" not in errors:
        speed = float(data["speed"])
        data["speed"] = int(speed) if speed.is_integer() else speed

    return data, errors
