from __future__ import annotations

from typing import Any, Callable, Optional

from flask import current_app, flash, jsonify, render_template, request

from .api_client import ApiError


# ---------- Alerts ----------

def flash_api_error(message: str, exc: ApiError) -> None:
    current_app.logger.warning("%s: %s", message, exc, exc_info=True)
    flash(f"❌ {message}: {exc.message}", "error")


def flash_form_errors(errors: dict) -> None:
    flash("❌ Please fix the errors below before submitting", "error")
    for msg in errors.values():
        flash(f"❌ {msg}", "error")


# ---------- Shared pages ----------

def not_found(resource: str, back_url: str):
    return render_template(
        "not_found.html",
        resource=resource,
        back_url=back_url,
        title=f"{resource} not found",
    ), 404


def confirmed() -> bool:
    return (request.form.get("confirm") or "").strip().lower() == "yes"


def render_confirm(title: str, message: str, action_url: str, cancel_url: str,
                   preview_template: Optional[str] = None, danger: bool = False, **context: Any):
    return render_template(
        "confirm.html",
        title=title,
        message=message,
        action_url=action_url,
        cancel_url=cancel_url,
        preview_template=preview_template,
        danger=danger,
        **context,
    )


# ---------- Field validation endpoint ----------

def field_validation_response(validator: Callable[[str, str], Optional[str]]):
    """JSON ``{field, error}`` for the on-change validation script."""
    payload = request.get_json(silent=True) or request.form
    field = (payload.get("field") or "").strip()
    value = payload.get("value")
    if value is not None and not isinstance(value, str):
        value = str(value)
    if not field:
        return jsonify({"field": "", "error": "Missing field"}), 400
    return jsonify({"field": field, "error": validator(field, value)})
