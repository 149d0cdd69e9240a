from __future__ import annotations

from flask import Blueprint, render_template, request, redirect, url_for, flash

from backoffice.api_client import ApiError, NotFoundError
from backoffice.auth import require_login
from backoffice.listing import ListQuery, ListScreen, filter_records, paginate, sort_records
from backoffice.views import (
    confirmed,
    field_validation_response,
    flash_api_error,
    flash_form_errors,
    not_found,
    render_confirm,
)

from .api import (
    add_employee,
    delete_employee,
    fetch_employee,
    fetch_employees,
    restore_employee,
    update_employee,
)
from .forms import validate_employee_field, validate_employee_form
from .models import EMPLOYEE_ROLES, employee_stats


employees_bp = Blueprint("employees", __name__, url_prefix="/employees")

SEARCH_FIELDS = ["full_name", "email", "phone"]
SORT_KEYS = ["full_name", "email", "phone", "role", "is_active"]


def _load(employee_id: str):
    try:
        return fetch_employee(employee_id), None
    except NotFoundError:
        return None, not_found("Employee", url_for("employees.list_employees"))
    except ApiError as exc:
        flash_api_error("Failed to load employee data", exc)
        return None, redirect(url_for("employees.list_employees"))


def _render_form(mode: str, data, errors, employee=None):
    title = "Add Employee" if mode == "create" else f"Edit Employee - {employee.full_name}"
    return render_template("employees/form.html", mode=mode, data=data, errors=errors,
                           employee=employee, ROLES=EMPLOYEE_ROLES, title=title)


# ---------- Pages ----------

@employees_bp.route("")
def list_employees():
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(request.args, sort_keys=SORT_KEYS)
    screen = ListScreen()
    page = None
    stats = None
    if screen.load(fetch_employees, "Failed to load employee data"):
        stats = employee_stats(screen.data)
        matching = sort_records(filter_records(screen.data, query.search, SEARCH_FIELDS), query.sort)
        page = paginate(matching, query.page)
    else:
        flash(f"❌ {screen.error}", "error")

    return render_template(
        "employees/list.html",
        page=page,
        stats=stats,
        query=query,
        title="Employees",
    )


@employees_bp.route("/new", methods=["GET", "POST"])
def create_employee():
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        data, errors = validate_employee_form(request.form, mode="create")
        if errors:
            flash_form_errors(errors)
            return _render_form("create", data, errors)
        try:
            add_employee(data)
        except ApiError as exc:
            flash_api_error("Failed to add employee", exc)
            return _render_form("create", data, {})
        flash("✅ Employee added successfully", "success")
        return redirect(url_for("employees.list_employees"))

    return _render_form("create", {"role": "employee"}, {})


@employees_bp.route("/<employee_id>")
def employee_detail(employee_id: str):
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    employee, response = _load(employee_id)
    if response is not None:
        return response
    return render_template("employees/detail.html", employee=employee, title=f"Employee - {employee.full_name}")


@employees_bp.route("/<employee_id>/edit", methods=["GET", "POST"])
def edit_employee(employee_id: str):
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    employee, response = _load(employee_id)
    if response is not None:
        return response

    if request.method == "POST":
        data, errors = validate_employee_form(request.form, mode="edit")
        if errors:
            flash_form_errors(errors)
            return _render_form("edit", data, errors, employee)
        try:
            update_employee(employee_id, data)
        except ApiError as exc:
            flash_api_error("Failed to update employee", exc)
            return _render_form("edit", data, {}, employee)
        flash("✅ Employee updated successfully", "success")
        return redirect(url_for("employees.list_employees"))

    return _render_form("edit", employee.to_form(), {}, employee)


@employees_bp.route("/<employee_id>/toggle", methods=["GET", "POST"])
def toggle_employee(employee_id: str):
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    employee, response = _load(employee_id)
    if response is not None:
        return response

    action = "deactivate" if employee.is_active else "activate"
    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Status change cancelled", "warning")
            return redirect(url_for("employees.list_employees"))
        try:
            if employee.is_active:
                delete_employee(employee_id)
            else:
                restore_employee(employee_id)
        except ApiError as exc:
            flash_api_error(f"Failed to {action} employee", exc)
            return redirect(url_for("employees.list_employees"))
        flash(f"✅ Employee {action}d successfully", "success")
        return redirect(url_for("employees.list_employees"))

    return render_confirm(
        title=f"{action.capitalize()} employee",
        message=f"Are you sure you want to {action} {employee.full_name}?",
        action_url=url_for("employees.toggle_employee", employee_id=employee_id),
        cancel_url=url_for("employees.list_employees"),
        preview_template="employees/_status_preview.html",
        preview=employee.with_active(not employee.is_active),
        danger=employee.is_active,
    )


# ---------- API ----------

@employees_bp.route("/validate", methods=["POST"])
def validate_field():
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    payload = request.get_json(silent=True) or request.form
    mode = payload.get("mode") if payload.get("mode") in ("create", "edit") else "create"
    return field_validation_response(lambda field, value: validate_employee_field(field, value, mode))
