from __future__ import annotations

from typing import Dict, Optional

from flask import Blueprint, render_template, request, redirect, url_for, flash

from backoffice.api_client import ApiError, NotFoundError
from backoffice.auth import require_login
from backoffice.connections.api import fetch_connection_types
from backoffice.formatting import app_timezone
from backoffice.listing import ListQuery, ListScreen, filter_records, sort_records
from backoffice.packages.api import fetch_packages
from backoffice.views import (
    confirmed,
    field_validation_response,
    flash_api_error,
    flash_form_errors,
    not_found,
    render_confirm,
)

from .api import (
    activate_customer,
    add_customer,
    delete_customer,
    fetch_customer,
    fetch_customers,
    update_customer,
)
from .forms import (
    CUSTOMER_STEPS,
    STEP_FIELDS,
    build_customer_payload,
    customer_form_data,
    first_step_with_errors,
    next_step,
    previous_step,
    validate_customer_field,
    validate_customer_form,
    validate_customer_step,
)
from .models import CUSTOMER_STATUS_FILTERS


customers_bp = Blueprint("customers", __name__, url_prefix="/customers")

SEARCH_FIELDS = ["name", "email", "mobile", "national_id", "username"]
SORT_KEYS = ["name", "email", "mobile", "plan.name", "is_active", "connection_start_date"]


# ---------- Helpers ----------

def _status_matches(status: str):
    if status == "active":
        return lambda c: c.is_active
    if status == "inactive":
        return lambda c: not c.is_active
    return None


def _form_options():
    """Connection types and packages for the select boxes; empty lists when the backend fails."""
    try:
        return fetch_connection_types(), fetch_packages()
    except ApiError as exc:
        flash_api_error("Failed to load form data", exc)
        return [], []


def _load(customer_id: str):
    try:
        return fetch_customer(customer_id), None
    except NotFoundError:
        return None, not_found("Customer", url_for("customers.list_customers"))
    except ApiError as exc:
        flash_api_error("Failed to load customer", exc)
        return None, redirect(url_for("customers.list_customers"))


def _render_wizard(data: Dict[str, str], errors: Dict[str, str], step: str):
    connection_types, packages = _form_options()
    return render_template(
        "customers/wizard.html",
        data=data,
        errors=errors,
        step=step,
        steps=CUSTOMER_STEPS,
        step_fields=STEP_FIELDS,
        connection_types=connection_types,
        packages=packages,
        title="Add Customer",
    )


def _render_edit(customer, data: Dict[str, str], errors: Dict[str, str]):
    connection_types, packages = _form_options()
    return render_template(
        "customers/form.html",
        customer=customer,
        data=data,
        errors=errors,
        connection_types=connection_types,
        packages=packages,
        title=f"Edit Customer - {customer.name}",
    )


# ---------- Pages ----------

@customers_bp.route("")
def list_customers():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(request.args, filters={"status": "all"}, sort_keys=SORT_KEYS)
    status = query.filters["status"] if query.filters["status"] in CUSTOMER_STATUS_FILTERS else "all"

    screen = ListScreen()
    loaded = screen.load(
        lambda: fetch_customers(page=query.page, search=query.search, status=status),
        "Failed to load customers",
    )
    customers = []
    pagination = None
    if loaded:
        result = screen.data
        customers = sort_records(
            filter_records(result.items, query.search, SEARCH_FIELDS, _status_matches(status)),
            query.sort,
        )
        pagination = result.pagination
    else:
        flash(f"❌ {screen.error}", "error")

    stats = {}
    if loaded:
        stats = {
            "total": screen.data.stats.get("totalCustomers", pagination.total_count),
            "active": screen.data.stats.get("activeCustomers", sum(1 for c in screen.data.items if c.is_active)),
            "inactive": screen.data.stats.get("inactiveCustomers", sum(1 for c in screen.data.items if not c.is_active)),
        }

    return render_template(
        "customers/list.html",
        customers=customers,
        pagination=pagination,
        loaded=loaded,
        stats=stats,
        query=query,
        current_status=status,
        STATUS_FILTERS=CUSTOMER_STATUS_FILTERS,
        title="Customers",
    )


@customers_bp.route("/new", methods=["GET", "POST"])
def create_customer():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "GET":
        return _render_wizard({}, {}, CUSTOMER_STEPS[0])

    step = request.form.get("step") if request.form.get("step") in CUSTOMER_STEPS else CUSTOMER_STEPS[0]
    action = request.form.get("action") or "submit"

    if action == "back":
        return _render_wizard(customer_form_data(request.form), {}, previous_step(step))

    if action == "next":
        data, errors = validate_customer_step(request.form, step)
        if errors:
            flash_form_errors(errors)
            return _render_wizard(data, errors, step)
        return _render_wizard(data, {}, next_step(step))

    data, errors = validate_customer_form(request.form, mode="create")
    if errors:
        flash_form_errors(errors)
        return _render_wizard(data, errors, first_step_with_errors(errors))

    try:
        add_customer(build_customer_payload(data, mode="create", tz=app_timezone()))
    except ApiError as exc:
        flash_api_error("Failed to add customer", exc)
        return _render_wizard(data, {}, step)

    flash(f"✅ Customer {data['name']} added", "success")
    return redirect(url_for("customers.list_customers"))


@customers_bp.route("/<customer_id>")
def customer_detail(customer_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    customer, response = _load(customer_id)
    if response is not None:
        return response
    return render_template("customers/detail.html", customer=customer, title=f"Customer - {customer.name}")


@customers_bp.route("/<customer_id>/edit", methods=["GET", "POST"])
def edit_customer(customer_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    customer, response = _load(customer_id)
    if response is not None:
        return response

    if request.method == "POST":
        data, errors = validate_customer_form(request.form, mode="edit")
        if errors:
            flash_form_errors(errors)
            return _render_edit(customer, data, errors)

        original_plan = customer.plan.id if customer.plan else ""
        payload = build_customer_payload(data, mode="edit", original_plan=original_plan, tz=app_timezone())
        try:
            update_customer(customer_id, payload)
        except ApiError as exc:
            flash_api_error("Failed to update customer", exc)
            return _render_edit(customer, data, {})
        flash("✅ Customer updated", "success")
        return redirect(url_for("customers.list_customers"))

    return _render_edit(customer, customer.to_form(app_timezone()), {})


@customers_bp.route("/<customer_id>/toggle", methods=["GET", "POST"])
def toggle_customer(customer_id: str):
    """Deactivate an active customer or reactivate an inactive one, after confirmation."""
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    customer, response = _load(customer_id)
    if response is not None:
        return response

    action = "deactivate" if customer.is_active else "activate"
    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Status change cancelled", "warning")
            return redirect(url_for("customers.list_customers"))
        try:
            if customer.is_active:
                delete_customer(customer_id)
            else:
                activate_customer(customer_id)
        except ApiError as exc:
            flash_api_error(f"Failed to {action} customer", exc)
            return redirect(url_for("customers.list_customers"))
        flash(f"✅ Customer {customer.name} {action}d", "success")
        return redirect(url_for("customers.list_customers"))

    return render_confirm(
        title=f"{action.capitalize()} customer",
        message=f"Are you sure you want to {action} {customer.name}?",
        action_url=url_for("customers.toggle_customer", customer_id=customer_id),
        cancel_url=url_for("customers.list_customers"),
        preview_template="customers/_status_preview.html",
        preview=customer.with_active(not customer.is_active),
        danger=customer.is_active,
    )


@customers_bp.route("/<customer_id>/delete", methods=["GET", "POST"])
def delete_customer_view(customer_id: str):
    """Soft delete; deleting an already inactive customer is harmless."""
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Delete cancelled", "warning")
            return redirect(url_for("customers.customer_detail", customer_id=customer_id))
        try:
            delete_customer(customer_id)
        except ApiError as exc:
            flash_api_error("Failed to delete customer", exc)
            return redirect(url_for("customers.customer_detail", customer_id=customer_id))
        flash("✅ Customer deleted", "success")
        return redirect(url_for("customers.list_customers"))

    customer, response = _load(customer_id)
    if response is not None:
        return response
    return render_confirm(
        title="Delete customer",
        message=f"Are you sure you want to delete {customer.name}? The customer will be marked inactive.",
        action_url=url_for("customers.delete_customer_view", customer_id=customer_id),
        cancel_url=url_for("customers.customer_detail", customer_id=customer_id),
        preview_template="customers/_status_preview.html",
        preview=customer.with_active(False),
        danger=True,
    )


# ---------- API ----------

@customers_bp.route("/validate", methods=["POST"])
def validate_field():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    payload = request.get_json(silent=True) or request.form
    mode: Optional[str] = payload.get("mode") if payload.get("mode") in ("create", "edit") else "create"
    return field_validation_response(lambda field, value: validate_customer_field(field, value, mode))
