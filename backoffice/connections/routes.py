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
    add_connection_type,
    delete_connection_type,
    fetch_connection_type,
    fetch_connection_types,
    update_connection_type,
)
from .forms import validate_connection_field, validate_connection_form


connections_bp = Blueprint("connections", __name__, url_prefix="/connections")

SEARCH_FIELDS = ["name", "description"]
SORT_KEYS = ["name", "description", "created_at"]


def _load(connection_id: str):
    """Fetch one connection type, or the response to return instead."""
    try:
        return fetch_connection_type(connection_id), None
    except NotFoundError:
        return None, not_found("Connection type", url_for("connections.list_connections"))
    except ApiError as exc:
        flash_api_error("Failed to load connection data", exc)
        return None, redirect(url_for("connections.list_connections"))


# ---------- Pages ----------

@connections_bp.route("")
def list_connections():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(request.args, sort_keys=SORT_KEYS)
    screen = ListScreen()
    page = None
    if screen.load(fetch_connection_types, "Failed to fetch connection types"):
        matching = sort_records(filter_records(screen.data, query.search, SEARCH_FIELDS), query.sort)
        page = paginate(matching, query.page)
    else:
        flash(f"❌ {screen.error}", "error")

    return render_template(
        "connections/list.html",
        page=page,
        query=query,
        title="Connection Types",
    )


@connections_bp.route("/new", methods=["GET", "POST"])
def create_connection():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        data, errors = validate_connection_form(request.form)
        if errors:
            flash_form_errors(errors)
            return render_template("connections/form.html", mode="create", data=data, errors=errors,
                                   title="Add Connection Type")
        try:
            add_connection_type(data)
        except ApiError as exc:
            flash_api_error("Failed to add connection type", exc)
            return render_template("connections/form.html", mode="create", data=data, errors={},
                                   title="Add Connection Type")
        flash("✅ Connection type added", "success")
        return redirect(url_for("connections.list_connections"))

    return render_template("connections/form.html", mode="create", data={}, errors={},
                           title="Add Connection Type")


@connections_bp.route("/<connection_id>")
def connection_detail(connection_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    connection, response = _load(connection_id)
    if response is not None:
        return response

    return render_template(
        "connections/detail.html",
        connection=connection,
        title=f"Connection Type - {connection.name}",
    )


@connections_bp.route("/<connection_id>/edit", methods=["GET", "POST"])
def edit_connection(connection_id: str):
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    connection, response = _load(connection_id)
    if response is not None:
        return response

    if request.method == "POST":
        data, errors = validate_connection_form(request.form)
        if errors:
            flash_form_errors(errors)
            return render_template("connections/form.html", mode="edit", data=data, errors=errors,
                                   connection=connection, title=f"Edit Connection Type - {connection.name}")
        try:
            update_connection_type(connection_id, data)
        except ApiError as exc:
            flash_api_error("Failed to update connection type", exc)
            return render_template("connections/form.html", mode="edit", data=data, errors={},
                                   connection=connection, title=f"Edit Connection Type - {connection.name}")
        flash("✅ Connection type updated", "success")
        return redirect(url_for("connections.connection_detail", connection_id=connection_id))

    return render_template("connections/form.html", mode="edit", data=connection.to_form(), errors={},
                           connection=connection, title=f"Edit Connection Type - {connection.name}")


@connections_bp.route("/<connection_id>/delete", methods=["GET", "POST"])
def delete_connection(connection_id: str):
    maybe_redirect = require_login(admin=True)
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Delete cancelled", "warning")
            return redirect(url_for("connections.connection_detail", connection_id=connection_id))
        try:
            delete_connection_type(connection_id)
        except ApiError as exc:
            flash_api_error("Failed to delete connection", exc)
            return redirect(url_for("connections.connection_detail", connection_id=connection_id))
        flash("✅ Connection type deleted", "success")
        return redirect(url_for("connections.list_connections"))

    connection, response = _load(connection_id)
    if response is not None:
        return response
    return render_confirm(
        title="Delete connection type",
        message=f'Are you sure you want to delete "{connection.name}"?',
        action_url=url_for("connections.delete_connection", connection_id=connection_id),
        cancel_url=url_for("connections.connection_detail", connection_id=connection_id),
        danger=True,
    )


# ---------- API ----------

@connections_bp.route("/validate", methods=["POST"])
def validate_field():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect
    return field_validation_response(validate_connection_field)
