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

from .api import add_package, delete_package, fetch_package, fetch_packages, update_package
from .forms import validate_package_field, validate_package_form
from .models import package_stats


packages_bp = Blueprint("packages", __name__, url_prefix="/packages")

SEARCH_FIELDS = ["name", "description", "speed", "price"]
SORT_KEYS = ["name", "price", "speed"]


def _load(package_id: str):
    try:
        return fetch_package(package_id), None
    except NotFoundError:
        return None, not_found("Package", url_for("packages.list_packages"))
    except ApiError as exc:
        flash_api_error("Failed to load package data", exc)
        return None, redirect(url_for("packages.list_packages"))


def _render_form(mode: str, data, errors, package=None):
    title = "Add Package" if mode == "create" else f"Edit Package - {package.name}"
    return render_template("packages/form.html", mode=mode, data=data, errors=errors,
                           package=package, title=title)


# ---------- Pages ----------

@packages_bp.route("")
def list_packages():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(request.args, sort_keys=SORT_KEYS)
    screen = ListScreen()
    page = None
    stats = None
    if screen.load(fetch_packages, "Failed to load packages data"):
        stats = package_stats(screen.data)
        matching = sort_records(filter_records(screen.data, query.search, SEARCH_FIELDS), query.sort)
        page = paginate(matching, query.page)
    else:
        flash(f"❌ {screen.error}", "error")

    return render_template(
        "packages/list.html",
        page=page,
        stats=stats,
        query=query,
        title="Packages",
    )


@packages_bp.route("/new", methods=["GET", "POST"])
def create_package():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        data, errors = validate_package_form(request.form)
        if errors:
            flash_form_errors(errors)
            return _render_form("create", data, errors)
        try:
            add_package(data)
        except ApiError as exc:
            flash_api_error("Failed to add package", exc)
            return _render_form("create", data, {})
        flash(f"✅ Package {data['name']} added", "success")
        return redirect(url_for("packages.list_packages"))

    return _render_form("create", {}, {})


@packages_bp.route("/<package_id>")
def package_detail(package_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    package, response = _load(package_id)
    if response is not None:
        return response
    return render_template("packages/detail.html", package=package, title=f"Package - {package.name}")


@packages_bp.route("/<package_id>/edit", methods=["GET", "POST"])
def edit_package(package_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    package, response = _load(package_id)
    if response is not None:
        return response

    if request.method == "POST":
        data, errors = validate_package_form(request.form)
        if errors:
            flash_form_errors(errors)
            return _render_form("edit", data, errors, package)
        try:
            update_package(package_id, data)
        except ApiError as exc:
            flash_api_error("Failed to update package", exc)
            return _render_form("edit", data, {}, package)
        flash("✅ Package updated", "success")
        return redirect(url_for("packages.package_detail", package_id=package_id))

    return _render_form("edit", package.to_form(), {}, package)


@packages_bp.route("/<package_id>/delete", methods=["GET", "POST"])
def delete_package_view(package_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Delete cancelled", "warning")
            return redirect(url_for("packages.list_packages"))
        try:
            delete_package(package_id)
        except ApiError as exc:
            flash_api_error("Failed to delete package", exc)
            return redirect(url_for("packages.list_packages"))
        flash("✅ Package deleted", "success")
        return redirect(url_for("packages.list_packages"))

    package, response = _load(package_id)
    if response is not None:
        return response
    return render_confirm(
        title="Delete package",
        message=f'Are you sure you want to delete "{package.name}" package?',
        action_url=url_for("packages.delete_package_view", package_id=package_id),
        cancel_url=url_for("packages.list_packages"),
        danger=True,
    )


# ---------- API ----------

@packages_bp.route("/validate", methods=["POST"])
def validate_field():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect
    return field_validation_response(validate_package_field)
