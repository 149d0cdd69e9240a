from __future__ import annotations

from flask import Blueprint, render_template, request, redirect, url_for, flash

from backoffice.api_client import ApiError, NotFoundError
from backoffice.auth import require_login
from backoffice.formatting import app_timezone
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
    add_inventory_item,
    delete_inventory_item,
    fetch_inventory,
    fetch_inventory_item,
    update_inventory_item,
)
from .forms import validate_inventory_field, validate_inventory_form
from .models import INVENTORY_CATEGORIES, STOCK_FILTERS, check_low_stock, inventory_stats


inventory_bp = Blueprint("inventory", __name__, url_prefix="/inventory")

SEARCH_FIELDS = ["name", "brand", "model", "serial_number"]
SORT_KEYS = ["name", "category", "quantity", "unit_price", "location"]


def _filter_predicate(category: str, stock: str):
    def predicate(item) -> bool:
        if category != "all" and item.category != category:
            return False
        if stock == "low":
            return item.is_low_stock
        if stock == "normal":
            return not item.is_low_stock
        return True

    return predicate


def _load(item_id: str):
    try:
        return fetch_inventory_item(item_id), None
    except NotFoundError:
        return None, not_found("Inventory item", url_for("inventory.list_inventory"))
    except ApiError as exc:
        flash_api_error("Failed to load inventory item", exc)
        return None, redirect(url_for("inventory.list_inventory"))


def _render_form(mode: str, data, errors, item=None):
    title = "Add Inventory Item" if mode == "create" else f"Edit Item - {item.name}"
    return render_template("inventory/form.html", mode=mode, data=data, errors=errors, item=item,
                           CATEGORIES=INVENTORY_CATEGORIES, title=title)


# ---------- Pages ----------

@inventory_bp.route("")
def list_inventory():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(request.args, filters={"category": "all", "stock": "all"}, sort_keys=SORT_KEYS)
    category = query.filters["category"] if query.filters["category"] in INVENTORY_CATEGORIES else "all"
    stock = query.filters["stock"] if query.filters["stock"] in STOCK_FILTERS else "all"

    screen = ListScreen()
    page = None
    stats = None
    low_stock = []
    if screen.load(fetch_inventory, "Failed to load inventory"):
        stats = inventory_stats(screen.data)
        low_stock = check_low_stock(screen.data)
        matching = filter_records(screen.data, query.search, SEARCH_FIELDS, _filter_predicate(category, stock))
        page = paginate(sort_records(matching, query.sort), query.page)
    else:
        flash(f"❌ {screen.error}", "error")

    return render_template(
        "inventory/list.html",
        page=page,
        stats=stats,
        low_stock=low_stock,
        query=query,
        current_category=category,
        current_stock=stock,
        CATEGORIES=INVENTORY_CATEGORIES,
        STOCK_FILTERS=STOCK_FILTERS,
        title="Inventory",
    )


@inventory_bp.route("/new", methods=["GET", "POST"])
def create_item():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        data, errors = validate_inventory_form(request.form)
        if errors:
            flash_form_errors(errors)
            return _render_form("create", data, errors)
        try:
            add_inventory_item(data)
        except ApiError as exc:
            flash_api_error("Failed to add item", exc)
            return _render_form("create", request.form, {})
        flash("✅ Item added successfully", "success")
        return redirect(url_for("inventory.list_inventory"))

    return _render_form("create", {"quantity": "0", "minQuantity": "0"}, {})


@inventory_bp.route("/<item_id>")
def item_detail(item_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    item, response = _load(item_id)
    if response is not None:
        return response
    return render_template("inventory/detail.html", item=item, title=f"Inventory - {item.name}")


@inventory_bp.route("/<item_id>/edit", methods=["GET", "POST"])
def edit_item(item_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    item, response = _load(item_id)
    if response is not None:
        return response

    if request.method == "POST":
        data, errors = validate_inventory_form(request.form)
        if errors:
            flash_form_errors(errors)
            return _render_form("edit", data, errors, item)
        try:
            update_inventory_item(item_id, data)
        except ApiError as exc:
            flash_api_error("Failed to update item", exc)
            return _render_form("edit", request.form, {}, item)
        flash("✅ Item updated successfully", "success")
        return redirect(url_for("inventory.item_detail", item_id=item_id))

    return _render_form("edit", item.to_form(app_timezone()), {}, item)


@inventory_bp.route("/<item_id>/delete", methods=["GET", "POST"])
def delete_item(item_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "POST":
        if not confirmed():
            flash("⚠️ Delete cancelled", "warning")
            return redirect(url_for("inventory.list_inventory"))
        try:
            delete_inventory_item(item_id)
        except ApiError as exc:
            flash_api_error("Failed to delete item", exc)
            return redirect(url_for("inventory.list_inventory"))
        flash("✅ Item deleted successfully", "success")
        return redirect(url_for("inventory.list_inventory"))

    item, response = _load(item_id)
    if response is not None:
        return response
    return render_confirm(
        title="Delete inventory item",
        message=f'Are you sure you want to delete "{item.name}"?',
        action_url=url_for("inventory.delete_item", item_id=item_id),
        cancel_url=url_for("inventory.list_inventory"),
        danger=True,
    )


# ---------- API ----------

@inventory_bp.route("/validate", methods=["POST"])
def validate_field():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect
    return field_validation_response(validate_inventory_field)
