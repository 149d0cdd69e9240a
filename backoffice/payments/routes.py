from __future__ import annotations

import datetime as _dt

from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash

from backoffice.api_client import ApiError, NotFoundError
from backoffice.auth import current_session, require_login
from backoffice.formatting import app_timezone, from_date_input, month_bounds
from backoffice.invoices.rendering import payment_receipt, render_receipt
from backoffice.listing import ListQuery, ListScreen, sort_records
from backoffice.views import flash_api_error, flash_form_errors, not_found

from .api import fetch_payment, fetch_payments, mark_payment_paid
from .forms import validate_mark_paid_form
from .models import PAYMENT_METHODS, PAYMENT_STATUSES, payment_totals, visible_payments


payments_bp = Blueprint("payments", __name__, url_prefix="/payments")

SORT_KEYS = ["customer.name", "amount", "status", "due_date", "payment_date"]


def _today() -> _dt.date:
    return _dt.datetime.now(app_timezone()).date()


def _date_range(query: ListQuery):
    """Requested date range; invalid or missing bounds fall back to the current month."""
    first, last = month_bounds(_today())
    start = query.filters.get("startDate") or ""
    end = query.filters.get("endDate") or ""
    if from_date_input(start) is None:
        start = first
    if from_date_input(end) is None:
        end = last
    query.filters["startDate"], query.filters["endDate"] = start, end
    return start, end


def _load(payment_id: str):
    try:
        return fetch_payment(payment_id), None
    except NotFoundError:
        return None, not_found("Payment", url_for("payments.list_payments"))
    except ApiError as exc:
        flash_api_error("Failed to load payment", exc)
        return None, redirect(url_for("payments.list_payments"))


# ---------- Pages ----------

@payments_bp.route("")
def list_payments():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    query = ListQuery.from_args(
        request.args,
        filters={"status": "all", "startDate": "", "endDate": ""},
        sort_keys=SORT_KEYS,
    )
    status = query.filters["status"] if query.filters["status"] in PAYMENT_STATUSES else "all"
    start_date, end_date = _date_range(query)
    store = current_session()

    screen = ListScreen()
    loaded = screen.load(
        lambda: fetch_payments(start_date, end_date, page=query.page, status=status, search=query.search),
        "Failed to load payments data",
    )
    payments = []
    pagination = None
    totals = {}
    if loaded:
        result = screen.data
        payments = sort_records(visible_payments(result.items, store.user_id, store.is_admin), query.sort)
        pagination = result.pagination
        totals = payment_totals(payments)
        # backend stats cover the whole range, prefer them when present
        totals.update({k: v for k, v in result.stats.items() if v})
    else:
        flash(f"❌ {screen.error}", "error")

    return render_template(
        "payments/list.html",
        payments=payments,
        pagination=pagination,
        loaded=loaded,
        totals=totals,
        query=query,
        current_status=status,
        start_date=start_date,
        end_date=end_date,
        STATUSES=PAYMENT_STATUSES,
        title="Payments",
    )


@payments_bp.route("/<payment_id>/mark-paid", methods=["GET", "POST"])
def mark_paid(payment_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    payment, response = _load(payment_id)
    if response is not None:
        return response

    back_url = request.values.get("next") or url_for("payments.list_payments")
    if not back_url.startswith("/") or back_url.startswith("//"):
        back_url = url_for("payments.list_payments")

    if request.method == "POST":
        data, errors = validate_mark_paid_form(request.form)
        if errors:
            flash_form_errors(errors)
            return render_template("payments/mark_paid.html", payment=payment, data=data, errors=errors,
                                   METHODS=PAYMENT_METHODS, back_url=back_url, title="Mark as paid")
        data["receivedBy"] = current_session().user_id
        try:
            mark_payment_paid(payment_id, data)
        except ApiError as exc:
            flash_api_error("Failed to update payment", exc)
            return redirect(back_url)
        current_app.logger.info("Payment %s marked paid via %s", payment_id, data["paymentMethod"])
        flash(f"✅ Payment from {payment.customer.name} marked as paid", "success")
        return redirect(back_url)

    return render_template(
        "payments/mark_paid.html",
        payment=payment,
        data={"paymentMethod": "cash"},
        errors={},
        METHODS=PAYMENT_METHODS,
        back_url=back_url,
        title="Mark as paid",
    )


@payments_bp.route("/<payment_id>/receipt")
def payment_receipt_view(payment_id: str):
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    payment, response = _load(payment_id)
    if response is not None:
        return response

    receipt = payment_receipt(
        payment,
        printed_on=_today(),
        tz=app_timezone(),
        office_address=current_app.config.get("OFFICE_ADDRESS", ""),
        helpline=current_app.config.get("HELPLINE", ""),
    )
    return render_receipt(receipt, current_app.config.get("CURRENCY_LABEL", "Rs"))
