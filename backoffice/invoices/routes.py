from __future__ import annotations

import datetime as _dt
from io import BytesIO

from flask import (
    Blueprint,
    Response,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)

from backoffice.auth import current_session, require_login
from backoffice.formatting import app_timezone
from backoffice.views import flash_form_errors
from pdf_templates import create_invoice_pdf

from .forms import add_item_row, blank_item, remove_item_row, validate_invoice_form
from .models import Invoice, compute_total, load_invoice, save_invoice
from .rendering import invoice_receipt, invoice_text, render_invoice_document, render_receipt


invoices_bp = Blueprint("invoices", __name__, url_prefix="/invoice")


# ---------- Helpers ----------

def _render_form(data, errors):
    return render_template("invoices/form.html", data=data, errors=errors, title="Create Invoice")


def _stored_invoice():
    """The draft saved by the create screen, or a redirect back to it."""
    invoice = load_invoice(current_session())
    if invoice is None:
        flash("⚠️ Create an invoice first", "warning")
        return None, redirect(url_for("invoices.create_invoice"))
    return invoice, None


def _local_today() -> _dt.date:
    return _dt.datetime.now(app_timezone()).date()


def _currency() -> str:
    return current_app.config.get("CURRENCY_LABEL", "Rs")


# ---------- Pages ----------

@invoices_bp.route("", methods=["GET", "POST"])
def create_invoice():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    if request.method == "GET":
        return _render_form({"items": [blank_item()]}, {})

    action = request.form.get("action") or "submit"
    data, errors = validate_invoice_form(request.form)

    if action == "add_item":
        data["items"] = add_item_row(data["items"])
        return _render_form(data, {})
    if action.startswith("remove_item:"):
        try:
            index = int(action.split(":", 1)[1])
        except ValueError:
            index = -1
        data["items"] = remove_item_row(data["items"], index)
        data["total"] = compute_total(
            data["serviceCharges"], data["packageCharges"], [item["price"] for item in data["items"]]
        )
        return _render_form(data, {})

    if errors:
        flash_form_errors(errors)
        return _render_form(data, errors)

    items = [item for item in data["items"] if item["name"] or item["price"]]
    invoice = Invoice.create(
        customer_name=data["customerName"],
        service_charges=data["serviceCharges"],
        package_charges=data["packageCharges"],
        items=items,
        today=_local_today(),
    )
    save_invoice(current_session(), invoice)
    current_app.logger.info("Invoice %s drafted for %s", invoice.invoice_number, invoice.customer_name)
    return redirect(url_for("invoices.preview_invoice"))


@invoices_bp.route("/preview")
def preview_invoice():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    invoice, response = _stored_invoice()
    if response is not None:
        return response
    return render_invoice_document(invoice, currency=_currency())


@invoices_bp.route("/preview/text")
def invoice_text_view():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    invoice, response = _stored_invoice()
    if response is not None:
        return response
    return Response(invoice_text(invoice, _currency()), mimetype="text/plain")


@invoices_bp.route("/preview/print")
def print_invoice():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    invoice, response = _stored_invoice()
    if response is not None:
        return response
    return render_invoice_document(invoice, printable=True, currency=_currency())


@invoices_bp.route("/preview/pdf")
def download_invoice_pdf():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    invoice, response = _stored_invoice()
    if response is not None:
        return response

    pdf = create_invoice_pdf(invoice, currency=_currency(), company_name=current_app.config.get("COMPANY_NAME", ""))
    return send_file(
        BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=invoice.filename,
    )


@invoices_bp.route("/preview/receipt")
def print_invoice_receipt():
    maybe_redirect = require_login()
    if maybe_redirect:
        return maybe_redirect

    invoice, response = _stored_invoice()
    if response is not None:
        return response

    receipt = invoice_receipt(
        invoice,
        printed_on=_local_today(),
        office_address=current_app.config.get("OFFICE_ADDRESS", ""),
        helpline=current_app.config.get("HELPLINE", ""),
    )
    return render_receipt(receipt, _currency())
