"""Text, HTML and receipt outputs built from one structured value each.

The invoice preview page, its print view and the PDF all read the same
``Invoice``; thermal receipts (invoice or payment) are described by a
``Receipt`` and rendered through ``receipt.html``.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple

from flask import render_template

from backoffice.formatting import CURRENCY_LABEL, format_date

from .models import Invoice, money


def invoice_text(invoice: Invoice, currency: str = CURRENCY_LABEL) -> str:
    """Plain-text invoice for sharing or copying to the clipboard."""
    lines = [
        f"INVOICE #{invoice.invoice_number}",
        "",
        f"Date: {invoice.date}",
        f"Customer: {invoice.customer_name}",
        "",
        f"Service Charges: {currency} {invoice.service_charges:.2f}",
        f"Package Charges: {currency} {invoice.package_charges:.2f}",
        "",
        "Inventory Items:",
    ]
    for index, item in enumerate(invoice.items, start=1):
        line = f"{index}. {item.name} - {currency} {item.price:.2f}"
        if item.warranty:
            line += f" (Warranty: {item.warranty} days)"
        lines.append(line)
    lines += [
        "",
        f"Total Amount: {currency} {invoice.total:.2f}",
        "",
        "Thank you!",
    ]
    return "\n".join(lines)


def render_invoice_document(invoice: Invoice, printable: bool = False, **context) -> str:
    """HTML invoice; ``printable`` wraps it as a standalone page that opens the print dialog."""
    template = "invoices/print.html" if printable else "invoices/preview.html"
    return render_template(template, invoice=invoice, title=f"Invoice {invoice.invoice_number}", **context)


# ---------- Thermal receipts ----------

@dataclass
class Receipt:
    title: str
    printed_on: str
    details: List[Tuple[str, str]] = field(default_factory=list)
    columns: Tuple[str, str, str] = ("Item", "", "Price")
    rows: List[Tuple[str, str, Decimal]] = field(default_factory=list)
    subtotals: List[Tuple[str, Decimal]] = field(default_factory=list)
    total: Decimal = Decimal("0.00")
    headline: str = ""
    message: str = ""
    office_address: str = ""
    helpline: str = ""


def invoice_receipt(invoice: Invoice, printed_on: _dt.date, office_address: str = "",
                    helpline: str = "") -> Receipt:
    return Receipt(
        title="Invoice Receipt",
        printed_on=printed_on.strftime("%d/%m/%Y"),
        details=[
            ("Invoice #", invoice.invoice_number),
            ("Customer", invoice.customer_name),
        ],
        columns=("Item", "Warranty", "Price"),
        rows=[(item.name, f"{item.warranty or '0'} days", item.price) for item in invoice.items],
        subtotals=[
            ("Service Charges", invoice.service_charges),
            ("Package Charges", invoice.package_charges),
            ("Service & Package", invoice.charges_total),
            ("Items Total", invoice.items_total),
        ],
        total=invoice.total,
        headline="Thank you",
        office_address=office_address,
        helpline=helpline,
    )


def payment_receipt(payment, printed_on: _dt.date, tz: Optional[_dt.tzinfo] = None,
                    office_address: str = "", helpline: str = "") -> Receipt:
    amount = money(payment.amount)
    return Receipt(
        title="Payment Receipt",
        printed_on=printed_on.strftime("%d/%m/%Y"),
        details=[
            ("Customer", payment.customer.name),
            ("Phone", payment.customer.mobile),
            ("Activation Date", format_date(payment.customer.connection_start_date, tz)),
        ],
        columns=("", "Days", "Price"),
        rows=[(payment.plan.name if payment.plan else "", "30", amount)],
        total=amount,
        headline="Payment Successful",
        message="Thank you for the payment!",
        office_address=office_address,
        helpline=helpline,
    )


def render_receipt(receipt: Receipt, currency: str = CURRENCY_LABEL) -> str:
    return render_template("receipt.html", receipt=receipt, currency=currency, title=receipt.title)


def sample_receipt(printed_on: _dt.datetime, cashier: str, company_name: str = "",
                 office_address: str = "", helpline: str = "") -> Receipt:
    """Fixed sample used to check the thermal printer from the settings page."""
    rows = [
        ("Item A", "", money(150)),
        ("Item B", "", money(250)),
        ("Item C", "", money(100)),
    ]
    return Receipt(
        title=company_name or "Test Receipt",
        printed_on=printed_on.strftime("%d/%m/%Y %H:%M"),
        details=[("Cashier", cashier or "Admin")],
        rows=rows,
        total=money(sum(price for _, _, price in rows)),
        headline="Test print",
        message="Thank you for shopping!",
        office_address=office_address,
        helpline=helpline,
    )
