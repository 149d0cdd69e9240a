import datetime as dt
import random
from decimal import Decimal
from zoneinfo import ZoneInfo

from werkzeug.datastructures import MultiDict

from backoffice.invoices.forms import remove_item_row, validate_invoice_form
from backoffice.invoices.models import Invoice, compute_total, money
from backoffice.invoices.rendering import invoice_text
from pdf_templates import create_invoice_pdf


def _invoice(items=None) -> Invoice:
    return Invoice.create(
        customer_name="Ali Khan",
        service_charges="500",
        package_charges="1500",
        items=items if items is not None else [
            {"name": "Router", "price": "3500", "warranty": "365"},
            {"name": "Cable", "price": "250.5", "warranty": ""},
        ],
        today=dt.date(2024, 3, 15),
        rng=random.Random(7),
    )


def test_total_adds_charges_and_item_prices():
    assert compute_total("100", "200.5", ["50", "25.25"]) == Decimal("375.75")


def test_total_treats_non_numeric_as_zero():
    assert compute_total("abc", "", ["50", "x", None]) == Decimal("50.00")


def test_total_rounds_to_two_decimals():
    assert compute_total("0.005", "0", []) == Decimal("0.01")
    assert money("12.345") == Decimal("12.35")


def test_stored_invoice_total_matches_form_total():
    form_total = compute_total("0.005", "0.005", ["0.005"])
    invoice = Invoice.create("Ali Khan", "0.005", "0.005", [{"name": "Clip", "price": "0.005"}])

    assert form_total == Decimal("0.02")
    assert invoice.total == form_total
    assert Invoice.from_dict(invoice.to_dict()).total == form_total


def test_oversized_amounts_count_as_zero():
    assert compute_total("1e30", "100", ["9" * 27]) == Decimal("100.00")


def test_create_sets_number_and_date():
    invoice = _invoice()

    assert invoice.invoice_number.startswith("INV-")
    assert len(invoice.invoice_number) == 8
    assert invoice.date == "15/03/2024"
    assert invoice.total == Decimal("5750.50")
    assert invoice.filename == f"invoice-{invoice.invoice_number}.pdf"


def test_invoice_text():
    invoice = _invoice()
    text = invoice_text(invoice, "Rs")

    assert text.splitlines()[0] == f"INVOICE #{invoice.invoice_number}"
    assert "Customer: Ali Khan" in text
    assert "Service Charges: Rs 500.00" in text
    assert "1. Router - Rs 3500.00 (Warranty: 365 days)" in text
    assert "2. Cable - Rs 250.50" in text
    assert "Total Amount: Rs 5750.50" in text


def test_pdf_is_generated():
    pdf = create_invoice_pdf(_invoice(), currency="Rs", company_name="Speedy Net")

    assert pdf.startswith(b"%PDF")


def test_pdf_with_many_items_still_renders():
    items = [{"name": f"Item {i}", "price": "10", "warranty": "30"} for i in range(80)]
    pdf = create_invoice_pdf(_invoice(items))

    assert pdf.startswith(b"%PDF")


def test_form_requires_customer_name():
    form = MultiDict([
        ("customerName", " "),
        ("serviceCharges", "100"),
        ("item_name", "Router"),
        ("item_price", "2000"),
        ("item_warranty", "90"),
    ])
    data, errors = validate_invoice_form(form)

    assert errors == {"customerName": "Please enter customer name"}
    assert data["total"] == Decimal("2100.00")
    assert data["items"] == [{"name": "Router", "price": "2000", "warranty": "90"}]


def test_last_item_row_cannot_be_removed():
    rows = [{"name": "a", "price": "1", "warranty": ""}]
    assert remove_item_row(rows, 0) == rows
    assert remove_item_row(rows + rows, 1) == rows


# ---------- Screens ----------

def _submit(client, **overrides):
    form = {
        "customerName": "Ali Khan",
        "serviceCharges": "500",
        "packageCharges": "1500",
        "item_name": "Router",
        "item_price": "3500",
        "item_warranty": "365",
        "action": "submit",
    }
    form.update(overrides)
    return client.post("/invoice", data=form)


def test_preview_without_invoice_redirects_to_create(admin_client):
    response = admin_client.get("/invoice/preview")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/invoice")


def test_missing_customer_name_stays_on_form(admin_client):
    response = _submit(admin_client, customerName="")

    assert response.status_code == 200
    assert b"Please enter customer name" in response.data
    with admin_client.session_transaction() as sess:
        assert "invoiceData" not in sess


def test_submit_stores_invoice_and_outputs_agree(admin_client):
    response = _submit(admin_client)
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/invoice/preview")

    preview = admin_client.get("/invoice/preview")
    assert preview.status_code == 200
    assert b"Ali Khan" in preview.data
    assert b"Rs 5500.00" in preview.data

    text = admin_client.get("/invoice/preview/text")
    assert text.mimetype == "text/plain"
    assert "Total Amount: Rs 5500.00" in text.get_data(as_text=True)

    printable = admin_client.get("/invoice/preview/print")
    assert b"window.print()" in printable.data
    assert b"Rs 5500.00" in printable.data

    pdf = admin_client.get("/invoice/preview/pdf")
    assert pdf.mimetype == "application/pdf"
    assert "invoice-INV-" in pdf.headers["Content-Disposition"]
    assert pdf.data.startswith(b"%PDF")

    receipt = admin_client.get("/invoice/preview/receipt")
    assert b"Rs 5500.00" in receipt.data


def test_add_item_row_keeps_entered_values(admin_client):
    response = _submit(admin_client, action="add_item")

    assert response.status_code == 200
    assert response.data.count(b'name="item_name"') == 2
    assert b'value="Router"' in response.data


def test_invoice_requires_login(client):
    response = client.get("/invoice")

    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_sub_cent_amounts_show_form_total_everywhere(admin_client):
    _submit(admin_client, serviceCharges="0.005", packageCharges="0.005", item_price="0.005")

    assert "Total Amount: Rs 0.02" in admin_client.get("/invoice/preview/text").get_data(as_text=True)
    assert b"Rs 0.02" in admin_client.get("/invoice/preview").data
    assert b"Rs 0.02" in admin_client.get("/invoice/preview/receipt").data


def test_huge_charge_does_not_break_submit(admin_client):
    response = _submit(admin_client, serviceCharges="1e30")

    assert response.status_code == 302
    assert "Total Amount: Rs 5000.00" in admin_client.get("/invoice/preview/text").get_data(as_text=True)


def test_invoice_date_uses_display_timezone(app, admin_client):
    app.config["DISPLAY_TIMEZONE"] = "Pacific/Kiritimati"
    _submit(admin_client)

    expected = dt.datetime.now(ZoneInfo("Pacific/Kiritimati")).strftime("%d/%m/%Y")
    assert f"Date: {expected}" in admin_client.get("/invoice/preview/text").get_data(as_text=True)
