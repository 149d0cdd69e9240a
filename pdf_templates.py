from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

HEADER_HEIGHT = 230
FOOTER_HEIGHT = 150
MARGIN = 50


def _items_table(invoice, currency: str) -> Table:
    data = [['Item', 'Warranty', 'Price']]
    for item in invoice.items:
        warranty = f"{item.warranty} days" if item.warranty else '-'
        data.append([item.name, warranty, f"{currency} {item.price:.2f}"])

    table = Table(data, colWidths=[260, 100, 135])
    style = TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4f46e5')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (1, 0), (1, -1), 'CENTER'),
        ('ALIGN', (2, 0), (2, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f3f4f6')]),
    ])
    table.setStyle(style)
    return table


def create_invoice_pdf(invoice, currency: str = 'Rs', company_name: str = '') -> bytes:
    """Single-page A4 invoice; the page grows taller instead of splitting when items overflow."""
    width, a4_height = A4
    table = _items_table(invoice, currency)
    _, table_height = table.wrap(width - 2 * MARGIN, a4_height)
    height = max(a4_height, HEADER_HEIGHT + table_height + FOOTER_HEIGHT)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    c.setTitle(f"Invoice {invoice.invoice_number}")

    # Header
    c.setFont("Helvetica-Bold", 24)
    c.drawString(MARGIN, height - 60, "INVOICE")
    if company_name:
        c.setFont("Helvetica-Bold", 12)
        c.drawRightString(width - MARGIN, height - 60, company_name)
    c.setFont("Helvetica", 11)
    c.drawString(MARGIN, height - 85, f"Invoice #: {invoice.invoice_number}")
    c.drawString(MARGIN, height - 100, f"Date: {invoice.date}")

    c.setFont("Helvetica-Bold", 12)
    c.drawString(MARGIN, height - 130, "Bill To:")
    c.setFont("Helvetica", 11)
    c.drawString(MARGIN, height - 145, invoice.customer_name)

    # Charges
    y = height - 180
    for label, amount in (("Service Charges:", invoice.service_charges),
                          ("Package Charges:", invoice.package_charges)):
        c.drawString(MARGIN, y, label)
        c.drawRightString(width - MARGIN, y, f"{currency} {amount:.2f}")
        y -= 16

    # Items
    y -= 14
    table.drawOn(c, MARGIN, y - table_height)
    y -= table_height + 30

    # Total
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN, y, "Total Amount:")
    c.drawRightString(width - MARGIN, y, f"{currency} {invoice.total:.2f}")

    c.setFont("Helvetica", 10)
    c.setFillColor(colors.HexColor('#4f46e5'))
    c.drawCentredString(width / 2, 50, "Thank you! Please make payment within 7 days")

    c.showPage()
    c.save()
    return buffer.getvalue()
