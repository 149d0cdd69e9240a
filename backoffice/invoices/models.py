from __future__ import annotations

import datetime as _dt
import random
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from backoffice.formatting import to_decimal


INVOICE_SESSION_KEY = "invoiceData"
CENTS = Decimal("0.01")


def money(value: Any) -> Decimal:
    """Non-numeric input counts as 0; always two decimal places."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_total(service_charges: Any, package_charges: Any, item_prices: Iterable[Any]) -> Decimal:
    total = to_decimal(service_charges) + to_decimal(package_charges)
    for price in item_prices:
        total += to_decimal(price)
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def new_invoice_number(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"INV-{rng.randrange(10000):04d}"


@dataclass
class InvoiceItem:
    name: str = ""
    price: Decimal = Decimal("0")
    warranty: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "InvoiceItem":
        return cls(
            name=str(raw.get("name") or ""),
            price=to_decimal(raw.get("price")),
            warranty=str(raw.get("warranty") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "price": str(self.price), "warranty": self.warranty}


@dataclass
class Invoice:
    invoice_number: str
    date: str
    customer_name: str
    service_charges: Decimal = Decimal("0")
    package_charges: Decimal = Decimal("0")
    items: List[InvoiceItem] = field(default_factory=list)

    @property
    def charges_total(self) -> Decimal:
        return money(self.service_charges + self.package_charges)

    @property
    def items_total(self) -> Decimal:
        return money(sum((item.price for item in self.items), Decimal("0")))

    @property
    def total(self) -> Decimal:
        return compute_total(self.service_charges, self.package_charges, [item.price for item in self.items])

    @property
    def filename(self) -> str:
        return f"invoice-{self.invoice_number}.pdf"

    @classmethod
    def create(cls, customer_name: str, service_charges: Any, package_charges: Any,
               items: Iterable[Dict[str, Any]], today: Optional[_dt.date] = None,
               rng: Optional[random.Random] = None) -> "Invoice":
        today = today or _dt.date.today()
        return cls(
            invoice_number=new_invoice_number(rng),
            date=today.strftime("%d/%m/%Y"),
            customer_name=customer_name,
            service_charges=to_decimal(service_charges),
            package_charges=to_decimal(package_charges),
            items=[InvoiceItem.from_dict(item) for item in items],
        )

    # ---------- Session (de)serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceNumber": self.invoice_number,
            "date": self.date,
            "customerName": self.customer_name,
            "serviceCharges": str(self.service_charges),
            "packageCharges": str(self.package_charges),
            "inventoryItems": [item.to_dict() for item in self.items],
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Invoice":
        return cls(
            invoice_number=str(raw.get("invoiceNumber") or ""),
            date=str(raw.get("date") or ""),
            customer_name=str(raw.get("customerName") or ""),
            service_charges=to_decimal(raw.get("serviceCharges")),
            package_charges=to_decimal(raw.get("packageCharges")),
            items=[InvoiceItem.from_dict(i) for i in raw.get("inventoryItems") or [] if isinstance(i, dict)],
        )


def save_invoice(store, invoice: Invoice) -> None:
    store.set_object(INVOICE_SESSION_KEY, invoice.to_dict())


def load_invoice(store) -> Optional[Invoice]:
    raw = store.get_object(INVOICE_SESSION_KEY)
    if not raw:
        return None
    return Invoice.from_dict(raw)
