from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from backoffice.formatting import record_id, to_date_input, to_number


INVENTORY_CATEGORIES = [
    "router",
    "modem",
    "cable",
    "connector",
    "antenna",
    "power_supply",
    "other",
]

STOCK_FILTERS = ["all", "low", "normal"]


def _int(value: Any) -> int:
    return int(to_number(value))


@dataclass
class InventoryItem:
    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    brand: str = ""
    model: str = ""
    quantity: int = 0
    min_quantity: int = 0
    unit_price: float = 0.0
    location: str = ""
    supplier: str = ""
    supplier_contact: str = ""
    purchase_date: Any = None
    warranty_expiry: Any = None
    serial_number: str = ""
    notes: str = ""
    image_url: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "InventoryItem":
        return cls(
            id=record_id(raw),
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            category=raw.get("category") or "",
            brand=raw.get("brand") or "",
            model=raw.get("model") or "",
            quantity=_int(raw.get("quantity")),
            min_quantity=_int(raw.get("minQuantity")),
            unit_price=to_number(raw.get("unitPrice")),
            location=raw.get("location") or "",
            supplier=raw.get("supplier") or "",
            supplier_contact=raw.get("supplierContact") or "",
            purchase_date=raw.get("purchaseDate"),
            warranty_expiry=raw.get("warrantyExpiry"),
            serial_number=raw.get("serialNumber") or "",
            notes=raw.get("notes") or "",
            image_url=raw.get("imageUrl") or "",
            raw=dict(raw),
        )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_quantity

    @property
    def stock_value(self) -> float:
        return self.quantity * self.unit_price

    @property
    def category_label(self) -> str:
        return self.category.replace("_", " ").capitalize() if self.category else "-"

    def to_form(self, tz=None) -> Dict[str, str]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "model": self.model,
            "quantity": str(self.quantity),
            "minQuantity": str(self.min_quantity),
            "unitPrice": f"{self.unit_price:g}",
            "location": self.location,
            "supplier": self.supplier,
            "supplierContact": self.supplier_contact,
            "purchaseDate": to_date_input(self.purchase_date, tz),
            "warrantyExpiry": to_date_input(self.warranty_expiry, tz),
            "serialNumber": self.serial_number,
            "notes": self.notes,
            "imageUrl": self.image_url,
        }


@dataclass
class InventoryStats:
    total_items: int = 0
    low_stock_items: int = 0
    total_value: float = 0.0
    categories: int = 0


def check_low_stock(items: Iterable[InventoryItem]) -> List[InventoryItem]:
    return [item for item in items if item.is_low_stock]


def inventory_stats(items: Iterable[InventoryItem]) -> InventoryStats:
    items = list(items)
    return InventoryStats(
        total_items=len(items),
        low_stock_items=len(check_low_stock(items)),
        total_value=sum(item.stock_value for item in items),
        categories=len({item.category for item in items}),
    )
