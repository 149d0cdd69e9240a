from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from backoffice.formatting import format_price, format_speed, record_id, to_number


@dataclass
class Package:
    id: str
    name: str = ""
    price: float = 0.0
    speed: float = 0.0
    description: str = ""
    created_at: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Package":
        return cls(
            id=record_id(raw),
            name=raw.get("name") or "",
            price=to_number(raw.get("price")),
            speed=to_number(raw.get("speed")),
            description=raw.get("description") or "",
            created_at=raw.get("createdAt"),
            raw=dict(raw),
        )

    @property
    def price_label(self) -> str:
        return format_price(self.price)

    @property
    def speed_label(self) -> str:
        return format_speed(self.speed)

    def to_form(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "price": f"{self.price:g}",
            "speed": f"{self.speed:g}",
            "description": self.description,
        }


@dataclass
class PackageStats:
    total_packages: int = 0
    total_revenue: float = 0.0
    average_price: float = 0.0
    max_speed: float = 0.0
    min_speed: float = 0.0


def package_stats(packages: Iterable[Package]) -> PackageStats:
    packages = list(packages)
    if not packages:
        return PackageStats()
    total = sum(p.price for p in packages)
    speeds = [p.speed for p in packages]
    return PackageStats(
        total_packages=len(packages),
        total_revenue=total,
        average_price=total / len(packages),
        max_speed=max(speeds),
        min_speed=min(speeds),
    )
