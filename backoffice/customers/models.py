from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from backoffice.formatting import record_id, to_date_input, to_number


CUSTOMER_STATUS_FILTERS = ["all", "active", "inactive"]


@dataclass
class PlanRef:
    id: str = ""
    name: str = ""
    price: float = 0.0

    @classmethod
    def from_api(cls, raw: Any) -> Optional["PlanRef"]:
        if not raw:
            return None
        if not isinstance(raw, dict):
            # unpopulated reference, just the id
            return cls(id=str(raw))
        return cls(id=record_id(raw), name=raw.get("name") or "", price=to_number(raw.get("price")))


@dataclass
class ConnectionTypeRef:
    id: str = ""
    name: str = ""

    @classmethod
    def from_api(cls, raw: Any) -> Optional["ConnectionTypeRef"]:
        if not raw:
            return None
        if not isinstance(raw, dict):
            return cls(id=str(raw))
        return cls(id=record_id(raw), name=raw.get("name") or "")


@dataclass
class Customer:
    id: str
    name: str = ""
    username: str = ""
    national_id: str = ""
    mobile: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    is_active: bool = False
    status: str = ""
    connection_start_date: Any = None
    plan: Optional[PlanRef] = None
    connection_type: Optional[ConnectionTypeRef] = None
    added_by: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __repr__(self) -> str:  # pragma: no cover - debug friendly only
        return f"<Customer {self.id} {self.name!r}>"

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Customer":
        added_by = raw.get("addedBy")
        if isinstance(added_by, dict):
            added_by = record_id(added_by)
        return cls(
            id=record_id(raw),
            name=raw.get("name") or "",
            username=raw.get("username") or "",
            national_id=str(raw.get("nationalId") or ""),
            mobile=str(raw.get("mobile") or ""),
            phone=str(raw.get("phone") or ""),
            email=raw.get("email") or "",
            address=raw.get("address") or "",
            is_active=bool(raw.get("isActive")),
            status=raw.get("status") or "",
            connection_start_date=raw.get("connectionStartDate"),
            plan=PlanRef.from_api(raw.get("plan")),
            connection_type=ConnectionTypeRef.from_api(raw.get("connectionType")),
            added_by=str(added_by or ""),
            raw=dict(raw),
        )

    @property
    def plan_name(self) -> str:
        return self.plan.name if self.plan and self.plan.name else "N/A"

    @property
    def connection_type_name(self) -> str:
        return self.connection_type.name if self.connection_type and self.connection_type.name else "N/A"

    @property
    def status_label(self) -> str:
        return "Active" if self.is_active else "Inactive"

    def with_active(self, is_active: bool) -> "Customer":
        """Copy of this record showing ``is_active``; used to preview a pending toggle."""
        raw = dict(self.raw, isActive=is_active)
        return Customer.from_api(raw)

    def to_form(self, tz=None) -> Dict[str, str]:
        return {
            "name": self.name,
            "username": self.username,
            "password": "",
            "nationalId": self.national_id,
            "mobile": self.mobile,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "plan": self.plan.id if self.plan else "",
            "connectionType": self.connection_type.id if self.connection_type else "",
            "connectionStartDate": to_date_input(self.connection_start_date, tz),
        }
