from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable

from backoffice.formatting import record_id


EMPLOYEE_ROLES = ["employee", "admin"]


@dataclass
class Employee:
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    role: str = "employee"
    is_active: bool = True
    created_at: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Employee":
        return cls(
            id=record_id(raw),
            first_name=raw.get("firstName") or "",
            last_name=raw.get("lastName") or "",
            email=raw.get("email") or "",
            phone=str(raw.get("phone") or ""),
            role=raw.get("role") or "employee",
            # missing flag means the account was never deactivated
            is_active=raw.get("isActive") is not False,
            created_at=raw.get("createdAt"),
            raw=dict(raw),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def status_label(self) -> str:
        return "Active" if self.is_active else "Inactive"

    def with_active(self, is_active: bool) -> "Employee":
        return Employee.from_api(dict(self.raw, isActive=is_active))

    def to_form(self) -> Dict[str, str]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "password": "",
        }


def employee_stats(employees: Iterable[Employee]) -> Dict[str, int]:
    employees = list(employees)
    return {
        "total": len(employees),
        "active": sum(1 for e in employees if e.is_active),
        "inactive": sum(1 for e in employees if not e.is_active),
        "admins": sum(1 for e in employees if e.is_admin),
    }
