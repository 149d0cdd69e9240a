from __future__ import annotations

from typing import Any, Dict, List

from extensions import api
from backoffice.api_client import unwrap, unwrap_list

from .models import Employee


def fetch_employees() -> List[Employee]:
    return [Employee.from_api(r) for r in unwrap_list(api.get("/users"), "users")]


def fetch_employee(employee_id: str) -> Employee:
    return Employee.from_api(unwrap(api.get(f"/users/{employee_id}"), "user") or {})


def add_employee(data: Dict[str, Any]) -> Any:
    return api.post("/users", json=data)


def update_employee(employee_id: str, data: Dict[str, Any]) -> Any:
    return api.put(f"/users/{employee_id}", json=data)


def delete_employee(employee_id: str) -> None:
    """Soft delete; the account is deactivated, not removed."""
    api.delete(f"/users/{employee_id}")


def restore_employee(employee_id: str) -> None:
    api.post(f"/users/{employee_id}/restore")
