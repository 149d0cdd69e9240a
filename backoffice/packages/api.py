from __future__ import annotations

from typing import Any, Dict, List

from extensions import api
from backoffice.api_client import unwrap, unwrap_list

from .models import Package


def fetch_packages() -> List[Package]:
    return [Package.from_api(r) for r in unwrap_list(api.get("/package"), "packages")]


def fetch_package(package_id: str) -> Package:
    return Package.from_api(unwrap(api.get(f"/package/{package_id}"), "package") or {})


def add_package(data: Dict[str, Any]) -> Any:
    return api.post("/package", json=data)


def update_package(package_id: str, data: Dict[str, Any]) -> Any:
    return api.put(f"/package/{package_id}", json=data)


def delete_package(package_id: str) -> None:
    api.delete(f"/package/{package_id}")
