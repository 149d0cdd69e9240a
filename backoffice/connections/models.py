from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from backoffice.formatting import record_id


@dataclass
class ConnectionType:
    id: str
    name: str = ""
    description: str = ""
    created_at: Any = None
    updated_at: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "ConnectionType":
        return cls(
            id=record_id(raw),
            name=raw.get("name") or "",
            description=raw.get("description") or "",
            created_at=raw.get("createdAt"),
            updated_at=raw.get("updatedAt"),
            raw=dict(raw),
        )

    def to_form(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description}
