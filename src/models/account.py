"""
Account data model
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Account:
    """A viewer account slot shown when a run starts"""

    email: str = ""
    enabled: bool = False

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.email)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            email=str(data.get("email") or "").strip(),
            enabled=bool(data.get("enabled", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "enabled": self.enabled}
