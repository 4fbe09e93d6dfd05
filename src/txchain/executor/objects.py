"""Objects held by the reference executor's store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


COIN = "coin"
TREASURY_CAP = "treasury_cap"
COUNTER = "counter"


@dataclass
class StoredObject:
    object_id: str
    type: str
    version: int
    owner: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    initial_shared_version: Optional[int] = None

    @property
    def is_shared(self) -> bool:
        return self.owner is None

    @property
    def balance(self) -> int:
        return int(self.fields.get("balance", 0))

    def snapshot(self) -> "StoredObject":
        return copy.deepcopy(self)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "object_id": self.object_id,
            "type": self.type,
            "version": self.version,
            "owner": self.owner,
            "initial_shared_version": self.initial_shared_version,
            "fields": dict(self.fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredObject":
        return cls(
            object_id=str(data["object_id"]),
            type=str(data["type"]),
            version=int(data["version"]),
            owner=data.get("owner"),
            fields=dict(data.get("fields", {})),
            initial_shared_version=data.get("initial_shared_version"),
        )
