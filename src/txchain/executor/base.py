"""Submission contract between the builder and an executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from ..builder.models import Transaction
from ..builder.types import OutputHandle
from .objects import StoredObject


class RejectionReason(Enum):
    INSUFFICIENT_BALANCE = "insufficient_balance"
    OBJECT_NOT_FOUND = "object_not_found"
    VERSION_MISMATCH = "version_mismatch"
    INVALID_SHARED_OBJECT = "invalid_shared_object"
    TYPE_MISMATCH = "type_mismatch"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN_OPERATION = "unknown_operation"
    LIMIT_EXCEEDED = "limit_exceeded"
    COMMAND_FAILED = "command_failed"


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str
    command_index: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "reason": self.reason.value,
            "message": self.message,
            "command_index": self.command_index,
        }


@dataclass
class Effects:
    created: List[str] = field(default_factory=list)
    mutated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "created": list(self.created),
            "mutated": list(self.mutated),
            "deleted": list(self.deleted),
        }


@dataclass
class ExecutionResult:
    """Outcome of one submission: full commit or full rejection."""

    digest: str
    rejection: Optional[Rejection] = None
    outputs: Dict[OutputHandle, Any] = field(default_factory=dict)
    effects: Effects = field(default_factory=Effects)
    seq: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def as_dict(self) -> dict:
        return {
            "digest": self.digest,
            "ok": self.ok,
            "seq": self.seq,
            "rejection": self.rejection.as_dict() if self.rejection else None,
            "effects": self.effects.as_dict(),
            "outputs": {
                handle.key(): _render_output(value) for handle, value in self.outputs.items()
            },
        }


def _render_output(value: Any) -> Any:
    if isinstance(value, StoredObject):
        return value.as_dict()
    return value


class Executor(Protocol):
    def submit(self, transaction: Transaction, *, sender: str) -> ExecutionResult:
        ...
