"""Call shapes of the primitive operations a command may invoke."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Tuple

from .types import ValueKind

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ConfigBundle


@dataclass(frozen=True)
class Param:
    kind: ValueKind
    mutable: bool = False
    consumed: bool = False


@dataclass(frozen=True)
class Operation:
    """Named primitive with a fixed argument and result shape."""

    name: str
    params: Tuple[Param, ...]
    returns: Tuple[ValueKind, ...] = ()
    target: Optional[str] = None

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def is_call(self) -> bool:
        return self.target is not None

    def display(self) -> str:
        return self.target or self.name


MINT = Operation(
    name="mint",
    params=(Param(ValueKind.OBJECT, mutable=True),),
    returns=(ValueKind.OBJECT,),
)

MERGE = Operation(
    name="merge",
    params=(
        Param(ValueKind.OBJECT, mutable=True),
        Param(ValueKind.OBJECT, consumed=True),
    ),
)

SPLIT = Operation(
    name="split",
    params=(Param(ValueKind.OBJECT, mutable=True), Param(ValueKind.PURE)),
    returns=(ValueKind.OBJECT,),
)

PRIMITIVES: Dict[str, Operation] = {op.name: op for op in (MINT, MERGE, SPLIT)}


class OperationCatalog:
    """Lookup of primitives and configured gated calls."""

    def __init__(self, calls: Tuple[Operation, ...] = ()) -> None:
        self._by_target: Dict[str, Operation] = {}
        self._by_name: Dict[str, Operation] = dict(PRIMITIVES)
        for operation in calls:
            self.register(operation)

    @classmethod
    def from_config(cls, config: "ConfigBundle") -> "OperationCatalog":
        return cls(tuple(call.to_operation() for call in config.operations.calls))

    def register(self, operation: Operation) -> None:
        if operation.target is None:
            raise ValueError(f"gated call {operation.name} needs a target")
        if operation.target in self._by_target or operation.name in self._by_name:
            raise ValueError(f"operation {operation.display()} already registered")
        self._by_target[operation.target] = operation
        self._by_name[operation.name] = operation

    def get(self, name: str) -> Operation:
        return self._by_name[name]

    def for_target(self, target: str) -> Operation:
        return self._by_target[target]

    def __iter__(self) -> Iterator[Operation]:
        return iter(self._by_name.values())
