"""Incremental construction of atomic transactions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

from .checks import check_well_formed
from .exceptions import (
    AlreadyFinalized,
    InvalidInputKind,
    SignatureMismatch,
    TransactionTooLarge,
    UnresolvedReference,
)
from .models import CommandSpec, Transaction
from .operations import MERGE, MINT, SPLIT, Operation
from .types import (
    InputDescriptor,
    InputHandle,
    OutputHandle,
    OwnedObjectInput,
    PureInput,
    Reference,
    SharedObjectInput,
    ValueKind,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ConfigBundle


logger = logging.getLogger(__name__)

PureValue = Union[int, bool, str]


class TransactionBuilder:
    """Single-use accumulator of inputs and commands.

    Handles are positional and come from two counters, one per namespace.
    A reference is valid only if it was issued by this builder before the
    command that uses it, which keeps the command list acyclic without a
    graph walk.
    """

    def __init__(
        self,
        *,
        max_inputs: Optional[int] = None,
        max_commands: Optional[int] = None,
    ) -> None:
        self._token = uuid4().hex
        self._inputs: List[InputDescriptor] = []
        self._commands: List[CommandSpec] = []
        self._consumed: Dict[str, int] = {}
        self._object_inputs: Dict[str, int] = {}
        self._finalized = False
        self.max_inputs = max_inputs
        self.max_commands = max_commands

    @classmethod
    def from_config(cls, config: "ConfigBundle") -> "TransactionBuilder":
        limits = config.executor.limits
        return cls(max_inputs=limits.max_inputs, max_commands=limits.max_commands)

    @property
    def input_count(self) -> int:
        return len(self._inputs)

    @property
    def command_count(self) -> int:
        return len(self._commands)

    # ------------------------------------------------------------------
    def declare_input(self, value: Union[InputDescriptor, PureValue]) -> InputHandle:
        self._ensure_open()
        descriptor = _coerce_input(value)
        if self.max_inputs is not None and len(self._inputs) >= self.max_inputs:
            raise TransactionTooLarge("inputs", len(self._inputs) + 1, self.max_inputs)
        if not isinstance(descriptor, PureInput):
            key = descriptor.object_id.lower()
            if key in self._object_inputs:
                raise InvalidInputKind(
                    f"object {descriptor.object_id} is already input {self._object_inputs[key]}"
                )
            self._object_inputs[key] = len(self._inputs)
        handle = InputHandle(len(self._inputs), owner=self._token)
        self._inputs.append(descriptor)
        logger.debug("declared %s as %s", handle.key(), descriptor)
        return handle

    def pure(self, value: PureValue) -> InputHandle:
        return self.declare_input(PureInput(value))

    def owned_object(self, object_id: str, version: int) -> InputHandle:
        return self.declare_input(OwnedObjectInput(object_id, version))

    def shared_object(
        self,
        object_id: str,
        initial_shared_version: Optional[int] = None,
        *,
        mutable: bool = True,
    ) -> InputHandle:
        return self.declare_input(
            SharedObjectInput(object_id, initial_shared_version, mutable)
        )

    # ------------------------------------------------------------------
    def declare_command(
        self, operation: Operation, args: Sequence[Reference]
    ) -> List[OutputHandle]:
        self._ensure_open()
        arguments = tuple(args)
        for arg in arguments:
            self._resolve(arg)
        self._check_signature(operation, arguments)

        position = len(self._commands)
        self._commands.append(CommandSpec(operation=operation, arguments=arguments))
        for param, arg in zip(operation.params, arguments):
            if param.consumed:
                self._consumed[arg.key()] = position

        outputs = [
            OutputHandle(position, idx, owner=self._token)
            for idx in range(len(operation.returns))
        ]
        logger.debug(
            "declared command %d %s(%s) -> %d output(s)",
            position,
            operation.display(),
            ", ".join(arg.key() for arg in arguments),
            len(outputs),
        )
        return outputs

    def mint(self, treasury_cap: Reference) -> OutputHandle:
        (coin,) = self.declare_command(MINT, [treasury_cap])
        return coin

    def merge(self, destination: Reference, source: Reference) -> None:
        self.declare_command(MERGE, [destination, source])

    def split(self, coin: Reference, amount: Union[Reference, int]) -> OutputHandle:
        if isinstance(amount, int) and not isinstance(amount, bool):
            if self._resolve(coin) is not ValueKind.OBJECT:
                raise SignatureMismatch(SPLIT.display(), "argument 0 must be object, got pure")
            amount = self.pure(amount)
        (part,) = self.declare_command(SPLIT, [coin, amount])
        return part

    def call(self, operation: Operation, *args: Reference) -> List[OutputHandle]:
        return self.declare_command(operation, list(args))

    # ------------------------------------------------------------------
    def finalize(self) -> Transaction:
        self._ensure_open()
        issues = check_well_formed(
            self._inputs, self._commands, max_commands=self.max_commands
        )
        self._finalized = True
        for issue in issues:
            logger.warning("%s: %s", issue.code, issue.message)
        return Transaction(
            inputs=tuple(self._inputs),
            commands=tuple(self._commands),
            issues=tuple(issues),
        )

    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._finalized:
            raise AlreadyFinalized("builder has already been finalized")

    def _resolve(self, arg: object) -> ValueKind:
        if isinstance(arg, InputHandle):
            if arg.index < 0 or arg.index >= len(self._inputs):
                raise UnresolvedReference(arg, "input has not been declared")
            kind = self._inputs[arg.index].kind
        elif isinstance(arg, OutputHandle):
            if arg.command < 0 or arg.command >= len(self._commands):
                raise UnresolvedReference(arg, "command has not been declared")
            returns = self._commands[arg.command].operation.returns
            if arg.index < 0 or arg.index >= len(returns):
                raise UnresolvedReference(
                    arg, f"command {arg.command} produces {len(returns)} result(s)"
                )
            kind = returns[arg.index]
        else:
            raise UnresolvedReference(arg, "not a transaction handle")

        if arg.owner is not None and arg.owner != self._token:
            raise UnresolvedReference(arg, "handle belongs to another builder")
        consumer = self._consumed.get(arg.key())
        if consumer is not None:
            raise UnresolvedReference(arg, f"value was consumed by command {consumer}")
        return kind

    def _check_signature(
        self, operation: Operation, arguments: Tuple[Reference, ...]
    ) -> None:
        if len(arguments) != operation.arity:
            raise SignatureMismatch(
                operation.display(),
                f"expected {operation.arity} argument(s), got {len(arguments)}",
            )
        seen: Dict[str, int] = {}
        for position, (param, arg) in enumerate(zip(operation.params, arguments)):
            kind = self._resolve(arg)
            if kind is not param.kind:
                raise SignatureMismatch(
                    operation.display(),
                    f"argument {position} must be {param.kind.value}, got {kind.value}",
                )
            if kind is ValueKind.OBJECT:
                if arg.key() in seen:
                    raise SignatureMismatch(
                        operation.display(),
                        f"argument {position} repeats object argument {seen[arg.key()]}",
                    )
                seen[arg.key()] = position


def _coerce_input(value: object) -> InputDescriptor:
    if isinstance(value, (PureInput, OwnedObjectInput, SharedObjectInput)):
        return value
    if isinstance(value, (bool, int, str)):
        return PureInput(value)
    raise InvalidInputKind(f"cannot declare {type(value).__name__} as a transaction input")
