"""Serialization helpers for finalized transactions."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .checks import check_well_formed
from .exceptions import BuildError, InvalidInputKind, TransactionFormatError
from .models import CommandSpec, Transaction
from .operations import Operation, Param
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


FORMAT_VERSION = 1


def serialize_transaction(transaction: Transaction) -> Dict[str, Any]:
    return {
        "format": FORMAT_VERSION,
        "inputs": [serialize_input(item) for item in transaction.inputs],
        "commands": [_serialize_command(cmd) for cmd in transaction.commands],
    }


def deserialize_transaction(data: Dict[str, Any]) -> Transaction:
    if not isinstance(data, dict):
        raise TransactionFormatError("transaction payload must be an object")
    if data.get("format") != FORMAT_VERSION:
        raise TransactionFormatError(f"unsupported format {data.get('format')!r}")
    try:
        inputs = tuple(deserialize_input(item) for item in data["inputs"])
        commands = tuple(_deserialize_command(item) for item in data["commands"])
    except (KeyError, TypeError, ValueError, InvalidInputKind) as exc:
        raise TransactionFormatError(f"malformed transaction: {exc}") from exc
    try:
        issues = check_well_formed(inputs, commands)
    except BuildError as exc:
        raise TransactionFormatError(f"malformed transaction: {exc}") from exc
    return Transaction(inputs=inputs, commands=commands, issues=tuple(issues))


def dumps(transaction: Transaction, *, indent: Optional[int] = None) -> str:
    """Render *transaction* as deterministic JSON."""

    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        serialize_transaction(transaction),
        sort_keys=True,
        indent=indent,
        separators=separators,
    )


def loads(text: str) -> Transaction:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TransactionFormatError(f"invalid JSON ({exc})") from exc
    return deserialize_transaction(data)


def serialize_input(item: InputDescriptor) -> Dict[str, Any]:
    if isinstance(item, PureInput):
        return {"kind": "pure", "value": item.value}
    if isinstance(item, OwnedObjectInput):
        return {"kind": "owned", "object_id": item.object_id, "version": item.version}
    if isinstance(item, SharedObjectInput):
        return {
            "kind": "shared",
            "object_id": item.object_id,
            "initial_shared_version": item.initial_shared_version,
            "mutable": item.mutable,
        }
    raise TypeError(f"Unsupported input type: {type(item)!r}")


def deserialize_input(data: Dict[str, Any]) -> InputDescriptor:
    _expect_object(data, "input")
    kind = data.get("kind")
    if kind == "pure":
        return PureInput(data["value"])
    if kind == "owned":
        return OwnedObjectInput(object_id=data["object_id"], version=data["version"])
    if kind == "shared":
        return SharedObjectInput(
            object_id=data["object_id"],
            initial_shared_version=data.get("initial_shared_version"),
            mutable=data.get("mutable", True),
        )
    raise ValueError(f"Unknown input kind: {kind}")


def serialize_operation(operation: Operation) -> Dict[str, Any]:
    return {
        "name": operation.name,
        "target": operation.target,
        "params": [
            {"kind": p.kind.value, "mutable": p.mutable, "consumed": p.consumed}
            for p in operation.params
        ],
        "returns": [kind.value for kind in operation.returns],
    }


def deserialize_operation(data: Dict[str, Any]) -> Operation:
    _expect_object(data, "operation")
    params = tuple(_deserialize_param(p) for p in data.get("params", []))
    returns = tuple(ValueKind(kind) for kind in data.get("returns", []))
    return Operation(
        name=str(data["name"]),
        params=params,
        returns=returns,
        target=data.get("target"),
    )


def _deserialize_param(data: Dict[str, Any]) -> Param:
    _expect_object(data, "param")
    return Param(
        kind=ValueKind(data["kind"]),
        mutable=bool(data.get("mutable", False)),
        consumed=bool(data.get("consumed", False)),
    )


def _serialize_command(command: CommandSpec) -> Dict[str, Any]:
    return {
        "operation": serialize_operation(command.operation),
        "arguments": [_serialize_reference(arg) for arg in command.arguments],
    }


def _deserialize_command(data: Dict[str, Any]) -> CommandSpec:
    _expect_object(data, "command")
    arguments: List[Reference] = [
        _deserialize_reference(item) for item in data.get("arguments", [])
    ]
    return CommandSpec(
        operation=deserialize_operation(data["operation"]),
        arguments=tuple(arguments),
    )


def _serialize_reference(ref: Reference) -> Dict[str, Any]:
    if isinstance(ref, InputHandle):
        return {"input": ref.index}
    return {"result": [ref.command, ref.index]}


def _deserialize_reference(data: Dict[str, Any]) -> Reference:
    _expect_object(data, "reference")
    if "input" in data:
        return InputHandle(int(data["input"]))
    if "result" in data:
        command, index = data["result"]
        return OutputHandle(int(command), int(index))
    raise ValueError(f"Unknown reference: {data!r}")


def _expect_object(data: Any, what: str) -> None:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
