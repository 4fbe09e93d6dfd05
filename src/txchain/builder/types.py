"""Typed representations of transaction inputs and handles."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .exceptions import InvalidInputKind


U64_MAX = 2**64 - 1
OBJECT_ID_PATTERN = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


class ValueKind(Enum):
    PURE = "pure"
    OBJECT = "object"


@dataclass(frozen=True)
class PureInput:
    value: Union[int, bool, str]

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or isinstance(value, str):
            return
        if isinstance(value, int):
            if value < 0 or value > U64_MAX:
                raise InvalidInputKind(f"pure integer {value} is outside the u64 range")
            return
        raise InvalidInputKind(f"unsupported pure value {value!r}")

    @property
    def kind(self) -> ValueKind:
        return ValueKind.PURE


@dataclass(frozen=True)
class OwnedObjectInput:
    object_id: str
    version: int

    def __post_init__(self) -> None:
        _check_object_id(self.object_id)
        _check_version(self.version, "version")

    @property
    def kind(self) -> ValueKind:
        return ValueKind.OBJECT


@dataclass(frozen=True)
class SharedObjectInput:
    object_id: str
    initial_shared_version: Optional[int] = None
    mutable: bool = True

    def __post_init__(self) -> None:
        _check_object_id(self.object_id)
        if self.initial_shared_version is not None:
            _check_version(self.initial_shared_version, "initial_shared_version")
        if not isinstance(self.mutable, bool):
            raise InvalidInputKind("shared object mutability must be a bool")

    @property
    def kind(self) -> ValueKind:
        return ValueKind.OBJECT


InputDescriptor = Union[PureInput, OwnedObjectInput, SharedObjectInput]


@dataclass(frozen=True)
class InputHandle:
    index: int
    owner: Optional[str] = field(default=None, compare=False, repr=False)

    def key(self) -> str:
        return f"input:{self.index}"


@dataclass(frozen=True)
class OutputHandle:
    command: int
    index: int = 0
    owner: Optional[str] = field(default=None, compare=False, repr=False)

    def key(self) -> str:
        return f"result:{self.command}.{self.index}"


Reference = Union[InputHandle, OutputHandle]


def _check_object_id(object_id: object) -> None:
    if not isinstance(object_id, str) or not OBJECT_ID_PATTERN.match(object_id):
        raise InvalidInputKind(f"object id {object_id!r} is not 0x-prefixed hex")


def _check_version(value: object, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputKind(f"{name} must be a non-negative integer, got {value!r}")
