"""Typed representations of script statements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from ..builder.types import InputDescriptor


Operand = Union[str, int]


@dataclass(frozen=True)
class Statement:
    line_no: int


@dataclass(frozen=True)
class InputStatement(Statement):
    name: str
    descriptor: InputDescriptor


@dataclass(frozen=True)
class MergeStatement(Statement):
    source: str
    destination: str


@dataclass(frozen=True)
class SplitStatement(Statement):
    coin: str
    amount: Operand
    binding: str


@dataclass(frozen=True)
class MintStatement(Statement):
    cap: str
    binding: str


@dataclass(frozen=True)
class CallStatement(Statement):
    target: str
    arguments: Tuple[Operand, ...] = ()
    bindings: Tuple[str, ...] = ()
