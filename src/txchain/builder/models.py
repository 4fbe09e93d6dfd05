"""Data models for finalized transactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .checks import BuildIssue
from .operations import Operation
from .types import InputDescriptor, InputHandle, OutputHandle, Reference


@dataclass(frozen=True)
class CommandSpec:
    operation: Operation
    arguments: Tuple[Reference, ...]

    def outputs(self, position: int) -> List[OutputHandle]:
        return [OutputHandle(position, idx) for idx in range(len(self.operation.returns))]


@dataclass(frozen=True)
class Transaction:
    """Immutable, ordered pair of inputs and commands."""

    inputs: Tuple[InputDescriptor, ...]
    commands: Tuple[CommandSpec, ...]
    issues: Tuple[BuildIssue, ...] = field(default=(), compare=False, repr=False)

    def input_at(self, handle: InputHandle) -> InputDescriptor:
        return self.inputs[handle.index]

    def iter_commands(self) -> Iterator[Tuple[int, CommandSpec]]:
        return iter(enumerate(self.commands))

    @property
    def output_handles(self) -> List[OutputHandle]:
        handles: List[OutputHandle] = []
        for position, command in self.iter_commands():
            handles.extend(command.outputs(position))
        return handles
