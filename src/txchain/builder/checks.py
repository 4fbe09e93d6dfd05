"""Global well-formedness checks run at finalize time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Sequence, Set

from .exceptions import InvalidInputKind, TransactionTooLarge, UnresolvedReference
from .types import InputHandle, OutputHandle, PureInput

if TYPE_CHECKING:  # pragma: no cover
    from .models import CommandSpec
    from .types import InputDescriptor


IssueSeverity = Literal["error", "warning"]


@dataclass(frozen=True)
class BuildIssue:
    code: str
    severity: IssueSeverity
    message: str
    location: str

    def is_error(self) -> bool:
        return self.severity == "error"


def check_well_formed(
    inputs: Sequence["InputDescriptor"],
    commands: Sequence["CommandSpec"],
    *,
    max_commands: Optional[int] = None,
) -> List[BuildIssue]:
    """Re-verify the reference graph and return warning-level observations.

    Raises the matching ``BuildError`` for anything that cannot be submitted.
    """

    if max_commands is not None and len(commands) > max_commands:
        raise TransactionTooLarge("commands", len(commands), max_commands)

    declared: Dict[str, int] = {}
    for index, item in enumerate(inputs):
        if isinstance(item, PureInput):
            continue
        key = item.object_id.lower()
        if key in declared:
            raise InvalidInputKind(
                f"input {index} repeats object {item.object_id} from input {declared[key]}"
            )
        declared[key] = index

    referenced: Set[int] = set()
    for position, command in enumerate(commands):
        for arg in command.arguments:
            if isinstance(arg, InputHandle):
                if arg.index < 0 or arg.index >= len(inputs):
                    raise UnresolvedReference(arg, f"command {position} points outside the inputs")
                referenced.add(arg.index)
            elif isinstance(arg, OutputHandle):
                if arg.command < 0:
                    raise UnresolvedReference(
                        arg, f"command {position} has a negative result index"
                    )
                if arg.command >= position:
                    raise UnresolvedReference(
                        arg, f"command {position} uses a result of a later command"
                    )
                producer = commands[arg.command]
                if arg.index < 0 or arg.index >= len(producer.operation.returns):
                    raise UnresolvedReference(
                        arg, f"command {arg.command} has no result {arg.index}"
                    )
            else:
                raise UnresolvedReference(arg, f"command {position} has a non-handle argument")

    issues: List[BuildIssue] = []
    for index in range(len(inputs)):
        if index not in referenced:
            issues.append(
                BuildIssue(
                    code="W_INPUT_UNREFERENCED",
                    severity="warning",
                    message=f"input {index} is not used by any command",
                    location=f"input:{index}",
                )
            )
    return issues
