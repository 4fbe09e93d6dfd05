"""Public script interface."""

from .compiler import ScriptCompiler, build_transaction
from .exceptions import ScriptParseError, ScriptSemanticError
from .parser import ScriptParser
from .types import (
    CallStatement,
    InputStatement,
    MergeStatement,
    MintStatement,
    SplitStatement,
    Statement,
)

__all__ = [
    "ScriptParser",
    "ScriptCompiler",
    "build_transaction",
    "Statement",
    "InputStatement",
    "MergeStatement",
    "SplitStatement",
    "MintStatement",
    "CallStatement",
    "ScriptParseError",
    "ScriptSemanticError",
]
