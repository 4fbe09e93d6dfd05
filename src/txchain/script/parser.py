"""Transaction script parser based on Lark."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from lark import Lark, Transformer, UnexpectedInput
from lark.exceptions import VisitError

from ..builder.exceptions import InvalidInputKind
from ..builder.types import OwnedObjectInput, PureInput, SharedObjectInput
from .exceptions import ScriptParseError
from .types import (
    CallStatement,
    InputStatement,
    MergeStatement,
    MintStatement,
    SplitStatement,
    Statement,
)


GRAMMAR = r"""
    ?statement: input_stmt
              | merge_stmt
              | split_stmt
              | mint_stmt
              | call_stmt

    input_stmt: "INPUT" NAME "=" input_value
    input_value: "PURE" literal -> pure_value
               | "OBJECT" OBJECT_ID "@" INT -> owned_value
               | "SHARED" OBJECT_ID shared_version? mutability? -> shared_value
    shared_version: "@" INT
    mutability: "MUTABLE" -> mutable
              | "IMMUTABLE" -> immutable

    literal: INT -> int_literal
           | "true" -> true_literal
           | "false" -> false_literal
           | QUOTED_STRING -> string_literal

    merge_stmt: "MERGE" NAME "INTO" NAME
    split_stmt: "SPLIT" NAME operand "AS" NAME
    mint_stmt: "MINT" NAME "AS" NAME
    call_stmt: "CALL" TARGET "(" operand_list? ")" bindings?

    operand_list: operand ("," operand)*
    operand: NAME -> name_operand
           | INT -> int_operand
    bindings: "AS" NAME ("," NAME)*

    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    OBJECT_ID: /0x[0-9a-fA-F]+/
    TARGET.2: /0x[0-9a-fA-F]+::[A-Za-z_][A-Za-z0-9_]*::[A-Za-z_][A-Za-z0-9_]*/

    %import common.INT
    %import common.ESCAPED_STRING -> QUOTED_STRING
    %import common.WS_INLINE
    %ignore WS_INLINE
"""


class _StatementTransformer(Transformer):
    def __init__(self) -> None:
        super().__init__(visit_tokens=True)

    def int_literal(self, items: list[Any]) -> int:
        return int(items[0])

    def true_literal(self, _: list[Any]) -> bool:
        return True

    def false_literal(self, _: list[Any]) -> bool:
        return False

    def string_literal(self, items: list[Any]) -> str:
        raw = str(items[0])
        return raw[1:-1]

    def pure_value(self, items: list[Any]) -> PureInput:
        return PureInput(items[0])

    def owned_value(self, items: list[Any]) -> OwnedObjectInput:
        return OwnedObjectInput(object_id=str(items[0]), version=int(items[1]))

    def shared_version(self, items: list[Any]) -> Tuple[str, int]:
        return "version", int(items[0])

    def mutable(self, _: list[Any]) -> Tuple[str, bool]:
        return "mutable", True

    def immutable(self, _: list[Any]) -> Tuple[str, bool]:
        return "mutable", False

    def shared_value(self, items: list[Any]) -> SharedObjectInput:
        object_id = str(items[0])
        initial_shared_version: Optional[int] = None
        mutable = True
        for key, value in items[1:]:
            if key == "version":
                initial_shared_version = value
            else:
                mutable = value
        return SharedObjectInput(
            object_id=object_id,
            initial_shared_version=initial_shared_version,
            mutable=mutable,
        )

    def name_operand(self, items: list[Any]) -> str:
        return str(items[0])

    def int_operand(self, items: list[Any]) -> int:
        return int(items[0])

    def operand_list(self, items: list[Any]) -> list[Any]:
        return list(items)

    def bindings(self, items: list[Any]) -> Tuple[str, ...]:
        return tuple(str(tok) for tok in items)

    def input_stmt(self, items: list[Any]) -> Tuple[str, Dict[str, Any]]:
        return "input", {"name": str(items[0]), "descriptor": items[1]}

    def merge_stmt(self, items: list[Any]) -> Tuple[str, Dict[str, Any]]:
        return "merge", {"source": str(items[0]), "destination": str(items[1])}

    def split_stmt(self, items: list[Any]) -> Tuple[str, Dict[str, Any]]:
        return (
            "split",
            {"coin": str(items[0]), "amount": items[1], "binding": str(items[2])},
        )

    def mint_stmt(self, items: list[Any]) -> Tuple[str, Dict[str, Any]]:
        return "mint", {"cap": str(items[0]), "binding": str(items[1])}

    def call_stmt(self, items: list[Any]) -> Tuple[str, Dict[str, Any]]:
        target = str(items[0])
        arguments: Tuple[Any, ...] = ()
        bindings: Tuple[str, ...] = ()
        for item in items[1:]:
            if isinstance(item, list):
                arguments = tuple(item)
            elif isinstance(item, tuple):
                bindings = item
        return "call", {"target": target, "arguments": arguments, "bindings": bindings}


class ScriptParser:
    """Parse transaction script text into statements."""

    def __init__(self) -> None:
        self._parser = Lark(GRAMMAR, start="statement", parser="lalr")
        self._transformer = _StatementTransformer()

    def parse(self, text: str) -> list[Statement]:
        statements: list[Statement] = []
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            stripped = raw_line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            try:
                tree = self._parser.parse(stripped)
            except UnexpectedInput as exc:
                raise ScriptParseError(line_no=line_no, line=raw_line, detail=str(exc)) from exc
            try:
                kind, payload = self._transformer.transform(tree)
            except VisitError as exc:
                if isinstance(exc.orig_exc, (InvalidInputKind, ValueError)):
                    raise ScriptParseError(
                        line_no=line_no, line=raw_line, detail=str(exc.orig_exc)
                    ) from exc.orig_exc
                raise
            statements.append(self._instantiate(kind, payload, line_no))
        return statements

    def _instantiate(self, kind: str, payload: Dict[str, Any], line_no: int) -> Statement:
        if kind == "input":
            return InputStatement(line_no=line_no, **payload)
        if kind == "merge":
            return MergeStatement(line_no=line_no, **payload)
        if kind == "split":
            return SplitStatement(line_no=line_no, **payload)
        if kind == "mint":
            return MintStatement(line_no=line_no, **payload)
        if kind == "call":
            return CallStatement(line_no=line_no, **payload)
        raise ValueError(f"Unknown statement kind: {kind}")
