"""Apply parsed script statements to a transaction builder."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..builder import BuildError, OperationCatalog, Transaction, TransactionBuilder
from ..builder.types import Reference, ValueKind
from .exceptions import ScriptSemanticError
from .parser import ScriptParser
from .types import (
    CallStatement,
    InputStatement,
    MergeStatement,
    MintStatement,
    Operand,
    SplitStatement,
    Statement,
)


logger = logging.getLogger(__name__)


class ScriptCompiler:
    """Bind script names to builder handles while replaying statements."""

    def __init__(self, builder: TransactionBuilder, catalog: OperationCatalog) -> None:
        self.builder = builder
        self.catalog = catalog
        self.names: Dict[str, Reference] = {}

    def apply_many(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            self.apply(statement)

    def apply(self, statement: Statement) -> None:
        try:
            self._apply(statement)
        except BuildError as exc:
            raise ScriptSemanticError(statement.line_no, str(exc)) from exc

    # ------------------------------------------------------------------
    def _apply(self, statement: Statement) -> None:
        if isinstance(statement, InputStatement):
            self._bind(statement, statement.name, self.builder.declare_input(statement.descriptor))
        elif isinstance(statement, MergeStatement):
            destination = self._lookup(statement, statement.destination)
            source = self._lookup(statement, statement.source)
            self.builder.merge(destination, source)
        elif isinstance(statement, SplitStatement):
            self._ensure_unbound(statement, statement.binding)
            coin = self._lookup(statement, statement.coin)
            amount = self._operand(statement, statement.amount, ValueKind.PURE)
            self._bind(statement, statement.binding, self.builder.split(coin, amount))
        elif isinstance(statement, MintStatement):
            self._ensure_unbound(statement, statement.binding)
            cap = self._lookup(statement, statement.cap)
            self._bind(statement, statement.binding, self.builder.mint(cap))
        elif isinstance(statement, CallStatement):
            self._apply_call(statement)
        else:  # pragma: no cover
            raise TypeError(f"Unsupported statement type: {type(statement)!r}")

    def _apply_call(self, statement: CallStatement) -> None:
        try:
            operation = self.catalog.for_target(statement.target)
        except KeyError:
            raise ScriptSemanticError(
                statement.line_no, f"unknown call target {statement.target}"
            ) from None
        if statement.bindings and len(statement.bindings) != len(operation.returns):
            raise ScriptSemanticError(
                statement.line_no,
                f"{operation.name} returns {len(operation.returns)} value(s), "
                f"{len(statement.bindings)} name(s) given",
            )
        for name in statement.bindings:
            self._ensure_unbound(statement, name)

        args: List[Reference] = []
        for position, operand in enumerate(statement.arguments):
            kind: Optional[ValueKind] = None
            if position < operation.arity:
                kind = operation.params[position].kind
            args.append(self._operand(statement, operand, kind))
        outputs = self.builder.call(operation, *args)
        for name, handle in zip(statement.bindings, outputs):
            self._bind(statement, name, handle)

    def _operand(
        self, statement: Statement, operand: Operand, kind: Optional[ValueKind]
    ) -> Reference:
        if isinstance(operand, int):
            if kind is ValueKind.OBJECT:
                raise ScriptSemanticError(
                    statement.line_no, f"literal {operand} used where an object is expected"
                )
            return self.builder.pure(operand)
        return self._lookup(statement, operand)

    def _lookup(self, statement: Statement, name: str) -> Reference:
        try:
            return self.names[name]
        except KeyError:
            raise ScriptSemanticError(statement.line_no, f"unknown name {name}") from None

    def _ensure_unbound(self, statement: Statement, name: str) -> None:
        if name in self.names:
            raise ScriptSemanticError(statement.line_no, f"name {name} is already bound")

    def _bind(self, statement: Statement, name: str, handle: Reference) -> None:
        self._ensure_unbound(statement, name)
        self.names[name] = handle
        logger.debug("line %d: bound %s to %s", statement.line_no, name, handle.key())


def build_transaction(
    text: str,
    catalog: Optional[OperationCatalog] = None,
    *,
    builder: Optional[TransactionBuilder] = None,
) -> Transaction:
    """Parse *text*, replay it on a builder and finalize the result."""

    statements = ScriptParser().parse(text)
    compiler = ScriptCompiler(builder or TransactionBuilder(), catalog or OperationCatalog())
    compiler.apply_many(statements)
    try:
        return compiler.builder.finalize()
    except BuildError as exc:
        last_line = statements[-1].line_no if statements else 0
        raise ScriptSemanticError(last_line, str(exc)) from exc
