"""Exceptions raised by the script parser and compiler."""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import TxchainError


@dataclass
class ScriptParseError(TxchainError):
    """Raised when a script line fails to parse."""

    line_no: int
    line: str
    detail: str

    def __post_init__(self) -> None:
        message = f"line {self.line_no}: {self.detail.strip()}"
        super().__init__(message)


class ScriptSemanticError(TxchainError):
    """Raised when parsed statements cannot be applied to a builder."""

    def __init__(self, line_no: int, message: str):
        self.line_no = line_no
        super().__init__(f"line {line_no}: {message}")
