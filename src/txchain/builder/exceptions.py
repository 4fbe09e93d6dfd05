"""Transaction construction and wire-format errors."""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import TxchainError


class BuildError(TxchainError):
    """Base class for local, synchronous construction errors."""


class InvalidInputKind(BuildError):
    """Raised when an input descriptor fails shape validation."""


@dataclass
class UnresolvedReference(BuildError):
    """Raised when a command argument does not point at an earlier handle."""

    reference: object
    detail: str

    def __post_init__(self) -> None:
        super().__init__(f"unresolved reference {self.reference!r}: {self.detail}")


@dataclass
class SignatureMismatch(BuildError):
    """Raised when arguments do not fit the operation's declared signature."""

    operation: str
    detail: str

    def __post_init__(self) -> None:
        super().__init__(f"{self.operation}: {self.detail}")


class AlreadyFinalized(BuildError):
    """Raised when a builder is used after ``finalize``."""


@dataclass
class TransactionTooLarge(BuildError):
    what: str
    count: int
    limit: int

    def __post_init__(self) -> None:
        super().__init__(f"too many {self.what}: {self.count} > {self.limit}")


class TransactionFormatError(TxchainError):
    """Raised when a serialized transaction cannot be parsed."""
