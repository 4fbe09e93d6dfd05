"""Transaction builder: input registry, command registry and finalizer."""

from .builder import TransactionBuilder
from .checks import BuildIssue
from .digest import compute_tx_digest
from .exceptions import (
    AlreadyFinalized,
    BuildError,
    InvalidInputKind,
    SignatureMismatch,
    TransactionFormatError,
    TransactionTooLarge,
    UnresolvedReference,
)
from .models import CommandSpec, Transaction
from .operations import MERGE, MINT, SPLIT, Operation, OperationCatalog, Param
from .serialization import deserialize_transaction, dumps, loads, serialize_transaction
from .types import (
    InputHandle,
    OutputHandle,
    OwnedObjectInput,
    PureInput,
    Reference,
    SharedObjectInput,
    ValueKind,
)

__all__ = [
    "TransactionBuilder",
    "Transaction",
    "CommandSpec",
    "BuildIssue",
    "Operation",
    "OperationCatalog",
    "Param",
    "MINT",
    "MERGE",
    "SPLIT",
    "ValueKind",
    "PureInput",
    "OwnedObjectInput",
    "SharedObjectInput",
    "InputHandle",
    "OutputHandle",
    "Reference",
    "BuildError",
    "InvalidInputKind",
    "UnresolvedReference",
    "SignatureMismatch",
    "AlreadyFinalized",
    "TransactionTooLarge",
    "TransactionFormatError",
    "serialize_transaction",
    "deserialize_transaction",
    "dumps",
    "loads",
    "compute_tx_digest",
]
