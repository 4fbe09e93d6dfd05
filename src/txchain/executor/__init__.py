"""Executors that apply finalized transactions atomically."""

from .base import Effects, ExecutionResult, Executor, Rejection, RejectionReason
from .handlers import CommandAbort, CommandContext, flag_handler
from .local import LocalExecutor
from .objects import COIN, COUNTER, TREASURY_CAP, StoredObject
from .store import Ledger, ObjectStore

__all__ = [
    "Executor",
    "ExecutionResult",
    "Effects",
    "Rejection",
    "RejectionReason",
    "LocalExecutor",
    "CommandAbort",
    "CommandContext",
    "flag_handler",
    "StoredObject",
    "COIN",
    "COUNTER",
    "TREASURY_CAP",
    "ObjectStore",
    "Ledger",
]
