"""In-process reference executor with all-or-nothing commits."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple

from ..builder.checks import check_well_formed
from ..builder.digest import compute_tx_digest
from ..builder.exceptions import BuildError
from ..builder.models import CommandSpec, Transaction
from ..builder.operations import Operation
from ..builder.serialization import serialize_transaction
from ..builder.types import (
    InputHandle,
    OutputHandle,
    OwnedObjectInput,
    PureInput,
    SharedObjectInput,
    ValueKind,
)
from ..exceptions import ConfigError
from .base import Effects, ExecutionResult, Rejection, RejectionReason
from .handlers import (
    CALL_HANDLER_FACTORIES,
    PRIMITIVE_HANDLERS,
    CommandAbort,
    CommandContext,
    Handler,
)
from .objects import StoredObject
from .store import ObjectStore

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ConfigBundle


logger = logging.getLogger(__name__)


class LocalExecutor:
    """Apply finalized transactions to an :class:`ObjectStore`.

    Commands run in declaration order against a deep copy of the store. The
    copy replaces the store only after the last command succeeds, so a
    rejected transaction leaves no trace.

    ``fail_at`` makes the command at that index fail unconditionally, which
    lets tests probe atomicity.
    """

    def __init__(
        self,
        store: Optional[ObjectStore] = None,
        *,
        max_inputs: Optional[int] = None,
        max_commands: Optional[int] = None,
        fail_at: Optional[int] = None,
    ) -> None:
        self.store = store if store is not None else ObjectStore()
        self.max_inputs = max_inputs
        self.max_commands = max_commands
        self.fail_at = fail_at
        self._calls: Dict[str, Handler] = {}

    @classmethod
    def from_config(
        cls, config: "ConfigBundle", store: Optional[ObjectStore] = None
    ) -> "LocalExecutor":
        limits = config.executor.limits
        executor = cls(
            store, max_inputs=limits.max_inputs, max_commands=limits.max_commands
        )
        for call in config.operations.calls:
            if call.handler is None:
                continue
            factory = CALL_HANDLER_FACTORIES.get(call.handler)
            if factory is None:
                raise ConfigError(
                    Path("operations.toml"), f"{call.name}: unknown handler {call.handler}"
                )
            executor.register_call(call.target, factory(**call.handler_options))
        return executor

    def register_call(self, target: str, handler: Handler) -> None:
        self._calls[target] = handler

    # ------------------------------------------------------------------
    def submit(self, transaction: Transaction, *, sender: str) -> ExecutionResult:
        digest = compute_tx_digest(transaction)
        try:
            working, effects, outputs = self._run(transaction, sender, digest)
        except CommandAbort as exc:
            rejection = Rejection(
                reason=exc.reason, message=exc.message, command_index=exc.command_index
            )
            logger.warning(
                "transaction %s rejected at command %s: %s (%s)",
                digest[:12],
                exc.command_index,
                exc.reason.value,
                exc.message,
            )
            return ExecutionResult(digest=digest, rejection=rejection)

        record = {
            "digest": digest,
            "sender": sender,
            "effects": effects.as_dict(),
            "transaction": serialize_transaction(transaction),
        }
        seq = self.store.commit(working, record)
        logger.info(
            "transaction %s committed as seq %d (%d created, %d mutated, %d deleted)",
            digest[:12],
            seq,
            len(effects.created),
            len(effects.mutated),
            len(effects.deleted),
        )
        return ExecutionResult(digest=digest, outputs=outputs, effects=effects, seq=seq)

    # ------------------------------------------------------------------
    def _run(
        self, transaction: Transaction, sender: str, digest: str
    ) -> Tuple[Dict[str, StoredObject], Effects, Dict[OutputHandle, Any]]:
        self._check_limits(transaction)
        try:
            check_well_formed(transaction.inputs, transaction.commands)
        except BuildError as exc:
            raise CommandAbort(RejectionReason.TYPE_MISMATCH, str(exc)) from exc
        working = self.store.working_copy()
        slots, versions, owned = _resolve_inputs(transaction, working, sender)

        seed = hashlib.sha256(f"{digest}:{self.store.seq}".encode("utf-8")).hexdigest()
        ctx = CommandContext(sender=sender, objects=working, seed=seed)
        results: Dict[Tuple[int, int], Any] = {}
        touched: Set[str] = set(owned)
        deleted: Dict[str, StoredObject] = {}

        for position, command in transaction.iter_commands():
            try:
                if self.fail_at == position:
                    raise CommandAbort(RejectionReason.COMMAND_FAILED, "injected failure")
                self._apply(
                    transaction, position, command, ctx, slots, results, touched, deleted
                )
            except CommandAbort as exc:
                exc.command_index = position
                raise

        version = max(versions, default=0) + 1
        for object_id in ctx.created:
            target = working.get(object_id) or deleted[object_id]
            target.version = version
        mutated = sorted(
            object_id
            for object_id in touched
            if object_id in working and object_id not in ctx.created
        )
        for object_id in mutated:
            working[object_id].version = version

        effects = Effects(
            created=[object_id for object_id in ctx.created if object_id in working],
            mutated=mutated,
            deleted=sorted(object_id for object_id in deleted if object_id not in ctx.created),
        )

        outputs: Dict[OutputHandle, Any] = {}
        for (position, index), value in sorted(results.items()):
            kind = transaction.commands[position].operation.returns[index]
            if kind is ValueKind.OBJECT:
                obj = working.get(value) or deleted[value]
                value = obj.snapshot()
            outputs[OutputHandle(position, index)] = value
        return working, effects, outputs

    def _apply(
        self,
        transaction: Transaction,
        position: int,
        command: CommandSpec,
        ctx: CommandContext,
        slots: List[Any],
        results: Dict[Tuple[int, int], Any],
        touched: Set[str],
        deleted: Dict[str, StoredObject],
    ) -> None:
        operation = command.operation
        if len(command.arguments) != operation.arity:
            raise CommandAbort(
                RejectionReason.TYPE_MISMATCH,
                f"{operation.display()} takes {operation.arity} argument(s)",
            )
        handler = self._handler_for(operation)

        args: List[Any] = []
        for param, ref in zip(operation.params, command.arguments):
            if isinstance(ref, InputHandle):
                value = slots[ref.index]
                descriptor = transaction.inputs[ref.index]
            else:
                value = results[(ref.command, ref.index)]
                descriptor = None
            if param.kind is ValueKind.PURE:
                if descriptor is not None and not isinstance(descriptor, PureInput):
                    raise CommandAbort(
                        RejectionReason.TYPE_MISMATCH, f"{ref.key()} is not a pure value"
                    )
                args.append(value)
                continue
            if isinstance(descriptor, PureInput):
                raise CommandAbort(RejectionReason.TYPE_MISMATCH, f"{ref.key()} is not an object")
            obj = ctx.objects.get(value)
            if obj is None:
                raise CommandAbort(
                    RejectionReason.OBJECT_NOT_FOUND, f"object {value} is no longer available"
                )
            if param.mutable or param.consumed:
                if isinstance(descriptor, SharedObjectInput) and not descriptor.mutable:
                    raise CommandAbort(
                        RejectionReason.INVALID_SHARED_OBJECT,
                        f"shared object {obj.object_id} was declared immutable",
                    )
                touched.add(obj.object_id)
            if param.consumed and obj.is_shared:
                raise CommandAbort(
                    RejectionReason.INVALID_SHARED_OBJECT,
                    f"shared object {obj.object_id} cannot be consumed",
                )
            args.append(obj)

        values = handler(ctx, args)
        if len(values) != len(operation.returns):
            raise CommandAbort(
                RejectionReason.COMMAND_FAILED,
                f"{operation.display()} returned {len(values)} value(s), "
                f"expected {len(operation.returns)}",
            )
        for index, value in enumerate(values):
            results[(position, index)] = value
        for param, arg in zip(operation.params, args):
            if param.consumed:
                deleted[arg.object_id] = ctx.objects.pop(arg.object_id)

    def _handler_for(self, operation: Operation) -> Handler:
        if operation.target is None:
            handler = PRIMITIVE_HANDLERS.get(operation.name)
        else:
            handler = self._calls.get(operation.target)
        if handler is None:
            raise CommandAbort(
                RejectionReason.UNKNOWN_OPERATION,
                f"no handler registered for {operation.display()}",
            )
        return handler

    def _check_limits(self, transaction: Transaction) -> None:
        if self.max_inputs is not None and len(transaction.inputs) > self.max_inputs:
            raise CommandAbort(
                RejectionReason.LIMIT_EXCEEDED,
                f"{len(transaction.inputs)} inputs exceed the limit of {self.max_inputs}",
            )
        if self.max_commands is not None and len(transaction.commands) > self.max_commands:
            raise CommandAbort(
                RejectionReason.LIMIT_EXCEEDED,
                f"{len(transaction.commands)} commands exceed the limit of {self.max_commands}",
            )


def _resolve_inputs(
    transaction: Transaction, working: Dict[str, StoredObject], sender: str
) -> Tuple[List[Any], List[int], List[str]]:
    slots: List[Any] = []
    versions: List[int] = []
    owned: List[str] = []
    for index, item in enumerate(transaction.inputs):
        if isinstance(item, PureInput):
            slots.append(item.value)
            continue
        obj = working.get(item.object_id)
        if obj is None:
            raise CommandAbort(
                RejectionReason.OBJECT_NOT_FOUND,
                f"input {index}: object {item.object_id} does not exist",
            )
        if isinstance(item, OwnedObjectInput):
            if obj.is_shared:
                raise CommandAbort(
                    RejectionReason.INVALID_SHARED_OBJECT,
                    f"input {index}: object {item.object_id} is shared, not owned",
                )
            if obj.version != item.version:
                raise CommandAbort(
                    RejectionReason.VERSION_MISMATCH,
                    f"input {index}: object {item.object_id} is at version "
                    f"{obj.version}, not {item.version}",
                )
            if obj.owner != sender:
                raise CommandAbort(
                    RejectionReason.UNAUTHORIZED,
                    f"input {index}: object {item.object_id} is not owned by {sender}",
                )
            owned.append(obj.object_id)
        else:
            if not obj.is_shared:
                raise CommandAbort(
                    RejectionReason.INVALID_SHARED_OBJECT,
                    f"input {index}: object {item.object_id} is not shared",
                )
            if (
                item.initial_shared_version is not None
                and item.initial_shared_version != obj.initial_shared_version
            ):
                raise CommandAbort(
                    RejectionReason.INVALID_SHARED_OBJECT,
                    f"input {index}: object {item.object_id} was shared at version "
                    f"{obj.initial_shared_version}, not {item.initial_shared_version}",
                )
        versions.append(obj.version)
        slots.append(obj.object_id)
    return slots, versions, owned
