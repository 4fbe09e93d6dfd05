"""Mint-then-chain workflow: two strictly sequential transactions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..builder import Operation, OutputHandle, Transaction, TransactionBuilder
from ..executor import ExecutionResult, Executor, StoredObject
from .errors import SubmitError


logger = logging.getLogger(__name__)


@dataclass
class MintResult:
    result: ExecutionResult
    coins: List[StoredObject]


@dataclass
class FlowResult:
    mint: MintResult
    flag: ExecutionResult
    payment: OutputHandle

    @property
    def ok(self) -> bool:
        return self.flag.ok


def mint_resources(
    executor: Executor,
    *,
    sender: str,
    treasury_cap_id: str,
    count: int = 3,
    initial_shared_version: Optional[int] = None,
) -> MintResult:
    """Mint *count* coins in one transaction and return their committed state."""

    if count < 1:
        raise SubmitError("count must be at least 1")
    builder = TransactionBuilder()
    cap = builder.shared_object(treasury_cap_id, initial_shared_version)
    handles = [builder.mint(cap) for _ in range(count)]
    result = executor.submit(builder.finalize(), sender=sender)
    rejection = result.rejection
    if rejection is not None:
        raise SubmitError(
            f"mint transaction rejected: {rejection.reason.value} ({rejection.message})"
        )
    coins = [result.outputs[handle] for handle in handles]
    logger.info("minted %d coin(s) in transaction %s", len(coins), result.digest[:12])
    return MintResult(result=result, coins=coins)


def build_flag_transaction(
    coins: Sequence[StoredObject],
    *,
    counter_id: str,
    gate: Operation,
    amount: int = 5,
    counter_shared_version: Optional[int] = None,
    builder: Optional[TransactionBuilder] = None,
) -> Tuple[Transaction, OutputHandle]:
    """Merge *coins* into the first one, split off *amount* and pay the gate.

    Returns the finalized transaction and the handle of the split-off coin.
    """

    if not coins:
        raise SubmitError("at least one coin is required")
    builder = builder or TransactionBuilder()
    handles = [builder.owned_object(coin.object_id, coin.version) for coin in coins]
    counter = builder.shared_object(counter_id, counter_shared_version)
    primary = handles[0]
    for other in handles[1:]:
        builder.merge(primary, other)
    payment = builder.split(primary, amount)
    builder.call(gate, counter, payment)
    return builder.finalize(), payment


def run_flag_flow(
    executor: Executor,
    *,
    sender: str,
    treasury_cap_id: str,
    counter_id: str,
    gate: Operation,
    count: int = 3,
    amount: int = 5,
) -> FlowResult:
    minted = mint_resources(
        executor, sender=sender, treasury_cap_id=treasury_cap_id, count=count
    )
    transaction, payment = build_flag_transaction(
        minted.coins, counter_id=counter_id, gate=gate, amount=amount
    )
    flag = executor.submit(transaction, sender=sender)
    return FlowResult(mint=minted, flag=flag, payment=payment)
