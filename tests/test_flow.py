"""End-to-end tests for the mint-then-flag workflow."""

from __future__ import annotations

import pytest

from txchain.builder import (
    InputHandle,
    Operation,
    Param,
    TransactionBuilder,
    UnresolvedReference,
    ValueKind,
)
from txchain.engine import SubmitError, build_flag_transaction, mint_resources, run_flag_flow
from txchain.executor import (
    COUNTER,
    TREASURY_CAP,
    LocalExecutor,
    ObjectStore,
    RejectionReason,
    StoredObject,
    flag_handler,
)


SENDER = "0xa11ce"
CAP_ID = "0x11d7aacb27eb65063dbb6ce0fa07f7807316c5e77763c6f2356d1bd3a34a2741"
COUNTER_ID = "0xc3716689fa16bd8d8bf33ce1036b00740c8818ab9826dba846ef736501fd34b7"
GATE = Operation(
    name="get_flag",
    params=(
        Param(ValueKind.OBJECT, mutable=True),
        Param(ValueKind.OBJECT, consumed=True),
    ),
    target="0xc6f00a2b5ec2d161442b305dcb307ba914e20c5268ec931bd14d7ea3454b262b::mintcoin::get_flag",
)


def _executor() -> LocalExecutor:
    store = ObjectStore(
        [
            StoredObject(
                CAP_ID, TREASURY_CAP, 6286155, fields={"mint_amount": 2, "total_supply": 0}
            ),
            StoredObject(COUNTER_ID, COUNTER, 6286155, fields={"value": 0}),
        ]
    )
    executor = LocalExecutor(store)
    executor.register_call(GATE.target, flag_handler(required_amount=5))
    return executor


def test_scenario_a_three_coins_pay_the_gate() -> None:
    executor = _executor()

    flow = run_flag_flow(
        executor,
        sender=SENDER,
        treasury_cap_id=CAP_ID,
        counter_id=COUNTER_ID,
        gate=GATE,
    )

    assert flow.ok, flow.flag.rejection
    assert [coin.balance for coin in flow.mint.coins] == [2, 2, 2]
    counter = executor.store.get(COUNTER_ID)
    assert counter.fields["value"] == 1
    assert counter.fields["last_caller"] == SENDER
    remaining = executor.store.get(flow.mint.coins[0].object_id)
    assert remaining.balance == 1
    assert flow.flag.outputs[flow.payment].balance == 5
    assert executor.store.seq == 2


def test_scenario_b_two_coins_are_not_enough() -> None:
    executor = _executor()
    minted = mint_resources(executor, sender=SENDER, treasury_cap_id=CAP_ID, count=3)
    tx, _ = build_flag_transaction(minted.coins[:2], counter_id=COUNTER_ID, gate=GATE)

    result = executor.submit(tx, sender=SENDER)

    assert not result.ok
    assert result.rejection.reason is RejectionReason.INSUFFICIENT_BALANCE
    assert result.rejection.command_index == 1
    assert executor.store.get(COUNTER_ID).fields == {"value": 0}
    assert all(executor.store.get(coin.object_id) is not None for coin in minted.coins)
    assert executor.store.seq == 1


def test_scenario_c_split_before_any_input() -> None:
    executor = _executor()
    builder = TransactionBuilder()

    with pytest.raises(UnresolvedReference):
        builder.split(InputHandle(0), 5)

    assert executor.store.seq == 0


def test_flag_transaction_layout() -> None:
    minted = mint_resources(_executor(), sender=SENDER, treasury_cap_id=CAP_ID)

    tx, payment = build_flag_transaction(minted.coins, counter_id=COUNTER_ID, gate=GATE)

    assert [command.operation.name for command in tx.commands] == [
        "merge",
        "merge",
        "split",
        "get_flag",
    ]
    assert tx.inputs[3].object_id == COUNTER_ID
    assert tx.commands[3].arguments[1] == payment


def test_mint_failure_raises_submit_error() -> None:
    with pytest.raises(SubmitError) as exc:
        mint_resources(_executor(), sender=SENDER, treasury_cap_id="0xdead")

    assert "object_not_found" in str(exc.value)


def test_flag_transaction_needs_coins() -> None:
    with pytest.raises(SubmitError):
        build_flag_transaction([], counter_id=COUNTER_ID, gate=GATE)
