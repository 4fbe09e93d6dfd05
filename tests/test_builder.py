"""Tests for the transaction builder."""

from __future__ import annotations

import pytest

from txchain.builder import (
    MERGE,
    SPLIT,
    AlreadyFinalized,
    InputHandle,
    InvalidInputKind,
    Operation,
    OutputHandle,
    OwnedObjectInput,
    Param,
    PureInput,
    SharedObjectInput,
    SignatureMismatch,
    TransactionBuilder,
    TransactionTooLarge,
    UnresolvedReference,
    ValueKind,
)


GATE = Operation(
    name="get_flag",
    params=(
        Param(ValueKind.OBJECT, mutable=True),
        Param(ValueKind.OBJECT, consumed=True),
    ),
    target="0xc6::mintcoin::get_flag",
)


def test_input_handles_are_dense_and_ordered() -> None:
    builder = TransactionBuilder()
    handles = [
        builder.owned_object("0xa1", 3),
        builder.pure(5),
        builder.shared_object("0xc3", 7),
        builder.declare_input("memo"),
    ]

    assert [handle.index for handle in handles] == [0, 1, 2, 3]
    assert builder.input_count == 4


def test_output_handles_follow_command_positions() -> None:
    builder = TransactionBuilder()
    cap = builder.shared_object("0x11")
    first = builder.mint(cap)
    second = builder.mint(cap)
    builder.merge(first, second)
    part = builder.split(first, 1)

    assert first == OutputHandle(0, 0)
    assert second == OutputHandle(1, 0)
    assert part == OutputHandle(3, 0)
    assert builder.command_count == 4


def test_merge_returns_no_handle_and_destination_stays_usable() -> None:
    builder = TransactionBuilder()
    coin_a = builder.owned_object("0xa1", 1)
    coin_b = builder.owned_object("0xa2", 1)

    assert builder.merge(coin_a, coin_b) is None
    part = builder.split(coin_a, 5)
    tx = builder.finalize()

    assert tx.commands[0].operation is MERGE
    assert tx.commands[1].operation is SPLIT
    assert tx.commands[1].arguments == (coin_a, InputHandle(2))
    assert part == OutputHandle(1, 0)


def test_declare_input_rejects_bad_descriptors() -> None:
    builder = TransactionBuilder()

    with pytest.raises(InvalidInputKind):
        builder.declare_input(1.5)  # type: ignore[arg-type]
    with pytest.raises(InvalidInputKind):
        builder.pure(-1)
    with pytest.raises(InvalidInputKind):
        builder.owned_object("a1", 1)
    with pytest.raises(InvalidInputKind):
        builder.shared_object("0xc3", -2)
    assert builder.input_count == 0


def test_split_before_any_input_is_unresolved() -> None:
    builder = TransactionBuilder()

    with pytest.raises(UnresolvedReference):
        builder.split(InputHandle(0), 5)

    assert builder.input_count == 0
    assert builder.command_count == 0


def test_unresolved_reference_at_every_argument_position() -> None:
    builder = TransactionBuilder()
    counter = builder.shared_object("0xc3")
    coin = builder.owned_object("0xa1", 1)

    with pytest.raises(UnresolvedReference):
        builder.call(GATE, InputHandle(9), coin)
    with pytest.raises(UnresolvedReference):
        builder.call(GATE, counter, OutputHandle(0, 0))
    with pytest.raises(UnresolvedReference):
        builder.merge(coin, InputHandle(2))
    assert builder.command_count == 0


def test_result_index_past_returns_is_unresolved() -> None:
    builder = TransactionBuilder()
    cap = builder.shared_object("0x11")
    builder.mint(cap)

    with pytest.raises(UnresolvedReference) as exc:
        builder.split(OutputHandle(0, 1), 1)

    assert "produces 1 result" in str(exc.value)


def test_handles_from_another_builder_are_rejected() -> None:
    other = TransactionBuilder()
    foreign = other.owned_object("0xa1", 1)
    builder = TransactionBuilder()
    builder.owned_object("0xa2", 1)
    builder.pure(5)

    with pytest.raises(UnresolvedReference) as exc:
        builder.split(foreign, InputHandle(1))

    assert "another builder" in str(exc.value)


def test_consumed_value_cannot_be_referenced_again() -> None:
    builder = TransactionBuilder()
    coin_a = builder.owned_object("0xa1", 1)
    coin_b = builder.owned_object("0xa2", 1)
    builder.merge(coin_a, coin_b)

    with pytest.raises(UnresolvedReference) as exc:
        builder.split(coin_b, 1)

    assert "consumed by command 0" in str(exc.value)


def test_signature_mismatch_on_arity_kind_and_repeats() -> None:
    builder = TransactionBuilder()
    coin = builder.owned_object("0xa1", 1)
    amount = builder.pure(5)

    with pytest.raises(SignatureMismatch):
        builder.call(GATE, coin)
    with pytest.raises(SignatureMismatch):
        builder.split(coin, coin)
    with pytest.raises(SignatureMismatch):
        builder.merge(coin, amount)
    with pytest.raises(SignatureMismatch) as exc:
        builder.merge(coin, coin)
    assert "repeats object argument 0" in str(exc.value)
    assert builder.command_count == 0


def test_finalize_twice_raises() -> None:
    builder = TransactionBuilder()
    coin = builder.owned_object("0xa1", 1)
    builder.split(coin, 1)
    builder.finalize()

    with pytest.raises(AlreadyFinalized):
        builder.finalize()
    with pytest.raises(AlreadyFinalized):
        builder.pure(1)


def test_finalize_reports_unreferenced_inputs() -> None:
    builder = TransactionBuilder()
    coin = builder.owned_object("0xa1", 1)
    builder.pure("unused")
    builder.split(coin, 1)

    tx = builder.finalize()

    assert [issue.code for issue in tx.issues] == ["W_INPUT_UNREFERENCED"]
    assert tx.issues[0].location == "input:1"
    assert not tx.issues[0].is_error()


def test_input_limit_is_enforced() -> None:
    builder = TransactionBuilder(max_inputs=2)
    builder.pure(1)
    builder.pure(2)

    with pytest.raises(TransactionTooLarge) as exc:
        builder.pure(3)

    assert exc.value.what == "inputs"
    assert exc.value.limit == 2


def test_command_limit_is_checked_at_finalize() -> None:
    builder = TransactionBuilder(max_commands=1)
    cap = builder.shared_object("0x11")
    builder.mint(cap)
    builder.mint(cap)

    with pytest.raises(TransactionTooLarge):
        builder.finalize()


def test_finalized_transaction_keeps_declaration_order() -> None:
    builder = TransactionBuilder()
    coin = builder.owned_object("0xa1", 4)
    counter = builder.shared_object("0xc3", 2, mutable=True)
    payment = builder.split(coin, 5)
    builder.call(GATE, counter, payment)

    tx = builder.finalize()

    assert tx.inputs == (
        OwnedObjectInput("0xa1", 4),
        SharedObjectInput("0xc3", 2, True),
        PureInput(5),
    )
    assert [command.operation.display() for command in tx.commands] == [
        "split",
        "0xc6::mintcoin::get_flag",
    ]
    assert tx.output_handles == [OutputHandle(0, 0)]
    assert tx.issues == ()


def test_object_cannot_be_declared_twice() -> None:
    builder = TransactionBuilder()
    builder.owned_object("0xa1", 1)

    with pytest.raises(InvalidInputKind) as exc:
        builder.owned_object("0xA1", 1)
    with pytest.raises(InvalidInputKind):
        builder.shared_object("0xa1")

    assert "already input 0" in str(exc.value)
    assert builder.input_count == 1


def test_split_of_pure_value_leaves_no_stray_input() -> None:
    builder = TransactionBuilder()
    amount = builder.pure(7)

    with pytest.raises(SignatureMismatch):
        builder.split(amount, 5)

    assert builder.input_count == 1
    assert builder.command_count == 0
