"""Tests for the transaction wire form and digest."""

from __future__ import annotations

import json

import pytest

from txchain.builder import (
    Operation,
    Param,
    Transaction,
    TransactionBuilder,
    TransactionFormatError,
    ValueKind,
    compute_tx_digest,
    deserialize_transaction,
    dumps,
    loads,
    serialize_transaction,
)


GATE = Operation(
    name="get_flag",
    params=(
        Param(ValueKind.OBJECT, mutable=True),
        Param(ValueKind.OBJECT, consumed=True),
    ),
    target="0xc6::mintcoin::get_flag",
)


def _flag_transaction() -> Transaction:
    builder = TransactionBuilder()
    coins = [builder.owned_object(f"0xa{i}", 1) for i in range(1, 4)]
    counter = builder.shared_object("0xc3", 6286155)
    builder.merge(coins[0], coins[1])
    builder.merge(coins[0], coins[2])
    payment = builder.split(coins[0], 5)
    builder.call(GATE, counter, payment)
    return builder.finalize()


def test_round_trip_preserves_inputs_and_reference_graph() -> None:
    tx = _flag_transaction()

    restored = loads(dumps(tx))

    assert restored == tx
    assert restored.commands[3].operation == GATE
    assert compute_tx_digest(restored) == compute_tx_digest(tx)


def test_serialized_payload_shape() -> None:
    payload = serialize_transaction(_flag_transaction())

    assert payload["format"] == 1
    assert payload["inputs"][0] == {"kind": "owned", "object_id": "0xa1", "version": 1}
    assert payload["inputs"][3] == {
        "kind": "shared",
        "object_id": "0xc3",
        "initial_shared_version": 6286155,
        "mutable": True,
    }
    assert payload["inputs"][4] == {"kind": "pure", "value": 5}
    assert payload["commands"][2]["arguments"] == [{"input": 0}, {"input": 4}]
    assert payload["commands"][3]["arguments"] == [{"input": 3}, {"result": [2, 0]}]


def test_dumps_is_deterministic_and_compact() -> None:
    text = dumps(_flag_transaction())

    assert text == dumps(_flag_transaction())
    assert " " not in text
    assert json.loads(text)["format"] == 1
    assert len(compute_tx_digest(_flag_transaction())) == 64


def test_digest_changes_with_content() -> None:
    builder = TransactionBuilder()
    coin = builder.owned_object("0xa1", 2)
    builder.split(coin, 5)

    assert compute_tx_digest(builder.finalize()) != compute_tx_digest(_flag_transaction())


def test_loads_rejects_invalid_json() -> None:
    with pytest.raises(TransactionFormatError):
        loads("{not json")


def test_deserialize_rejects_unknown_format() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["format"] = 2

    with pytest.raises(TransactionFormatError) as exc:
        deserialize_transaction(payload)

    assert "unsupported format" in str(exc.value)


def test_deserialize_rejects_forward_reference() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["commands"][3]["arguments"][1] = {"result": [3, 0]}

    with pytest.raises(TransactionFormatError) as exc:
        deserialize_transaction(payload)

    assert "later command" in str(exc.value)


def test_deserialize_rejects_bad_input_descriptor() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["inputs"][0]["object_id"] = "not-hex"

    with pytest.raises(TransactionFormatError):
        deserialize_transaction(payload)


def test_deserialize_rejects_missing_fields() -> None:
    with pytest.raises(TransactionFormatError):
        deserialize_transaction({"format": 1, "inputs": []})
    with pytest.raises(TransactionFormatError):
        deserialize_transaction({"format": 1, "inputs": [{"kind": "blob"}], "commands": []})


def test_deserialize_rejects_negative_result_reference() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["commands"][2]["arguments"][0] = {"result": [-1, 0]}

    with pytest.raises(TransactionFormatError) as exc:
        deserialize_transaction(payload)

    assert "negative result index" in str(exc.value)


def test_deserialize_rejects_negative_input_reference() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["commands"][0]["arguments"][1] = {"input": -2}

    with pytest.raises(TransactionFormatError) as exc:
        deserialize_transaction(payload)

    assert "outside the inputs" in str(exc.value)


def test_deserialize_rejects_repeated_object_input() -> None:
    payload = serialize_transaction(_flag_transaction())
    payload["inputs"][1]["object_id"] = "0xA1"

    with pytest.raises(TransactionFormatError) as exc:
        deserialize_transaction(payload)

    assert "repeats object" in str(exc.value)


@pytest.mark.parametrize(
    "text",
    [
        '{"format":1,"inputs":["x"],"commands":[]}',
        '{"format":1,"inputs":[],"commands":["merge"]}',
        '{"format":1,"inputs":[],"commands":[{"operation":"merge","arguments":[]}]}',
        '{"format":1,"inputs":[],"commands":[{"operation":{"name":"m","params":["object"]}}]}',
        '{"format":1,"inputs":[{"kind":"pure","value":1}],"commands":'
        '[{"operation":{"name":"m","params":[]},"arguments":[0]}]}',
    ],
)
def test_loads_rejects_non_object_entries(text: str) -> None:
    with pytest.raises(TransactionFormatError):
        loads(text)
