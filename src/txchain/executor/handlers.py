"""Handlers that apply individual commands inside the reference executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .base import RejectionReason
from .objects import COIN, COUNTER, TREASURY_CAP, StoredObject


class CommandAbort(Exception):
    """Raised by a handler to reject the whole transaction."""

    def __init__(self, reason: RejectionReason, message: str):
        self.reason = reason
        self.message = message
        self.command_index: Optional[int] = None
        super().__init__(message)


@dataclass
class CommandContext:
    """Working state visible to a handler while a transaction runs."""

    sender: str
    objects: Dict[str, StoredObject]
    seed: str
    created: List[str] = field(default_factory=list)

    def create(self, type_: str, fields: Dict[str, Any]) -> StoredObject:
        object_id = f"0x{self.seed[:48]}{len(self.created):016x}"
        obj = StoredObject(
            object_id=object_id, type=type_, version=0, owner=self.sender, fields=fields
        )
        self.objects[object_id] = obj
        self.created.append(object_id)
        return obj


Handler = Callable[[CommandContext, List[Any]], List[Any]]


def expect_type(obj: StoredObject, type_: str) -> None:
    if obj.type != type_:
        raise CommandAbort(
            RejectionReason.TYPE_MISMATCH,
            f"object {obj.object_id} is a {obj.type}, expected {type_}",
        )


def expect_amount(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandAbort(RejectionReason.TYPE_MISMATCH, f"amount {value!r} is not an integer")
    return value


def mint(ctx: CommandContext, args: List[Any]) -> List[Any]:
    (cap,) = args
    expect_type(cap, TREASURY_CAP)
    amount = int(cap.fields.get("mint_amount", 0))
    cap.fields["total_supply"] = int(cap.fields.get("total_supply", 0)) + amount
    coin = ctx.create(COIN, {"balance": amount})
    return [coin.object_id]


def merge(ctx: CommandContext, args: List[Any]) -> List[Any]:
    destination, source = args
    expect_type(destination, COIN)
    expect_type(source, COIN)
    destination.fields["balance"] = destination.balance + source.balance
    return []


def split(ctx: CommandContext, args: List[Any]) -> List[Any]:
    coin, raw_amount = args
    expect_type(coin, COIN)
    amount = expect_amount(raw_amount)
    if amount > coin.balance:
        raise CommandAbort(
            RejectionReason.INSUFFICIENT_BALANCE,
            f"cannot split {amount} from coin {coin.object_id} holding {coin.balance}",
        )
    coin.fields["balance"] = coin.balance - amount
    part = ctx.create(COIN, {"balance": amount})
    return [part.object_id]


PRIMITIVE_HANDLERS: Dict[str, Handler] = {
    "mint": mint,
    "merge": merge,
    "split": split,
}


def flag_handler(required_amount: int = 5) -> Handler:
    """Gated call that bumps a shared counter when paid exactly *required_amount*."""

    def get_flag(ctx: CommandContext, args: List[Any]) -> List[Any]:
        counter, payment = args
        expect_type(counter, COUNTER)
        expect_type(payment, COIN)
        if payment.balance != required_amount:
            raise CommandAbort(
                RejectionReason.UNAUTHORIZED,
                f"flag requires a coin worth exactly {required_amount}, got {payment.balance}",
            )
        counter.fields["value"] = int(counter.fields.get("value", 0)) + 1
        counter.fields["last_caller"] = ctx.sender
        return []

    return get_flag


CALL_HANDLER_FACTORIES: Dict[str, Callable[..., Handler]] = {
    "flag": flag_handler,
}
