"""Pydantic models describing configuration files."""

from __future__ import annotations

import re
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ..builder.operations import PRIMITIVES, Operation, Param
from ..builder.types import OBJECT_ID_PATTERN, ValueKind


TARGET_PATTERN = re.compile(
    r"^0x[0-9a-fA-F]{1,64}::[A-Za-z_][A-Za-z0-9_]*::[A-Za-z_][A-Za-z0-9_]*$"
)

KindName = Literal["pure", "object"]
FieldValue = Union[bool, int, str]


class LimitsConfig(BaseModel):
    max_inputs: int = 2048
    max_commands: int = 1024

    @model_validator(mode="after")
    def check_positive(self) -> "LimitsConfig":
        if self.max_inputs <= 0 or self.max_commands <= 0:
            raise ValueError("limits must be positive")
        return self


class ExecutorConfig(BaseModel):
    limits: LimitsConfig = Field(default_factory=LimitsConfig)


class ParamConfig(BaseModel):
    kind: KindName
    mutable: bool = False
    consumed: bool = False

    @model_validator(mode="after")
    def check_flags(self) -> "ParamConfig":
        if self.kind == "pure" and (self.mutable or self.consumed):
            raise ValueError("pure params cannot be mutable or consumed")
        return self


class CallConfig(BaseModel):
    name: str
    target: str
    params: List[ParamConfig] = Field(default_factory=list)
    returns: List[KindName] = Field(default_factory=list)
    handler: Optional[str] = None
    handler_options: Dict[str, FieldValue] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_target(self) -> "CallConfig":
        if not TARGET_PATTERN.match(self.target):
            raise ValueError("target must look like 0x<package>::<module>::<function>")
        if self.name in PRIMITIVES:
            raise ValueError(f"name {self.name} shadows a primitive operation")
        return self

    def to_operation(self) -> Operation:
        return Operation(
            name=self.name,
            params=tuple(
                Param(ValueKind(p.kind), mutable=p.mutable, consumed=p.consumed)
                for p in self.params
            ),
            returns=tuple(ValueKind(kind) for kind in self.returns),
            target=self.target,
        )


class OperationsConfig(BaseModel):
    calls: List[CallConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_unique(self) -> "OperationsConfig":
        names: Dict[str, int] = {}
        targets: Dict[str, int] = {}
        for idx, call in enumerate(self.calls):
            if call.name in names:
                raise ValueError(f"calls[{idx}].name duplicates calls[{names[call.name]}]")
            if call.target in targets:
                raise ValueError(
                    f"calls[{idx}].target duplicates calls[{targets[call.target]}]"
                )
            names[call.name] = idx
            targets[call.target] = idx
        return self


class GenesisObject(BaseModel):
    id: str
    type: str
    owner: Optional[str] = None
    version: int = 1
    fields: Dict[str, FieldValue] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_identity(self) -> "GenesisObject":
        if not OBJECT_ID_PATTERN.match(self.id):
            raise ValueError("id must be 0x-prefixed hex")
        if self.version < 1:
            raise ValueError("version must be >= 1")
        return self


class GenesisConfig(BaseModel):
    objects: List[GenesisObject] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_unique_ids(self) -> "GenesisConfig":
        seen = set()
        for idx, obj in enumerate(self.objects):
            if obj.id in seen:
                raise ValueError(f"objects[{idx}].id duplicates object {obj.id}")
            seen.add(obj.id)
        return self


class ConfigBundle(BaseModel):
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    operations: OperationsConfig = Field(default_factory=OperationsConfig)
    genesis: Optional[GenesisConfig] = None
