from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_PROTO_ID = "[anonymous]"
"""Lineage id recorded for inline protos that have no registered id."""

_PROTO_REF_PATTERN = re.compile(r"^\*[^*]")

ModuleReference: TypeAlias = Any
"""A ``"module->export"`` string or the constructible object itself."""


class ProtoScope(str, Enum):
    """Define the caching discipline applied to a proto's instances."""

    SINGLETON = "singleton"
    """One instance per proto id, cached for the lifetime of the factory."""

    STATIC = "static"
    """The loaded module value itself, shared by every id using the same module."""

    PROTOTYPE = "prototype"
    """A new instance for every resolution, never cached."""

    @classmethod
    def from_value(cls, value: Any) -> ProtoScope:
        """Normalize a raw scope value, falling back to ``SINGLETON``.

        Args:
            value: Raw scope value read from a definition; may be missing or invalid.

        """
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.SINGLETON


@dataclass(frozen=True, slots=True)
class LiteralArg:
    """A value used verbatim."""

    value: Any


@dataclass(frozen=True, slots=True)
class ReferenceArg:
    """A value obtained by resolving another proto id."""

    proto_id: str


@dataclass(frozen=True, slots=True)
class FactoryArg:
    """A value returned by a zero-argument method of another proto."""

    factory_ref: str
    factory_method: str | None = None


@dataclass(frozen=True, slots=True)
class AnonymousArg:
    """An inline proto definition, constructed on every use and never cached."""

    definition: ProtoDefinition


@dataclass(frozen=True, slots=True)
class MappingArg:
    """A mapping whose top-level values are resolved independently."""

    entries: dict[str, EntryArg]


EntryArg: TypeAlias = LiteralArg | ReferenceArg | FactoryArg | AnonymousArg
"""The argument kinds allowed as values of a ``MappingArg``."""

ArgSpec: TypeAlias = EntryArg | MappingArg
"""Describe how one constructor argument or property value is obtained."""


@dataclass(frozen=True, slots=True)
class ProtoDefinition:
    """Describe how to construct and wire one proto.

    Definitions are decoded once from a ``ProtoSource`` when they enter the
    configuration store and are immutable afterwards.
    """

    module: ModuleReference = None
    scope: ProtoScope = ProtoScope.SINGLETON
    args: tuple[ArgSpec, ...] = ()
    props: dict[str, ArgSpec] = field(default_factory=dict)
    inject_app_context: bool | None = None


class ProtoSource(BaseModel):
    """Validate a raw proto definition as written in ``ioc.json`` or in code.

    Only the fields present in the raw mapping are recorded in
    ``model_fields_set``, which drives merging of same-id definitions.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    module: ModuleReference = None
    scope: Any = None
    args: list[Any] | None = None
    props: dict[str, Any] | None = None
    inject_app_context: bool | None = Field(default=None, alias="injectAppContext")

    def merged_with(self, other: ProtoSource) -> ProtoSource:
        """Return this source overwritten by the fields set in ``other``.

        ``args`` are concatenated (existing first) and ``props`` are merged
        key-wise with ``other`` winning on conflicts.

        Args:
            other: Source added later for the same proto id.

        """
        update = {name: getattr(other, name) for name in other.model_fields_set}
        if self.args is not None and other.args is not None:
            update["args"] = [*self.args, *other.args]
        if self.props is not None and other.props is not None:
            update["props"] = {**self.props, **other.props}
        return self.model_copy(update=update)

    def to_definition(self) -> ProtoDefinition:
        """Decode this source into an immutable ``ProtoDefinition``."""
        return ProtoDefinition(
            module=self.module,
            scope=ProtoScope.from_value(self.scope),
            args=tuple(decode_arg_spec(arg) for arg in self.args or ()),
            props={name: decode_arg_spec(value) for name, value in (self.props or {}).items()},
            inject_app_context=self.inject_app_context,
        )


def is_proto_ref_string(value: Any) -> bool:
    """Return whether ``value`` is a ``*id`` proto reference string.

    The sigil must be followed by at least one character that is not itself
    a sigil, so ``"**"`` and ``"*"`` stay literals.

    Args:
        value: Candidate value.

    """
    return isinstance(value, str) and _PROTO_REF_PATTERN.match(value) is not None


def decode_arg_spec(value: Any) -> ArgSpec:
    """Classify a raw argument or property value.

    Mappings without special keys become a ``MappingArg`` whose values are
    classified one level deep; anything else that matches no special shape is
    a ``LiteralArg``.

    Args:
        value: Raw value from ``args`` or ``props``.

    """
    if isinstance(value, MappingArg):
        return value
    entry = _decode_entry(value)
    if isinstance(entry, LiteralArg) and isinstance(value, Mapping):
        return MappingArg(entries={str(key): _decode_entry(item) for key, item in value.items()})
    return entry


def _decode_entry(value: Any) -> EntryArg:
    if isinstance(value, LiteralArg | ReferenceArg | FactoryArg | AnonymousArg):
        return value
    if is_proto_ref_string(value):
        return ReferenceArg(proto_id=value[1:])
    if not isinstance(value, Mapping):
        return LiteralArg(value=value)
    if value.get("ref"):
        return ReferenceArg(proto_id=str(value["ref"]))
    if value.get("factoryRef"):
        return FactoryArg(
            factory_ref=str(value["factoryRef"]),
            factory_method=value.get("factoryMethod") or None,
        )
    if value.get("module"):
        return AnonymousArg(definition=ProtoSource.model_validate(dict(value)).to_definition())
    return LiteralArg(value=value)


__all__ = [
    "ANONYMOUS_PROTO_ID",
    "AnonymousArg",
    "ArgSpec",
    "EntryArg",
    "FactoryArg",
    "LiteralArg",
    "MappingArg",
    "ProtoDefinition",
    "ProtoScope",
    "ProtoSource",
    "ReferenceArg",
    "decode_arg_spec",
    "is_proto_ref_string",
]
