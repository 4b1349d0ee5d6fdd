from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from protowire._internal.definitions import ProtoDefinition, ProtoSource
from protowire.exceptions import InvalidProtoDefinitionError


class ConfigurationStore:
    """Store one merged proto definition per proto id.

    Adding a definition for an existing id merges it into the previous one:
    fields present in the new definition overwrite, ``args`` are concatenated
    and ``props`` are merged key-wise. The merged source is decoded into a
    ``ProtoDefinition`` once, at add time.
    """

    def __init__(self) -> None:
        self._sources: dict[str, ProtoSource] = {}
        self._definitions: dict[str, ProtoDefinition] = {}

    def add(self, proto_id: str, definition: Mapping[str, Any] | ProtoSource) -> ProtoDefinition:
        """Add or merge a definition for a proto id.

        Args:
            proto_id: Identifier the definition is registered under.
            definition: Raw mapping (``ioc.json`` shape) or a validated source.

        Returns:
            The merged and decoded definition now stored for ``proto_id``.

        Raises:
            InvalidProtoDefinitionError: If the definition fails validation.

        Examples:
            .. code-block:: python

                store = ConfigurationStore()
                store.add("x", {"args": [1]})
                store.add("x", {"args": [2], "props": {"a": 1}})
                # args == (1, 2), props == {"a": 1}

        """
        try:
            source = (
                definition
                if isinstance(definition, ProtoSource)
                else ProtoSource.model_validate(dict(definition))
            )
            if previous_source := self._sources.get(proto_id):
                source = previous_source.merged_with(source)
            decoded = source.to_definition()
        except ValidationError as error:
            msg = f"Invalid definition for proto [{proto_id}]: {error}"
            raise InvalidProtoDefinitionError(msg) from error

        self._sources[proto_id] = source
        self._definitions[proto_id] = decoded
        return decoded

    def get(self, proto_id: str) -> ProtoDefinition | None:
        """Get the definition for a proto id, if it exists.

        Args:
            proto_id: Identifier to look up.

        """
        return self._definitions.get(proto_id)

    def get_source(self, proto_id: str) -> ProtoSource | None:
        """Get the merged, undecoded source for a proto id, if it exists.

        Args:
            proto_id: Identifier to look up.

        """
        return self._sources.get(proto_id)

    def ids(self) -> list[str]:
        """Get all registered proto ids in registration order."""
        return list(self._definitions)

    def __contains__(self, proto_id: object) -> bool:
        return proto_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
