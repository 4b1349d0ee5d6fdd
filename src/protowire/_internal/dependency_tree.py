from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from protowire._internal.definitions import ModuleReference


@dataclass(frozen=True, slots=True)
class ProtoRecord:
    """One proto recorded on a dependency node."""

    proto_id: str
    instance: Any | None = None
    """The constructed instance; ``None`` for dependency discovery records."""
    module: ModuleReference = None
    """Module reference of an anonymous proto recorded during discovery."""


class DependencyNode:
    """Record protos and their nested dependencies as a tree.

    During resolution every constructed proto gets its own child node under
    the node of the proto that requested it, so ``children`` mirrors the
    construction lineage. ``dependencies_of`` builds the same shape without
    instantiating anything.

    Nodes only reference their parent for navigation; the tree lives as long
    as the caller keeps its root.
    """

    def __init__(self, parent: DependencyNode | None = None) -> None:
        self._protos: list[ProtoRecord] = []
        self._children: list[DependencyNode] = []
        self._parent = parent

    @property
    def protos(self) -> list[ProtoRecord]:
        """Records added to this node, in order."""
        return list(self._protos)

    @property
    def children(self) -> list[DependencyNode]:
        """Child nodes, in creation order."""
        return list(self._children)

    @property
    def parent(self) -> DependencyNode | None:
        return self._parent

    def add_child(self) -> DependencyNode:
        """Create, attach and return a new child node."""
        child = DependencyNode(parent=self)
        self._children.append(child)
        return child

    def add_proto(
        self,
        proto_id: str,
        instance: Any | None = None,
        *,
        module: ModuleReference = None,
    ) -> ProtoRecord:
        """Record a proto on this node.

        Args:
            proto_id: Proto id, or ``"[anonymous]"`` for inline protos.
            instance: Constructed instance, if any.
            module: Module reference kept for anonymous discovery records.

        """
        record = ProtoRecord(proto_id=proto_id, instance=instance, module=module)
        self._protos.append(record)
        return record

    def walk(self) -> Iterator[DependencyNode]:
        """Iterate over this node and its descendants depth-first, parents first."""
        yield self
        for child in self._children:
            yield from child.walk()

    def proto_ids(self) -> list[str]:
        """Return every recorded proto id in walk order."""
        return [record.proto_id for node in self.walk() for record in node._protos]

    def find(self, proto_id: str) -> ProtoRecord | None:
        """Return the first record for ``proto_id`` in walk order, if any.

        Args:
            proto_id: Proto id to search for.

        """
        for node in self.walk():
            for record in node._protos:
                if record.proto_id == proto_id:
                    return record
        return None

    def __repr__(self) -> str:
        ids = [record.proto_id for record in self._protos]
        return f"DependencyNode(protos={ids!r}, children={len(self._children)})"


__all__ = ["DependencyNode", "ProtoRecord"]
