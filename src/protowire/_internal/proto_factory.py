from __future__ import annotations

import logging
from collections.abc import Generator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from protowire._internal.definitions import (
    ANONYMOUS_PROTO_ID,
    AnonymousArg,
    ArgSpec,
    FactoryArg,
    LiteralArg,
    MappingArg,
    ProtoDefinition,
    ProtoScope,
    ReferenceArg,
)
from protowire._internal.dependency_tree import DependencyNode
from protowire._internal.module_loader import ModuleLoader
from protowire._internal.store import ConfigurationStore
from protowire.exceptions import (
    CircularDependencyError,
    InvalidProtoDefinitionError,
    MissingFactoryMethodError,
    UndefinedProtoError,
)

logger = logging.getLogger(__name__)

APP_CONTEXT_ATTRIBUTE = "__app_context__"
"""Attribute that receives the owning application context on injected instances."""


class ProtoFactory:
    """Build, wire and cache proto instances from store definitions.

    ``get_proto`` looks up a definition, loads its module and applies the
    scope policy: ``singleton`` instances are cached per id, ``static`` protos
    return the loaded module value itself and ``prototype`` protos are built
    on every call. Constructor ``args`` are resolved left to right before
    construction and ``props`` are applied in declared order afterwards.
    References to other protos are resolved recursively; an id reappearing in
    its own reference chain raises ``CircularDependencyError``.

    All caches live as long as the factory. Resolution is synchronous and not
    thread-safe.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        loader: ModuleLoader | None = None,
        *,
        inject_app_context: bool = False,
    ) -> None:
        """Initialize a factory over a configuration store.

        Args:
            store: Store holding the proto definitions.
            loader: Module loader; a new one is created when omitted.
            inject_app_context: Default for attaching ``app_context`` to
                constructed instances when a definition does not say otherwise.

        """
        self._store = store
        self._loader = loader if loader is not None else ModuleLoader()
        self._inject_app_context = inject_app_context
        self.app_context: Any | None = None

        self._singletons: dict[str, Any] = {}
        self._dependencies: dict[str, DependencyNode] = {}
        self._resolution_chain: list[str] = []

    @property
    def store(self) -> ConfigurationStore:
        return self._store

    @property
    def loader(self) -> ModuleLoader:
        return self._loader

    def get_proto(self, proto_id: str, tree: DependencyNode | None = None) -> Any:
        """Resolve a proto id into an instance.

        Args:
            proto_id: Identifier of the proto to resolve.
            tree: Node that receives a child node for every constructed proto.
                A fresh root is used when omitted.

        Raises:
            UndefinedProtoError: If the id, or an id it references, has no definition.
            MissingFactoryMethodError: If a ``factoryRef`` value has no ``factoryMethod``.
            CircularDependencyError: If the id depends on itself.
            ModuleLoadError: If a module reference cannot be loaded.

        Examples:
            .. code-block:: python

                store.add("greeter", {"module": "app.greeter->Greeter", "args": ["*clock"]})
                lineage = DependencyNode()
                greeter = factory.get_proto("greeter", lineage)

        """
        proto_id = str(proto_id).strip()
        definition = self.get_definition(proto_id)
        value = self._load_module(proto_id, definition)

        if definition.scope is ProtoScope.SINGLETON and proto_id in self._singletons:
            return self._singletons[proto_id]
        if definition.scope is ProtoScope.STATIC:
            return value

        if tree is None:
            tree = DependencyNode()
        with self._resolving(proto_id):
            instance = self._create_instance(
                proto_id,
                definition,
                tree.add_child(),
                inject_app_context=self._should_inject_app_context(definition),
            )

        if definition.scope is ProtoScope.SINGLETON:
            self._singletons[proto_id] = instance
        return instance

    def get_definition(self, proto_id: str) -> ProtoDefinition:
        """Get the definition for a proto id.

        Args:
            proto_id: Identifier to look up.

        Raises:
            UndefinedProtoError: If the store has no definition for the id.

        """
        definition = self._store.get(proto_id)
        if definition is None:
            raise UndefinedProtoError(proto_id)
        return definition

    def dependencies_of(self, proto_id: str) -> DependencyNode:
        """Build the dependency tree of a proto id without instantiating anything.

        The returned root holds one child node for ``proto_id``; every node's
        children are the protos its ``args`` and ``props`` reference through
        ``ref`` or ``factoryRef``, in declared order. Anonymous protos are
        leaves recorded as ``"[anonymous]"`` with their module reference.

        Results are memoized per id for the lifetime of the factory.

        Args:
            proto_id: Identifier whose dependencies are collected.

        Raises:
            UndefinedProtoError: If the id, or an id it references, has no definition.
            CircularDependencyError: If the id depends on itself.

        """
        proto_id = str(proto_id).strip()
        cached = self._dependencies.get(proto_id)
        if cached is not None:
            return cached

        root = DependencyNode()
        self._collect_dependencies(proto_id, root, chain=())
        self._dependencies[proto_id] = root
        return root

    @contextmanager
    def _resolving(self, proto_id: str) -> Generator[None, None, None]:
        if proto_id in self._resolution_chain:
            raise CircularDependencyError([*self._resolution_chain, proto_id])
        self._resolution_chain.append(proto_id)
        try:
            yield
        finally:
            self._resolution_chain.pop()

    def _load_module(self, proto_id: str, definition: ProtoDefinition) -> Any:
        if definition.module is None:
            msg = f"Proto [{proto_id}] has no module to construct."
            raise InvalidProtoDefinitionError(msg)
        return self._loader.load(definition.module)

    def _should_inject_app_context(self, definition: ProtoDefinition) -> bool:
        if definition.inject_app_context is None:
            return self._inject_app_context
        return definition.inject_app_context

    def _create_instance(
        self,
        proto_id: str,
        definition: ProtoDefinition,
        node: DependencyNode,
        *,
        inject_app_context: bool,
    ) -> Any:
        target = self._load_module(proto_id, definition)
        args = self._create_args(definition.args, node)

        if not callable(target):
            msg = f"Module [{definition.module}] of proto [{proto_id}] is not constructible."
            raise InvalidProtoDefinitionError(msg)
        instance = target(*args)
        node.add_proto(proto_id, instance)

        self._inject_props(instance, definition.props, node)

        if inject_app_context and self.app_context is not None:
            setattr(instance, APP_CONTEXT_ATTRIBUTE, self.app_context)

        logger.debug(
            "Constructed proto '%s' from %r with %d argument(s)",
            proto_id,
            definition.module,
            len(args),
        )
        return instance

    def _create_args(self, args: Sequence[ArgSpec], node: DependencyNode) -> list[Any]:
        return [self._resolve_arg(arg, node) for arg in args]

    def _inject_props(
        self,
        instance: Any,
        props: Mapping[str, ArgSpec],
        node: DependencyNode,
    ) -> None:
        for name, spec in props.items():
            value = self._resolve_arg(spec, node)
            member = getattr(instance, name, None)
            if not callable(member):
                setattr(instance, name, value)
            elif isinstance(value, list | tuple):
                member(*value)
            else:
                member(value)

    def _resolve_arg(self, arg: ArgSpec, node: DependencyNode) -> Any:
        if isinstance(arg, LiteralArg):
            return arg.value
        if isinstance(arg, ReferenceArg):
            return self.get_proto(arg.proto_id, node)
        if isinstance(arg, FactoryArg):
            return self._get_proto_from_factory(arg, node)
        if isinstance(arg, AnonymousArg):
            return self._create_instance(
                ANONYMOUS_PROTO_ID,
                arg.definition,
                node,
                inject_app_context=self._should_inject_app_context(arg.definition),
            )
        return {key: self._resolve_arg(entry, node) for key, entry in arg.entries.items()}

    def _get_proto_from_factory(self, arg: FactoryArg, node: DependencyNode) -> Any:
        if not arg.factory_method:
            raise MissingFactoryMethodError(arg.factory_ref)
        factory = self.get_proto(arg.factory_ref, node)
        return getattr(factory, arg.factory_method)()

    def _collect_dependencies(
        self,
        proto_id: str,
        parent: DependencyNode,
        *,
        chain: tuple[str, ...],
    ) -> None:
        proto_id = proto_id.strip()
        if proto_id in chain:
            raise CircularDependencyError([*chain, proto_id])
        definition = self.get_definition(proto_id)

        node = parent.add_child()
        node.add_proto(proto_id)
        chain = (*chain, proto_id)
        for spec in (*definition.args, *definition.props.values()):
            self._collect_from_arg(spec, node, chain=chain)

    def _collect_from_arg(
        self,
        spec: ArgSpec,
        node: DependencyNode,
        *,
        chain: tuple[str, ...],
    ) -> None:
        if isinstance(spec, ReferenceArg):
            self._collect_dependencies(spec.proto_id, node, chain=chain)
        elif isinstance(spec, FactoryArg):
            self._collect_dependencies(spec.factory_ref, node, chain=chain)
        elif isinstance(spec, AnonymousArg):
            node.add_child().add_proto(ANONYMOUS_PROTO_ID, module=spec.definition.module)
        elif isinstance(spec, MappingArg):
            for entry in spec.entries.values():
                self._collect_from_arg(entry, node, chain=chain)


__all__ = ["APP_CONTEXT_ATTRIBUTE", "ProtoFactory"]
