from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class ProtowireError(Exception):
    """Represent a base class for all protowire-specific failures.

    Catch this type when you want to handle any protowire error path without
    matching each concrete exception class individually.
    """


class UndefinedProtoError(ProtowireError):
    """Signal that a proto id has no definition in the configuration store.

    Raised by ``Container.get_proto``, ``ProtoFactory.get_proto`` and
    ``dependencies_of`` when the requested id, or an id referenced by one of
    its arguments or properties, was never added to the store.

    Typical fixes include registering the id with ``store.add(...)``, adding a
    source file named after the id to a scanned directory, or correcting a
    ``ref``/``factoryRef`` typo in an ``ioc.json`` file.
    """

    def __init__(self, proto_id: str) -> None:
        self.proto_id = proto_id
        super().__init__(f"No proto is defined for [{proto_id}]")


class MissingFactoryMethodError(ProtowireError):
    """Signal a ``factoryRef`` argument declared without ``factoryMethod``.

    Raised while resolving arguments or properties of the form
    ``{"factoryRef": "id"}``. The factory proto is not resolved.

    Typical fix is naming the zero-argument method to call on the factory,
    for example ``{"factoryRef": "pool", "factoryMethod": "connect"}``.
    """

    def __init__(self, factory_ref: str) -> None:
        self.factory_ref = factory_ref
        super().__init__(f"No factory method defined with [{factory_ref}]")


class UsageError(ProtowireError):
    """Signal invalid use of the public API.

    Raised by ``Container.get_protos`` when ``on_success`` is not callable and
    by ``Container`` when it is created without directories or a store.
    """


class CircularDependencyError(ProtowireError):
    """Signal that a proto id depends on itself.

    Raised by ``get_proto`` and ``dependencies_of`` when an id reappears in its
    own chain of references. ``chain`` lists the ids from the outermost request
    to the repeated id.

    Typical fixes include replacing one constructor argument of the cycle with
    a property, or extracting the shared part into a third proto.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.chain)}")


class InvalidProtoDefinitionError(ProtowireError):
    """Signal a structurally invalid proto definition.

    Raised by ``ConfigurationStore.add`` when a definition fails validation
    (for example ``args`` that is not a list), and by ``get_proto`` when a
    merged definition never received a ``module``.
    """


class ModuleLoadError(ProtowireError):
    """Signal that a module reference cannot be loaded.

    Raised by ``ModuleLoader.load`` when the module cannot be imported, the
    file does not exist, or the ``->exportName`` attribute is missing.
    """

    def __init__(self, reference: Any, reason: str) -> None:
        self.reference = reference
        super().__init__(f"Unable to load module [{reference}]: {reason}")


class ConfigurationFileError(ProtowireError):
    """Signal an unreadable or malformed ``ioc.json`` configuration file.

    Raised by ``ConfigurationScanner`` while loading configuration files so a
    broken file is reported instead of being treated as empty.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid configuration file [{path}]: {reason}")
