from protowire._internal.container import Container
from protowire._internal.definitions import (
    ANONYMOUS_PROTO_ID,
    AnonymousArg,
    ArgSpec,
    FactoryArg,
    LiteralArg,
    MappingArg,
    ProtoDefinition,
    ProtoScope,
    ProtoSource,
    ReferenceArg,
)
from protowire._internal.dependency_tree import DependencyNode, ProtoRecord
from protowire._internal.module_loader import ModuleLoader
from protowire._internal.proto_factory import APP_CONTEXT_ATTRIBUTE, ProtoFactory
from protowire._internal.scanner import ConfigurationScanner
from protowire._internal.settings import ContainerSettings
from protowire._internal.store import ConfigurationStore
from protowire.exceptions import (
    CircularDependencyError,
    ConfigurationFileError,
    InvalidProtoDefinitionError,
    MissingFactoryMethodError,
    ModuleLoadError,
    ProtowireError,
    UndefinedProtoError,
    UsageError,
)

__all__ = [
    "ANONYMOUS_PROTO_ID",
    "APP_CONTEXT_ATTRIBUTE",
    "AnonymousArg",
    "ArgSpec",
    "CircularDependencyError",
    "ConfigurationFileError",
    "ConfigurationScanner",
    "ConfigurationStore",
    "Container",
    "ContainerSettings",
    "DependencyNode",
    "FactoryArg",
    "InvalidProtoDefinitionError",
    "LiteralArg",
    "MappingArg",
    "MissingFactoryMethodError",
    "ModuleLoadError",
    "ModuleLoader",
    "ProtoDefinition",
    "ProtoFactory",
    "ProtoRecord",
    "ProtoScope",
    "ProtoSource",
    "ProtowireError",
    "ReferenceArg",
    "UndefinedProtoError",
    "UsageError",
]
