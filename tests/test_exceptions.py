"""Tests for custom exception hierarchy."""

from pathlib import Path

import pytest

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


class TestExceptionMessages:
    def test_undefined_proto_names_the_id(self) -> None:
        error = UndefinedProtoError("mailer")

        assert error.proto_id == "mailer"
        assert str(error) == "No proto is defined for [mailer]"

    def test_missing_factory_method_names_the_factory(self) -> None:
        error = MissingFactoryMethodError("pool")

        assert error.factory_ref == "pool"
        assert "[pool]" in str(error)

    def test_circular_dependency_renders_chain(self) -> None:
        error = CircularDependencyError(["a", "b", "a"])

        assert error.chain == ("a", "b", "a")
        assert "a -> b -> a" in str(error)

    def test_module_load_error_keeps_reference(self) -> None:
        error = ModuleLoadError("pkg->Thing", "no export")

        assert error.reference == "pkg->Thing"
        assert str(error) == "Unable to load module [pkg->Thing]: no export"

    def test_configuration_file_error_keeps_path(self) -> None:
        error = ConfigurationFileError(Path("ioc.json"), "bad json")

        assert error.path == Path("ioc.json")
        assert "bad json" in str(error)


@pytest.mark.parametrize(
    "error",
    [
        UndefinedProtoError("x"),
        MissingFactoryMethodError("x"),
        UsageError("x"),
        CircularDependencyError(["x", "x"]),
        InvalidProtoDefinitionError("x"),
        ModuleLoadError("x", "y"),
        ConfigurationFileError(Path("x"), "y"),
    ],
)
def test_every_error_is_protowire_error(error: Exception) -> None:
    assert isinstance(error, ProtowireError)
    assert isinstance(error, Exception)
