"""Tests for the Container facade."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from protowire import (
    APP_CONTEXT_ATTRIBUTE,
    ConfigurationStore,
    Container,
    ContainerSettings,
    UndefinedProtoError,
    UsageError,
)

_USER_SOURCE = '''
class User:
    """Entity filled through property injection."""

    def __init__(self):
        self.name = None
        self.firstname = None

    def getFullName(self):
        return f"{self.name} {self.firstname}"
'''

_USER_WITH_ARGS_SOURCE = """
class UserWithInjectByArgs:
    def __init__(self, name, firstname):
        self.name = name
        self.firstname = firstname

    def getFullName(self):
        return f"{self.name} {self.firstname}"
"""


class Service:
    def __init__(self, *args: Any) -> None:
        self.args = args


@pytest.fixture()
def app_dir(tmp_path: Path) -> Path:
    models = tmp_path / "lib" / "Model"
    models.mkdir(parents=True)
    (models / "User.py").write_text(_USER_SOURCE, encoding="utf-8")
    (models / "UserWithInjectByArgs.py").write_text(_USER_WITH_ARGS_SOURCE, encoding="utf-8")
    (tmp_path / "lib" / "ioc.json").write_text(
        json.dumps(
            {
                "User": {
                    "module": "./Model/User.py",
                    "scope": "prototype",
                    "props": {"name": "Doe", "firstname": "John"},
                },
                "UserWithInjectByArgs": {
                    "module": "./Model/UserWithInjectByArgs.py",
                    "args": ["Doe", "Jane"],
                },
                "Directory": {
                    "module": "./Model/User.py->User",
                    "props": {"owner": "*UserWithInjectByArgs"},
                },
            },
        ),
        encoding="utf-8",
    )
    return tmp_path


class TestContainerCreation:
    def test_requires_dirs_or_store(self) -> None:
        with pytest.raises(UsageError, match="dirs"):
            Container()

    def test_scans_directories_relative_to_exec_dir(self, app_dir: Path) -> None:
        container = Container(ContainerSettings(dirs=["lib"], exec_dir=app_dir))

        assert container.get_proto("User").getFullName() == "Doe John"
        assert container.get_proto("UserWithInjectByArgs").getFullName() == "Doe Jane"

    def test_scanned_definitions_merge_into_given_store(self, app_dir: Path) -> None:
        store = ConfigurationStore()
        store.add("Service", {"module": Service, "args": ["*UserWithInjectByArgs"]})

        container = Container(ContainerSettings(dirs=[app_dir]), store=store)

        service = container.get_proto("Service")
        assert service.args == (container.get_proto("UserWithInjectByArgs"),)
        assert container.store is store

    def test_settings_default_to_environment(
        self,
        monkeypatch: pytest.MonkeyPatch,
        app_dir: Path,
    ) -> None:
        monkeypatch.setenv("PROTOWIRE_DIRS", json.dumps([str(app_dir / "lib")]))
        monkeypatch.setenv("PROTOWIRE_INJECT_APP_CONTEXT", "true")

        container = Container()

        assert container.settings.dirs == [app_dir / "lib"]
        assert container.settings.inject_app_context is True
        user = container.get_proto("User")
        assert getattr(user, APP_CONTEXT_ATTRIBUTE) is container


class TestGetProto:
    def test_scopes_follow_definitions(self, app_dir: Path) -> None:
        container = Container(ContainerSettings(dirs=[app_dir]))

        assert container.get_proto("User") is not container.get_proto("User")
        assert container.get_proto("UserWithInjectByArgs") is container.get_proto(
            "UserWithInjectByArgs",
        )

    def test_references_across_files(self, app_dir: Path) -> None:
        container = Container(ContainerSettings(dirs=[app_dir]))

        directory = container.get_proto("Directory")

        assert directory.owner is container.get_proto("UserWithInjectByArgs")

    def test_missing_proto_raises(self, container: Container) -> None:
        with pytest.raises(UndefinedProtoError):
            container.get_proto("missing")

    def test_container_is_attached_when_enabled(self, store: ConfigurationStore) -> None:
        store.add("svc", {"module": Service})
        store.add("plain", {"module": Service, "injectAppContext": False})
        container = Container(ContainerSettings(inject_app_context=True), store=store)

        assert getattr(container.get_proto("svc"), APP_CONTEXT_ATTRIBUTE) is container
        assert not hasattr(container.get_proto("plain"), APP_CONTEXT_ATTRIBUTE)

    def test_container_is_attached_on_proto_opt_in(
        self,
        store: ConfigurationStore,
        container: Container,
    ) -> None:
        store.add("svc", {"module": Service, "injectAppContext": True})

        assert getattr(container.get_proto("svc"), APP_CONTEXT_ATTRIBUTE) is container


class TestGetProtos:
    def test_partial_batch_reports_each_failure(
        self,
        store: ConfigurationStore,
        container: Container,
    ) -> None:
        store.add("x", {"module": Service, "args": ["x"]})
        store.add("y", {"module": Service, "args": ["y"]})
        successes: list[list[Any]] = []
        errors: list[Exception] = []

        result = container.get_protos(["x", "bad", "y"], successes.append, errors.append)

        assert len(errors) == 1
        assert isinstance(errors[0], UndefinedProtoError)
        assert errors[0].proto_id == "bad"
        assert successes == [[container.get_proto("x"), container.get_proto("y")]]
        assert result == successes[0]

    def test_single_id_is_accepted(
        self,
        store: ConfigurationStore,
        container: Container,
    ) -> None:
        store.add("x", {"module": Service})
        successes: list[list[Any]] = []

        container.get_protos("x", successes.append)

        assert successes == [[container.get_proto("x")]]

    def test_errors_are_ignored_without_on_error(self, container: Container) -> None:
        successes: list[list[Any]] = []

        container.get_protos(["missing", "other"], successes.append)

        assert successes == [[]]

    def test_constructor_failures_are_isolated(
        self,
        store: ConfigurationStore,
        container: Container,
    ) -> None:
        store.add("broken", {"module": "json->loads", "args": ["{oops"]})
        store.add("ok", {"module": Service})
        errors: list[Exception] = []
        successes: list[list[Any]] = []

        container.get_protos(["broken", "ok"], successes.append, errors.append)

        assert [type(error).__name__ for error in errors] == ["JSONDecodeError"]
        assert successes == [[container.get_proto("ok")]]

    @pytest.mark.parametrize("on_success", [None, "callback", 42])
    def test_on_success_must_be_callable(self, container: Container, on_success: Any) -> None:
        with pytest.raises(UsageError, match="on_success"):
            container.get_protos(["x"], on_success)


def test_dependencies_of_delegates_to_factory(
    store: ConfigurationStore,
    container: Container,
) -> None:
    store.add("A", {"module": Service})
    store.add("B", {"module": Service, "args": ["*A"]})

    tree = container.dependencies_of("B")

    assert tree.proto_ids() == ["B", "A"]
    assert tree is container.proto_factory.dependencies_of("B")
