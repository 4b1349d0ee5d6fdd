"""Shared pytest fixtures for protowire tests."""

import pytest

from protowire import ConfigurationStore, Container, ModuleLoader, ProtoFactory


@pytest.fixture(autouse=True)
def _clean_protowire_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep container settings independent from the developer's environment."""
    for name in ("DIRS", "EXEC_DIR", "INJECT_APP_CONTEXT", "IOC_JSON_NAME"):
        monkeypatch.delenv(f"PROTOWIRE_{name}", raising=False)


@pytest.fixture()
def store() -> ConfigurationStore:
    """Empty configuration store."""
    return ConfigurationStore()


@pytest.fixture()
def loader() -> ModuleLoader:
    """Module loader with an empty cache."""
    return ModuleLoader()


@pytest.fixture()
def factory(store: ConfigurationStore, loader: ModuleLoader) -> ProtoFactory:
    """Proto factory over the shared store with app context injection disabled."""
    return ProtoFactory(store, loader)


@pytest.fixture()
def container(store: ConfigurationStore) -> Container:
    """Container over the shared store, without directory scanning."""
    return Container(store=store)
