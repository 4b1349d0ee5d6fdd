from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from protowire._internal.dependency_tree import DependencyNode
from protowire._internal.module_loader import ModuleLoader
from protowire._internal.proto_factory import ProtoFactory
from protowire._internal.scanner import ConfigurationScanner
from protowire._internal.settings import ContainerSettings
from protowire._internal.store import ConfigurationStore
from protowire.exceptions import UsageError

logger = logging.getLogger(__name__)


def _ignore_error(_error: Exception) -> None:
    return None


class Container:
    """Expose proto resolution to application code.

    A container owns a configuration store, a module loader and a
    ``ProtoFactory``. The store is populated by scanning ``settings.dirs``
    for source files and ``ioc.json`` files, or supplied directly for
    programmatic registration. The container sets itself as the factory's
    application context, so instances that opt in receive it as
    ``__app_context__``.
    """

    def __init__(
        self,
        settings: ContainerSettings | None = None,
        *,
        store: ConfigurationStore | None = None,
        loader: ModuleLoader | None = None,
    ) -> None:
        """Initialize a container and load its proto definitions.

        Args:
            settings: Container settings; read from ``PROTOWIRE_*`` environment
                variables when omitted.
            store: Pre-populated store. Scanned definitions are merged into it.
            loader: Module loader shared with other containers, if any.

        Raises:
            UsageError: If no directories are configured and no store is given.
            ConfigurationFileError: If a scanned configuration file is malformed.

        Examples:
            .. code-block:: python

                container = Container(ContainerSettings(dirs=["app/services"]))
                mailer = container.get_proto("Mailer")

                store = ConfigurationStore()
                store.add("clock", {"module": "app.clock->SystemClock"})
                container = Container(store=store)

        """
        self._settings = settings if settings is not None else ContainerSettings()
        if not self._settings.dirs and store is None:
            msg = "Container requires 'dirs' to scan or an explicit 'store'."
            raise UsageError(msg)

        self._store = store if store is not None else ConfigurationStore()
        ConfigurationScanner(self._settings).populate(self._store)
        logger.debug("Container loaded %d proto definition(s)", len(self._store))

        self._proto_factory = ProtoFactory(
            self._store,
            loader,
            inject_app_context=self._settings.inject_app_context,
        )
        self._proto_factory.app_context = self

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    @property
    def store(self) -> ConfigurationStore:
        return self._store

    @property
    def proto_factory(self) -> ProtoFactory:
        return self._proto_factory

    def get_proto(self, proto_id: str) -> Any:
        """Resolve a proto id into a fully wired instance.

        Args:
            proto_id: Identifier of the proto to resolve.

        Raises:
            UndefinedProtoError: If the id, or an id it references, has no definition.

        """
        return self._proto_factory.get_proto(proto_id)

    def get_protos(
        self,
        proto_ids: str | Sequence[str],
        on_success: Callable[[list[Any]], Any],
        on_error: Callable[[Exception], Any] | None = None,
    ) -> list[Any]:
        """Resolve several proto ids, isolating failures per id.

        Every failing id is reported to ``on_error`` and skipped; the batch
        continues. ``on_success`` is called once with the resolved instances
        in request order, which may hold fewer items than requested.

        Args:
            proto_ids: One proto id or a sequence of ids.
            on_success: Called with the list of resolved instances.
            on_error: Called with each resolution failure. Defaults to a no-op.

        Returns:
            The list passed to ``on_success``.

        Raises:
            UsageError: If ``on_success`` is not callable.

        Examples:
            .. code-block:: python

                container.get_protos(
                    ["db", "mailer"],
                    lambda protos: start(*protos),
                    lambda error: log.warning("skipped: %s", error),
                )

        """
        if not callable(on_success):
            msg = "get_protos() parameter 'on_success' must be callable."
            raise UsageError(msg)
        if not callable(on_error):
            on_error = _ignore_error

        if isinstance(proto_ids, str):
            proto_ids = [proto_ids]

        protos: list[Any] = []
        for proto_id in proto_ids:
            try:
                protos.append(self._proto_factory.get_proto(proto_id))
            except Exception as error:  # noqa: BLE001
                logger.debug("Resolution of proto '%s' failed: %s", proto_id, error)
                on_error(error)

        on_success(protos)
        return protos

    def dependencies_of(self, proto_id: str) -> DependencyNode:
        """Return the dependency tree of a proto id without instantiating anything.

        Args:
            proto_id: Identifier whose dependencies are collected.

        """
        return self._proto_factory.dependencies_of(proto_id)


__all__ = ["Container"]
