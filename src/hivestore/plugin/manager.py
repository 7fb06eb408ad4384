"""Backend manager for discovery, registration and lookup.

Uses pluggy for hook-based backend registration.
"""

from typing import Any

import pluggy

from hivestore.plugin.hookspecs import PROJECT_NAME, HivestoreBackendSpec
from hivestore.storage.protocols import StorageBackendProtocol


class BackendManager:
    """Manages storage backend discovery, registration, and lookup.

    Usage:
        manager = BackendManager()
        manager.register_builtin_plugins()

        backend_cls = manager.get_backend_by_name("sql")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(HivestoreBackendSpec)

        # Cache - maps name to backend class for duplicate detection
        self._backends: dict[str, type[StorageBackendProtocol]] = {}

    def register_builtin_plugins(self) -> None:
        """Register the built-in backend hook implementer.

        Call this once at startup to make built-in backends discoverable.
        """
        from hivestore.storage.hookimpl import builtin_backends

        self.register(builtin_backends)

    def register(self, plugin: Any) -> None:
        """Register a hook implementer.

        Args:
            plugin: Instance implementing hivestore_get_backends
        """
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Refresh backend cache from hooks.

        Raises:
            ValueError: If two backends share a name, or a backend class
                doesn't declare a name
        """
        new_backends: dict[str, type[StorageBackendProtocol]] = {}

        for backends in self._pm.hook.hivestore_get_backends():
            for cls in backends:
                try:
                    name = cls.name
                except AttributeError:
                    raise ValueError(
                        f"Backend {cls.__name__} must define 'name' attribute. "
                        f"Add: name = 'your_backend_name' to the class."
                    ) from None
                if name in new_backends:
                    raise ValueError(
                        f"Duplicate backend name: '{name}'. "
                        f"Already registered by {new_backends[name].__name__}"
                    )
                new_backends[name] = cls

        # All validated, update cache
        self._backends = new_backends

    def get_backends(self) -> list[type[StorageBackendProtocol]]:
        """Get all registered backends."""
        return list(self._backends.values())

    def get_backend_by_name(self, name: str) -> type[StorageBackendProtocol] | None:
        """Get backend class by name."""
        return self._backends.get(name)
