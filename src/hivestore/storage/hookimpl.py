"""Hook implementation for built-in storage backends."""

from typing import Any

from hivestore.plugin.hookspecs import hookimpl


class HivestoreBuiltinBackends:
    """Hook implementer for built-in storage backends."""

    @hookimpl
    def hivestore_get_backends(self) -> list[type[Any]]:
        """Return built-in backend classes."""
        from hivestore.storage.sql_backend import SQLStorageBackend

        return [SQLStorageBackend]


# Singleton instance for registration
builtin_backends = HivestoreBuiltinBackends()
