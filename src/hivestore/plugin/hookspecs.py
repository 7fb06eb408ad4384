"""pluggy hook specifications for hivestore storage backends.

Backend packages implement these hooks to register themselves with the
plugin. The backend manager calls them during discovery.

Usage (implementing a backend package):
    from hivestore.plugin.hookspecs import hookimpl

    class MyBackends:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def hivestore_get_backends(self):
            return [MyBackend]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from hivestore.storage.protocols import StorageBackendProtocol

# Project name for pluggy
PROJECT_NAME = "hivestore"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class HivestoreBackendSpec:
    """Hook specifications for storage backends."""

    @hookspec
    def hivestore_get_backends(self) -> list[type["StorageBackendProtocol"]]:  # type: ignore[empty-body]
        """Return storage backend classes.

        Returns:
            List of backend classes (not instances)
        """
