# src/hivestore/plugin/service.py
"""Storage plugin lifecycle.

StoragePluginService is what a message host drives:

1. after_start() - verify the schema, provision tables, become READY
2. handle_message(msg) - classify and persist one inbound message
3. before_stop() - release the storage backend

The host must not deliver messages before after_start() returned with the
plugin READY; handle_message() refuses them with PluginNotReadyError.
"""

import sys
import time
from collections.abc import Callable, Mapping
from typing import Any, Self

from hivestore.contracts import (
    Message,
    PluginNotReadyError,
    ReadinessState,
    TableAssignment,
    TableGroup,
    parse_message,
)
from hivestore.core.config import HivestoreSettings, PluginSettings
from hivestore.core.logging import get_logger
from hivestore.plugin.dispatcher import MessageDispatcher
from hivestore.plugin.manager import BackendManager
from hivestore.plugin.verifier import ReadinessVerifier, provision
from hivestore.storage.protocols import StorageBackendProtocol
from hivestore.storage.schema import SchemaSet, load_schema_set

logger = get_logger(__name__)


class StoragePluginService:
    """Bridge an inbound device message stream to a storage backend."""

    def __init__(
        self,
        settings: PluginSettings,
        backend: StorageBackendProtocol,
        schemas: SchemaSet,
        *,
        sleep: Callable[[float], Any] = time.sleep,
        exit: Callable[[int], Any] = sys.exit,
    ) -> None:
        """Initialize the plugin.

        Args:
            settings: Frozen plugin settings, fixed for the plugin lifetime
            backend: Storage backend to probe, provision and write to
            schemas: Schema set the backend must hold
            sleep: Delay between schema probes (injected for tests)
            exit: Process termination primitive (injected for tests)
        """
        self._settings = settings
        self._backend = backend
        self._schemas = schemas
        self._verifier = ReadinessVerifier(
            backend, schemas, settings, sleep=sleep, exit=exit
        )
        self._dispatcher = MessageDispatcher(backend)

        self._state = ReadinessState.PENDING
        self._assignment: TableAssignment | None = None
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: HivestoreSettings,
        manager: BackendManager | None = None,
        **kwargs: Any,
    ) -> Self:
        """Build a plugin from top-level settings.

        Instantiates the backend named in ``storage.backend`` and loads the
        schema documents named in ``schemas``.

        Raises:
            ValueError: If no backend is registered under that name
            FileNotFoundError: If a schema document is missing
            SchemaDefinitionError: If a schema document is invalid
        """
        if manager is None:
            manager = BackendManager()
            manager.register_builtin_plugins()

        backend_cls = manager.get_backend_by_name(settings.storage.backend)
        if backend_cls is None:
            available = sorted(b.name for b in manager.get_backends())
            raise ValueError(
                f"Unknown storage backend '{settings.storage.backend}'. "
                f"Available: {', '.join(available)}"
            )

        schemas = load_schema_set(settings.schemas.tables, settings.schemas.user_types)
        backend = backend_cls(settings.storage.url, echo=settings.storage.echo)  # type: ignore[call-arg]
        return cls(settings.plugin, backend, schemas, **kwargs)

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def assignment(self) -> TableAssignment | None:
        return self._assignment

    @property
    def backend(self) -> StorageBackendProtocol:
        return self._backend

    def after_start(self) -> ReadinessState:
        """Verify the storage schema and provision table groups.

        On exhaustion the verifier terminates the process; the FAILED state
        is only observable when the termination primitive is replaced.

        Raises:
            RuntimeError: If the plugin was already started
        """
        if self._state is not ReadinessState.PENDING:
            raise RuntimeError(f"Plugin already started: {self._state.value}")

        if self._verifier.verify() is not ReadinessState.READY:
            self._state = ReadinessState.FAILED
            return self._state

        self._assignment = provision(self._backend, self._schemas)
        self._state = ReadinessState.READY
        logger.info("Storage plugin ready", backend=self._backend.name)
        return self._state

    def handle_message(
        self, message: Message | Mapping[str, Any] | str | bytes
    ) -> tuple[TableGroup, ...]:
        """Persist one inbound message.

        Args:
            message: Parsed message, or a raw envelope to parse

        Returns:
            The table groups the message was written to

        Raises:
            PluginNotReadyError: If the plugin is not READY
            ClassificationError: If the message matches no known variant
            BackendWriteError: If the backend fails a write
        """
        if self._state is not ReadinessState.READY or self._assignment is None:
            raise PluginNotReadyError(
                f"Storage plugin is not ready (state: {self._state.value})"
            )
        if isinstance(message, (Mapping, str, bytes)):
            message = parse_message(message)
        return self._dispatcher.dispatch(message, self._assignment, self._settings)

    def before_stop(self) -> None:
        """Release the storage backend. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._backend.close()
        logger.info("Storage plugin stopped")
