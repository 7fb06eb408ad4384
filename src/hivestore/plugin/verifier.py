"""Startup readiness verification and provisioning.

The plugin must not accept traffic until its schema exists in storage.
ReadinessVerifier polls the backend at a fixed interval up to a fixed
number of attempts; running out of attempts terminates the
process.
"""

import sys
import time
from collections.abc import Callable
from typing import Any

from hivestore.contracts import ReadinessState, SchemaUnavailableError, TableAssignment
from hivestore.core.config import PluginSettings
from hivestore.core.logging import get_logger
from hivestore.storage.protocols import StorageBackendProtocol
from hivestore.storage.schema import SchemaSet

logger = get_logger(__name__)

EXIT_SCHEMA_UNAVAILABLE = 1


class ReadinessVerifier:
    """Poll the storage backend until the schema exists or attempts run out.

    The delay and the termination primitive are injected so tests can run
    the exhaustion path without real elapsed time or a real exit. The
    default delay is ``time.sleep``, which blocks the calling thread
    between probes; hosts that must stay responsive while waiting should
    run ``verify()`` off their event loop or pass their own ``sleep``.

    Example:
        verifier = ReadinessVerifier(backend, schemas, settings.plugin)
        if verifier.verify() is ReadinessState.READY:
            assignment = provision(backend, schemas)
    """

    def __init__(
        self,
        backend: StorageBackendProtocol,
        schemas: SchemaSet,
        settings: PluginSettings,
        *,
        sleep: Callable[[float], Any] = time.sleep,
        exit: Callable[[int], Any] = sys.exit,
    ) -> None:
        self._backend = backend
        self._schemas = schemas
        self._checks_count = settings.schema_checks_count
        self._checks_interval = settings.schema_checks_interval
        self._sleep = sleep
        self._exit = exit

        self.state = ReadinessState.PENDING
        self.attempts = 0

    def verify(self) -> ReadinessState:
        """Probe for the schema until it exists or the attempt budget is spent.

        Returns:
            READY if a probe reported the schema, FAILED otherwise. FAILED is
            only returned when the injected exit primitive returns.

        Raises:
            RuntimeError: If this verifier already ran
        """
        if self.state is not ReadinessState.PENDING:
            raise RuntimeError(f"Readiness already verified: {self.state.value}")

        while True:
            exists = self._backend.check_schemas_exist(self._schemas)
            self.attempts += 1
            logger.debug("Schema probe", attempt=self.attempts, exists=exists)

            if exists:
                self.state = ReadinessState.READY
                logger.info("Storage schemas found", attempts=self.attempts)
                return self.state

            if self.attempts >= self._checks_count:
                self.state = ReadinessState.FAILED
                self._terminate()
                return self.state

            logger.info(
                "Storage schemas not found, waiting",
                attempt=self.attempts,
                max_attempts=self._checks_count,
                interval_seconds=self._checks_interval,
            )
            if self._checks_interval > 0:
                self._sleep(self._checks_interval)

    def _terminate(self) -> None:
        error = SchemaUnavailableError(
            f"Storage schemas have not been created after {self.attempts} checks "
            f"at {self._checks_interval}s intervals",
            attempts=self.attempts,
        )
        logger.error(
            "Storage schemas unavailable, exiting",
            exc_info=error,
            attempts=error.attempts,
            tables=self._schemas.table_names,
        )
        self._exit(EXIT_SCHEMA_UNAVAILABLE)


def provision(backend: StorageBackendProtocol, schemas: SchemaSet) -> TableAssignment:
    """Apply the schema set and assign tables to every table group.

    Table schemas are applied first, then user-defined types, and only then
    are tables assigned, since assignment reads the applied table schemas.

    Returns:
        The backend's completed TableAssignment
    """
    backend.set_table_schemas(schemas)
    backend.set_udt_schemas(schemas)

    backend.assign_tables_to_commands()
    backend.assign_tables_to_notifications()
    backend.assign_tables_to_command_updates()

    assignment = backend.table_assignment
    logger.info("Storage provisioned", assignment=assignment.as_dict())
    return assignment
