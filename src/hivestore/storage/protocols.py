"""Storage backend protocol.

The backend is the plugin's only collaborator with real I/O: schema
probing, schema registration, table-group assignment and message writes.
It's used for type checking and for the runtime isinstance check the
backend manager performs at registration.

Lifecycle:
1. __init__(url, echo=...) - Backend instantiation (connects lazily)
2. check_schemas_exist(schemas) - Probed until True or the budget runs out
3. set_table_schemas / set_udt_schemas - Provisioning, tables first
4. assign_tables_to_* - Build the TableAssignment
5. insert_* - One call per dispatched write
6. close() - Release connections
"""

from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from hivestore.contracts import Command, Notification, TableAssignment
    from hivestore.storage.schema import SchemaSet


@runtime_checkable
class StorageBackendProtocol(Protocol):
    """Protocol for storage backends.

    Provisioning methods return the backend itself so calls can be chained:

        backend.set_table_schemas(schemas).set_udt_schemas(schemas)
    """

    name: str

    def check_schemas_exist(self, schemas: "SchemaSet") -> bool:
        """Probe whether every schema object exists in storage.

        Must not create or alter anything.
        """
        ...

    def set_table_schemas(self, schemas: "SchemaSet") -> Self:
        """Register the table schemas with the backend."""
        ...

    def set_udt_schemas(self, schemas: "SchemaSet") -> Self:
        """Register the user-defined-type schemas with the backend."""
        ...

    def assign_tables_to_commands(self) -> Self:
        """Assign the tables that store commands."""
        ...

    def assign_tables_to_notifications(self) -> Self:
        """Assign the tables that store notifications."""
        ...

    def assign_tables_to_command_updates(self) -> Self:
        """Assign the tables that store command updates."""
        ...

    @property
    def table_assignment(self) -> "TableAssignment":
        """The assignment built by the assign_tables_to_* calls."""
        ...

    def insert_command(self, message: "Command", tables: tuple[str, ...]) -> None:
        """Write a command to each of the given tables.

        Raises:
            BackendWriteError: If the write fails
        """
        ...

    def insert_command_update(self, message: "Command", tables: tuple[str, ...]) -> None:
        """Write a command update to each of the given tables.

        Raises:
            BackendWriteError: If the write fails
        """
        ...

    def insert_notification(
        self, message: "Notification", tables: tuple[str, ...]
    ) -> None:
        """Write a notification to each of the given tables.

        Raises:
            BackendWriteError: If the write fails
        """
        ...

    def close(self) -> None:
        """Release backend resources. Must be idempotent."""
        ...
