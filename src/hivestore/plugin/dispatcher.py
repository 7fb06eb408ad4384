"""Route classified messages to storage writes."""

from hivestore.contracts import (
    ClassificationError,
    Command,
    Message,
    Notification,
    TableAssignment,
    TableGroup,
)
from hivestore.core.config import PluginSettings
from hivestore.core.logging import get_logger
from hivestore.storage.protocols import StorageBackendProtocol

logger = get_logger(__name__)


class MessageDispatcher:
    """Stateless router from message shape to backend insert calls.

    Routing:
    - Command: insert into the commands group
    - Command with is_updated, when command update storing is enabled:
      additionally insert into the command_updates group
    - Notification: insert into the notifications group

    No batching, retries or deduplication: dispatching a message twice
    writes it twice, and backend errors propagate unchanged.
    """

    def __init__(self, backend: StorageBackendProtocol) -> None:
        self._backend = backend

    def dispatch(
        self,
        message: Message,
        assignment: TableAssignment,
        settings: PluginSettings,
    ) -> tuple[TableGroup, ...]:
        """Write a message to the tables of the group(s) it belongs to.

        Returns only after every triggered insert has returned.

        Args:
            message: Parsed Command or Notification
            assignment: Table assignment built during provisioning
            settings: Plugin settings (command update storing flag)

        Returns:
            The table groups written, in write order

        Raises:
            ClassificationError: If message is neither a Command nor a Notification
            BackendWriteError: If the backend fails a write
        """
        if isinstance(message, Command):
            self._backend.insert_command(message, assignment.commands)
            written = [TableGroup.COMMANDS]

            if message.is_updated and settings.command_updates_storing:
                self._backend.insert_command_update(message, assignment.command_updates)
                written.append(TableGroup.COMMAND_UPDATES)

            logger.debug(
                "Command dispatched",
                device_id=message.device_id,
                command=message.command,
                groups=[g.value for g in written],
            )
            return tuple(written)

        if isinstance(message, Notification):
            self._backend.insert_notification(message, assignment.notifications)
            logger.debug(
                "Notification dispatched",
                device_id=message.device_id,
                notification=message.notification,
            )
            return (TableGroup.NOTIFICATIONS,)

        raise ClassificationError(
            f"Cannot classify message of type {type(message).__name__}"
        )
