"""Status codes and group names shared across subsystem boundaries."""

from enum import Enum


class ReadinessState(str, Enum):
    """Lifecycle state of a storage plugin.

    Transitions are monotonic: PENDING -> READY or PENDING -> FAILED.
    Neither terminal state is ever left.
    """

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ReadinessState.PENDING


class TableGroup(str, Enum):
    """Logical group of storage tables.

    Uses (str, Enum) because the value appears verbatim in the
    ``groups`` list of a table schema document.
    """

    COMMANDS = "commands"
    NOTIFICATIONS = "notifications"
    COMMAND_UPDATES = "command_updates"


class MessageKind(str, Enum):
    """Wire key that carries the message payload in an inbound envelope."""

    COMMAND = "command"
    NOTIFICATION = "notification"
