"""Routing table from logical table groups to physical tables."""

from dataclasses import dataclass

from hivestore.contracts.enums import TableGroup


@dataclass(frozen=True)
class TableAssignment:
    """Physical tables assigned to each table group.

    Built once during provisioning and read-only afterwards, so it can be
    shared by concurrent dispatch calls without locking. A group may map to
    several tables (each message is written to all of them) or to none.
    """

    commands: tuple[str, ...] = ()
    notifications: tuple[str, ...] = ()
    command_updates: tuple[str, ...] = ()

    def tables_for(self, group: TableGroup) -> tuple[str, ...]:
        """Return the tables assigned to a group."""
        if group is TableGroup.COMMANDS:
            return self.commands
        if group is TableGroup.NOTIFICATIONS:
            return self.notifications
        return self.command_updates

    def as_dict(self) -> dict[str, list[str]]:
        return {
            TableGroup.COMMANDS.value: list(self.commands),
            TableGroup.NOTIFICATIONS.value: list(self.notifications),
            TableGroup.COMMAND_UPDATES.value: list(self.command_updates),
        }
