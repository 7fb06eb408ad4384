"""Tests for table assignment and readiness enums."""

from dataclasses import FrozenInstanceError

import pytest

from hivestore.contracts import ReadinessState, TableAssignment, TableGroup


class TestTableAssignment:
    def test_tables_for_each_group(self) -> None:
        assignment = TableAssignment(
            commands=("c",), notifications=("n1", "n2"), command_updates=()
        )

        assert assignment.tables_for(TableGroup.COMMANDS) == ("c",)
        assert assignment.tables_for(TableGroup.NOTIFICATIONS) == ("n1", "n2")
        assert assignment.tables_for(TableGroup.COMMAND_UPDATES) == ()

    def test_is_frozen(self) -> None:
        assignment = TableAssignment()

        with pytest.raises(FrozenInstanceError):
            assignment.commands = ("x",)  # type: ignore[misc]

    def test_as_dict_uses_group_names(self) -> None:
        assert TableAssignment(commands=("c",)).as_dict() == {
            "commands": ["c"],
            "notifications": [],
            "command_updates": [],
        }


class TestReadinessState:
    def test_only_pending_is_non_terminal(self) -> None:
        assert not ReadinessState.PENDING.is_terminal
        assert ReadinessState.READY.is_terminal
        assert ReadinessState.FAILED.is_terminal

    def test_values_are_strings(self) -> None:
        assert ReadinessState.READY.value == "ready"
        assert TableGroup("command_updates") is TableGroup.COMMAND_UPDATES
