"""Tests for the hivestore CLI."""

import json
import logging
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from hivestore.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    """`run` points the root handler at the runner's stderr; detach it afterwards."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, logging.StreamHandler):
            root.removeHandler(handler)
    structlog.reset_defaults()


def _create_schemas(settings_file: Path) -> None:
    result = runner.invoke(app, ["schema", "create", "--settings", str(settings_file)])
    assert result.exit_code == 0, result.output


class TestCLIBasics:
    """Basic CLI tests."""

    def test_cli_exists(self) -> None:
        assert app is not None

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "hivestore version" in result.output

    def test_help_flag(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "validate", "check", "schema", "backends"):
            assert command in result.output


class TestValidateCommand:
    def test_valid_config(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["validate", "--settings", str(settings_file)])

        assert result.exit_code == 0
        assert "Configuration valid: settings.yaml" in result.output
        assert "commands_by_device" in result.output
        assert "Schema checks: 2 every 0" in result.output
        assert "Command updates storing: enabled" in result.output

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["validate", "--settings", str(tmp_path / "nope.yaml")]
        )

        assert result.exit_code == 1
        assert "Settings file not found" in result.output

    def test_invalid_settings_reported(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
storage:
  url: "sqlite:///x.db"
schemas:
  tables: "tables.json"
plugin:
  schema_checks_count: 0
""")
        result = runner.invoke(app, ["validate", "-s", str(config_file)])

        assert result.exit_code == 1
        assert "plugin.schema_checks_count" in result.output

    def test_missing_schema_document(
        self, settings_file: Path, schema_files: tuple[Path, Path]
    ) -> None:
        schema_files[0].unlink()

        result = runner.invoke(app, ["validate", "-s", str(settings_file)])

        assert result.exit_code == 1
        assert "tables.json" in result.output

    def test_invalid_schema_document(
        self, settings_file: Path, schema_files: tuple[Path, Path]
    ) -> None:
        schema_files[0].write_text("{broken")

        result = runner.invoke(app, ["validate", "-s", str(settings_file)])

        assert result.exit_code == 1
        assert "Schema error" in result.output


class TestCheckAndSchemaCreate:
    def test_check_fails_before_create(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["check", "-s", str(settings_file)])

        assert result.exit_code == 1
        assert "Storage schemas missing." in result.output

    def test_create_then_check(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["schema", "create", "-s", str(settings_file)])
        assert result.exit_code == 0
        assert "Created tables:" in result.output
        assert "notifications_by_device" in result.output

        result = runner.invoke(app, ["check", "-s", str(settings_file)])
        assert result.exit_code == 0
        assert "Storage schemas present: 3 tables" in result.output

    def test_create_output_not_preceded_by_log_lines(self, settings_file: Path) -> None:
        """Logging follows logging.level from settings (warning here)."""
        result = runner.invoke(app, ["schema", "create", "-s", str(settings_file)])

        assert result.exit_code == 0
        assert result.stdout.splitlines()[0].startswith("Created tables: ")

    def test_check_emits_no_debug_logs(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["check", "-s", str(settings_file)])

        assert result.exit_code == 1
        assert "Table missing" not in result.output

    def test_create_is_idempotent(self, settings_file: Path) -> None:
        _create_schemas(settings_file)

        result = runner.invoke(app, ["schema", "create", "-s", str(settings_file)])

        assert result.exit_code == 0
        assert "All tables already exist." in result.output


class TestRunCommand:
    @pytest.fixture
    def messages_file(self, tmp_path: Path) -> Path:
        lines = [
            {"command": {"id": 1, "deviceId": "dev-1", "command": "reboot"}},
            {
                "command": {
                    "id": 1,
                    "deviceId": "dev-1",
                    "command": "reboot",
                    "status": "done",
                    "isUpdated": True,
                }
            },
            {
                "notification": {
                    "id": 5,
                    "deviceId": "dev-1",
                    "notification": "temperature",
                    "parameters": {"value": 21.5, "unit": "C"},
                }
            },
            {"alert": {"deviceId": "dev-1"}},
        ]
        path = tmp_path / "messages.jsonl"
        path.write_text("\n".join(json.dumps(line) for line in lines) + "\n\n")
        return path

    def test_run_stores_messages(self, settings_file: Path, messages_file: Path) -> None:
        _create_schemas(settings_file)

        result = runner.invoke(
            app, ["run", "-s", str(settings_file), "-i", str(messages_file)]
        )

        assert result.exit_code == 0, result.output
        assert "Run completed" in result.output
        assert "Commands stored: 2" in result.output
        assert "Command updates stored: 1" in result.output
        assert "Notifications stored: 1" in result.output
        assert "Messages rejected: 1" in result.output
        assert "Line 4: rejected" in result.output

    def test_run_reads_stdin(self, settings_file: Path) -> None:
        _create_schemas(settings_file)
        envelope = {"notification": {"id": 1, "deviceId": "d", "notification": "n"}}

        result = runner.invoke(
            app, ["run", "-s", str(settings_file)], input=json.dumps(envelope) + "\n"
        )

        assert result.exit_code == 0, result.output
        assert "Notifications stored: 1" in result.output

    def test_run_exits_when_schemas_missing(
        self, settings_file: Path, messages_file: Path
    ) -> None:
        result = runner.invoke(
            app, ["run", "-s", str(settings_file), "-i", str(messages_file)]
        )

        assert result.exit_code == 1
        assert "Run completed" not in result.output

    def test_run_unknown_backend(self, tmp_path: Path, settings_file: Path) -> None:
        config_file = tmp_path / "other.yaml"
        config_file.write_text(
            settings_file.read_text().replace("backend: sql", "backend: cassandra")
        )

        result = runner.invoke(app, ["run", "-s", str(config_file), "-i", "-"], input="")

        assert result.exit_code == 1
        assert "Unknown storage backend 'cassandra'" in result.output

    def test_run_missing_input(self, settings_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["run", "-s", str(settings_file), "-i", str(tmp_path / "none.jsonl")]
        )

        assert result.exit_code == 1
        assert "Cannot read input" in result.output


class TestBackendsCommand:
    def test_lists_builtin_backend(self) -> None:
        result = runner.invoke(app, ["backends", "list"])

        assert result.exit_code == 0
        assert "BACKENDS:" in result.output
        assert "sql" in result.output
