"""Shared test fixtures and helpers.

Provides schema documents, a chainable storage backend double and
settings-file builders used across the suite.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml
from hypothesis import Phase, Verbosity, settings

from hivestore.contracts import TableAssignment
from hivestore.storage.schema import SchemaSet
from hivestore.storage.sql_backend import SQLStorageBackend

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Schema documents
# =============================================================================


@pytest.fixture
def tables_doc() -> dict[str, Any]:
    """Three tables: commands (also updated in place), an update log, notifications."""
    return {
        "tables": {
            "commands_by_device": {
                "fields": {
                    "id": "bigint",
                    "device_id": "text",
                    "command": "text",
                    "timestamp": "timestamp",
                    "parameters": "text",
                    "status": "text",
                    "result": "text",
                },
                "primaryKey": ["device_id"],
                "clusteringKey": ["id"],
                "groups": ["commands", "command_updates"],
            },
            "command_updates_log": {
                "fields": {
                    "id": "bigint",
                    "device_id": "text",
                    "status": "text",
                    "result": "text",
                },
                "primaryKey": ["id"],
                "groups": ["command_updates"],
            },
            "notifications_by_device": {
                "fields": {
                    "id": "bigint",
                    "device_id": "text",
                    "notification": "text",
                    "parameters": "frozen<reading>",
                    "tags": "list<text>",
                },
                "primaryKey": ["device_id"],
                "clusteringKey": ["id"],
                "groups": ["notifications"],
            },
        }
    }


@pytest.fixture
def types_doc() -> dict[str, Any]:
    return {"types": {"reading": {"value": "double", "unit": "text"}}}


@pytest.fixture
def schemas(tables_doc: dict[str, Any], types_doc: dict[str, Any]) -> SchemaSet:
    return SchemaSet.from_documents(tables_doc, types_doc)


@pytest.fixture
def schema_files(
    tmp_path: Path, tables_doc: dict[str, Any], types_doc: dict[str, Any]
) -> tuple[Path, Path]:
    """Write the schema documents to disk."""
    tables_path = tmp_path / "tables.json"
    types_path = tmp_path / "user_types.json"
    tables_path.write_text(json.dumps(tables_doc))
    types_path.write_text(json.dumps(types_doc))
    return tables_path, types_path


@pytest.fixture
def settings_file(tmp_path: Path, schema_files: tuple[Path, Path]) -> Path:
    """Settings YAML pointing at an SQLite file and the schema documents.

    Schema paths are relative so that resolution against the settings file
    directory is exercised.
    """
    config = {
        "plugin": {
            "schema_checks_count": 2,
            "schema_checks_interval": 0,
            "command_updates_storing": True,
        },
        "storage": {"backend": "sql", "url": f"sqlite:///{tmp_path / 'store.db'}"},
        "schemas": {"tables": "tables.json", "user_types": "user_types.json"},
        "logging": {"level": "warning"},
    }
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(config))
    return path


# =============================================================================
# Backend double
# =============================================================================

CHAINABLE_METHODS = (
    "set_table_schemas",
    "set_udt_schemas",
    "assign_tables_to_commands",
    "assign_tables_to_notifications",
    "assign_tables_to_command_updates",
)


@pytest.fixture
def assignment() -> TableAssignment:
    return TableAssignment(
        commands=("commands_by_device",),
        notifications=("notifications_by_device",),
        command_updates=("commands_by_device", "command_updates_log"),
    )


@pytest.fixture
def backend(assignment: TableAssignment) -> MagicMock:
    """Backend double: schemas exist, provisioning calls chain, writes succeed."""
    mock = MagicMock(spec=SQLStorageBackend)
    mock.name = "mock"
    for method in CHAINABLE_METHODS:
        getattr(mock, method).return_value = mock
    mock.check_schemas_exist.return_value = True
    mock.table_assignment = assignment
    return mock
