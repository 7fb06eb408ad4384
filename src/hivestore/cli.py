"""hivestore Command Line Interface.

Entry point for the hivestore CLI tool.
"""

import sys
from collections import Counter
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

import typer
from pydantic import ValidationError

from hivestore import __version__
from hivestore.contracts import (
    BackendWriteError,
    ClassificationError,
    ReadinessState,
    SchemaDefinitionError,
)
from hivestore.core.config import HivestoreSettings, load_settings
from hivestore.core.logging import configure_logging
from hivestore.plugin.manager import BackendManager
from hivestore.plugin.service import StoragePluginService
from hivestore.storage.protocols import StorageBackendProtocol
from hivestore.storage.schema import SchemaSet, load_schema_set

app = typer.Typer(
    name="hivestore",
    help="hivestore: persist device commands and notifications to column-family storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"hivestore version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """hivestore: persist device commands and notifications to column-family storage."""
    pass


def _load_settings_or_exit(settings: str) -> HivestoreSettings:
    """Load settings and configure logging from them.

    Prints errors and exits 1 on failure.
    """
    try:
        config = load_settings(Path(settings))
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None
    configure_logging(config.logging.level, config.logging.json_output)
    return config


def _load_schemas_or_exit(config: HivestoreSettings) -> SchemaSet:
    try:
        return load_schema_set(config.schemas.tables, config.schemas.user_types)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except SchemaDefinitionError as e:
        typer.echo(f"Schema error: {e}", err=True)
        raise typer.Exit(1) from None


def _backend_or_exit(config: HivestoreSettings) -> StorageBackendProtocol:
    manager = BackendManager()
    manager.register_builtin_plugins()
    backend_cls = manager.get_backend_by_name(config.storage.backend)
    if backend_cls is None:
        typer.echo(f"Error: Unknown storage backend '{config.storage.backend}'", err=True)
        raise typer.Exit(1)
    return backend_cls(config.storage.url, echo=config.storage.echo)  # type: ignore[call-arg]


SETTINGS_OPTION = typer.Option(
    ...,
    "--settings",
    "-s",
    help="Path to settings YAML file.",
)


@app.command()
def validate(settings: str = SETTINGS_OPTION) -> None:
    """Validate settings and schema documents without connecting."""
    config = _load_settings_or_exit(settings)
    schemas = _load_schemas_or_exit(config)

    typer.echo(f"Configuration valid: {Path(settings).name}")
    typer.echo(f"  Backend: {config.storage.backend}")
    typer.echo(f"  Tables: {', '.join(schemas.table_names)}")
    typer.echo(f"  User types: {len(schemas.user_types)}")
    typer.echo(
        f"  Schema checks: {config.plugin.schema_checks_count} "
        f"every {config.plugin.schema_checks_interval}s"
    )
    typer.echo(
        "  Command updates storing: "
        f"{'enabled' if config.plugin.command_updates_storing else 'disabled'}"
    )


@app.command()
def check(settings: str = SETTINGS_OPTION) -> None:
    """Probe storage once for the required schema objects."""
    config = _load_settings_or_exit(settings)
    schemas = _load_schemas_or_exit(config)
    backend = _backend_or_exit(config)
    try:
        exists = backend.check_schemas_exist(schemas)
    finally:
        backend.close()

    if not exists:
        typer.echo("Storage schemas missing.", err=True)
        raise typer.Exit(1)
    typer.echo(f"Storage schemas present: {len(schemas.tables)} tables")


# Schema subcommand group
schema_app = typer.Typer(help="Schema management commands.")
app.add_typer(schema_app, name="schema")


@schema_app.command("create")
def schema_create(settings: str = SETTINGS_OPTION) -> None:
    """Create the tables declared in the schema documents."""
    config = _load_settings_or_exit(settings)
    schemas = _load_schemas_or_exit(config)
    backend = _backend_or_exit(config)

    if not hasattr(backend, "create_schemas"):
        typer.echo(
            f"Error: Backend '{config.storage.backend}' cannot create schemas", err=True
        )
        raise typer.Exit(1)
    try:
        created = backend.create_schemas(schemas)  # type: ignore[attr-defined]
    finally:
        backend.close()

    if created:
        typer.echo(f"Created tables: {', '.join(created)}")
    else:
        typer.echo("All tables already exist.")


def _iter_lines(stream: TextIO) -> Iterator[tuple[int, str]]:
    for line_no, line in enumerate(stream, start=1):
        line = line.strip()
        if line:
            yield line_no, line


@app.command()
def run(
    settings: str = SETTINGS_OPTION,
    input_path: str = typer.Option(
        "-",
        "--input",
        "-i",
        help="JSON Lines file of message envelopes ('-' reads stdin).",
    ),
) -> None:
    """Start the storage plugin and persist a stream of messages.

    Waits for the storage schema (exiting 1 if it never appears), then
    stores each envelope line. Unclassifiable messages are reported and
    skipped; a storage write failure stops the run.
    """
    config = _load_settings_or_exit(settings)

    try:
        plugin = StoragePluginService.from_settings(config)
    except (ValueError, FileNotFoundError, SchemaDefinitionError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    stream: TextIO
    if input_path == "-":
        stream = sys.stdin
    else:
        try:
            stream = Path(input_path).open(encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: Cannot read input: {e}", err=True)
            plugin.before_stop()
            raise typer.Exit(1) from None

    written: Counter[str] = Counter()
    rejected = 0
    try:
        if plugin.after_start() is not ReadinessState.READY:
            raise typer.Exit(1)

        for line_no, line in _iter_lines(stream):
            try:
                groups = plugin.handle_message(line)
            except ClassificationError as e:
                rejected += 1
                typer.echo(f"Line {line_no}: rejected: {e}", err=True)
                continue
            except BackendWriteError as e:
                typer.echo(f"Line {line_no}: storage write failed: {e}", err=True)
                raise typer.Exit(1) from None
            written.update(g.value for g in groups)
    finally:
        if stream is not sys.stdin:
            stream.close()
        plugin.before_stop()

    typer.echo("Run completed")
    typer.echo(f"  Commands stored: {written['commands']}")
    typer.echo(f"  Command updates stored: {written['command_updates']}")
    typer.echo(f"  Notifications stored: {written['notifications']}")
    typer.echo(f"  Messages rejected: {rejected}")


# Backends subcommand group
backends_app = typer.Typer(help="Storage backend commands.")
app.add_typer(backends_app, name="backends")


@backends_app.command("list")
def backends_list() -> None:
    """List registered storage backends."""
    manager = BackendManager()
    manager.register_builtin_plugins()

    typer.echo("\nBACKENDS:")
    for backend_cls in manager.get_backends():
        summary = (backend_cls.__doc__ or "").strip().splitlines()
        description = summary[0] if summary else ""
        typer.echo(f"  {backend_cls.name:12} - {description}")
    typer.echo()


if __name__ == "__main__":
    app()
