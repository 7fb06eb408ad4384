# src/hivestore/core/config.py
"""
Configuration schema and loading for the hivestore plugin.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction: the plugin reads them
once at startup and never re-reads them mid-run.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class PluginSettings(BaseModel):
    """Startup verification and routing behaviour.

    Example YAML:
        plugin:
          schema_checks_count: 10      # probes before giving up
          schema_checks_interval: 1.0  # seconds between probes
          command_updates_storing: true
    """

    model_config = {"frozen": True}

    schema_checks_count: int = Field(
        default=10,
        gt=0,
        description="Maximum schema-existence probes before the process exits",
    )
    schema_checks_interval: float = Field(
        default=1.0,
        ge=0,
        description="Seconds between probes (0 polls without waiting)",
    )
    command_updates_storing: bool = Field(
        default=False,
        description="Also persist command updates to the command_updates group",
    )


class StorageSettings(BaseModel):
    """Storage backend connection configuration."""

    model_config = {"frozen": True}

    backend: str = Field(default="sql", description="Registered backend name")
    url: str = Field(description="Backend connection URL")
    echo: bool = Field(default=False, description="Echo statements (debugging)")

    @field_validator("url")
    @classmethod
    def validate_url_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("url cannot be empty")
        return v


class SchemaFilesSettings(BaseModel):
    """Location of the table and user-defined-type schema documents."""

    model_config = {"frozen": True}

    tables: Path = Field(description="JSON document with table schemas")
    user_types: Path | None = Field(
        default=None, description="JSON document with user-defined types"
    )

    def resolved(self, base_dir: Path) -> "SchemaFilesSettings":
        """Return a copy with relative paths resolved against base_dir."""

        def _resolve(p: Path | None) -> Path | None:
            if p is None or p.is_absolute():
                return p
            return base_dir / p

        return SchemaFilesSettings(
            tables=_resolve(self.tables),  # type: ignore[arg-type]
            user_types=_resolve(self.user_types),
        )


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class HivestoreSettings(BaseModel):
    """Top-level hivestore configuration.

    This is the single source of truth for a plugin instance.
    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    storage: StorageSettings = Field(description="Storage backend configuration")
    schemas: SchemaFilesSettings = Field(description="Schema document locations")
    plugin: PluginSettings = Field(
        default_factory=PluginSettings,
        description="Verification and routing behaviour",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )


def load_settings(config_path: Path) -> HivestoreSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (HIVESTORE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: HIVESTORE_PLUGIN__SCHEMA_CHECKS_COUNT for
    nested keys. Relative schema paths are resolved against the directory
    of the config file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated HivestoreSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="HIVESTORE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): _lower_keys(v)
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }
    settings = HivestoreSettings(**raw_config)
    return settings.model_copy(
        update={"schemas": settings.schemas.resolved(config_path.parent)}
    )


def _lower_keys(value: Any) -> Any:
    # Env overrides of nested keys arrive uppercased
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def resolve_config(settings: HivestoreSettings) -> dict[str, Any]:
    """Convert validated settings to a JSON-serialisable dict for logging."""
    return settings.model_dump(mode="json")
