"""Core infrastructure: configuration and logging."""

from hivestore.core.config import (
    HivestoreSettings,
    LoggingSettings,
    PluginSettings,
    SchemaFilesSettings,
    StorageSettings,
    load_settings,
    resolve_config,
)
from hivestore.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "HivestoreSettings",
    "LoggingSettings",
    "PluginSettings",
    "SchemaFilesSettings",
    "StorageSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
    "resolve_config",
]
