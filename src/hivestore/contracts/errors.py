"""Exception hierarchy for hivestore.

Fatal startup conditions, per-message classification failures and
backend write failures each get their own type so that hosts can decide
what to acknowledge, retry or drop.
"""


class HivestoreError(Exception):
    """Base exception for all hivestore errors."""


class SchemaDefinitionError(HivestoreError):
    """A table or user-defined-type schema document is invalid."""


class SchemaUnavailableError(HivestoreError):
    """Required schema objects never appeared in the storage backend.

    Fatal: the plugin cannot serve without its schema, so the process
    is terminated once this condition is reached.
    """

    def __init__(self, message: str, *, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class ClassificationError(HivestoreError):
    """An inbound message matches neither the command nor the notification shape."""


class PluginNotReadyError(HivestoreError):
    """A message arrived before schema verification and provisioning completed."""


class BackendWriteError(HivestoreError):
    """A storage backend failed to persist a message."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        self.table = table
        super().__init__(message)
