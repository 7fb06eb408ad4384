"""Shared contracts for cross-boundary data types.

Import pattern:
    from hivestore.contracts import Command, ReadinessState, TableAssignment
"""

from hivestore.contracts.enums import MessageKind, ReadinessState, TableGroup
from hivestore.contracts.errors import (
    BackendWriteError,
    ClassificationError,
    HivestoreError,
    PluginNotReadyError,
    SchemaDefinitionError,
    SchemaUnavailableError,
)
from hivestore.contracts.assignment import TableAssignment
from hivestore.contracts.messages import (
    Command,
    Message,
    MessageEnvelope,
    Notification,
    parse_message,
)

__all__ = [
    # enums
    "MessageKind",
    "ReadinessState",
    "TableGroup",
    # errors
    "BackendWriteError",
    "ClassificationError",
    "HivestoreError",
    "PluginNotReadyError",
    "SchemaDefinitionError",
    "SchemaUnavailableError",
    # assignment
    "TableAssignment",
    # messages
    "Command",
    "Message",
    "MessageEnvelope",
    "Notification",
    "parse_message",
]
