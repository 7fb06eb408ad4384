"""Inbound device message contracts.

A message is a tagged union of ``Command`` and ``Notification``. On the
wire it arrives as an envelope object carrying exactly one of the keys
``command`` or ``notification``:

    {"command": {"id": 1, "command": "reboot", "deviceId": "dev-1", "isUpdated": true}}
    {"notification": {"id": 7, "notification": "temperature", "deviceId": "dev-1"}}

Wire field names are camelCase and accepted as aliases; Python attribute
names and storage column names are snake_case.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from hivestore.contracts.enums import MessageKind
from hivestore.contracts.errors import ClassificationError


class _MessageModel(BaseModel):
    """Shared configuration for message payloads.

    Unknown wire keys are ignored: the transport may add fields that no
    storage table cares about.
    """

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    id: int | None = None
    device_id: str
    network_id: int | None = None
    device_type_id: int | None = None
    timestamp: datetime | None = None
    parameters: Any = None

    def to_row(self) -> dict[str, Any]:
        """Return storage columns for this message (snake_case, no nulls)."""
        return self.model_dump(exclude_none=True)


class Command(_MessageModel):
    """Command sent to a device, or an update of its execution status.

    ``is_updated`` marks a command update; it routes the message and is
    not itself a storage column.
    """

    command: str
    user_id: int | None = None
    last_updated: datetime | None = None
    lifetime: int | None = None
    status: str | None = None
    result: Any = None
    is_updated: bool = False

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"is_updated"})


class Notification(_MessageModel):
    """Notification emitted by a device."""

    notification: str


Message = Command | Notification


class MessageEnvelope(BaseModel):
    """Wire envelope carrying exactly one message variant."""

    model_config = {"frozen": True, "extra": "ignore"}

    command: Command | None = None
    notification: Notification | None = None

    @model_validator(mode="after")
    def validate_exactly_one_variant(self) -> Self:
        present = [v for v in (self.command, self.notification) if v is not None]
        if len(present) != 1:
            raise ValueError(
                f"envelope must carry exactly one of "
                f"'{MessageKind.COMMAND.value}' or '{MessageKind.NOTIFICATION.value}'"
            )
        return self

    def unwrap(self) -> Message:
        """Return the populated variant."""
        if self.command is not None:
            return self.command
        # The validator guarantees one of the two is set
        assert self.notification is not None
        return self.notification


def parse_message(raw: Mapping[str, Any] | str | bytes) -> Message:
    """Parse a raw inbound envelope into a ``Command`` or ``Notification``.

    Args:
        raw: Decoded JSON object, or the JSON text itself

    Returns:
        The populated message variant

    Raises:
        ClassificationError: If the envelope matches neither variant,
            carries both, or its payload fails validation
    """
    try:
        if isinstance(raw, (str, bytes)):
            envelope = MessageEnvelope.model_validate_json(raw)
        else:
            envelope = MessageEnvelope.model_validate(raw)
    except ValidationError as e:
        raise ClassificationError(f"Unrecognised message: {e}") from e
    return envelope.unwrap()
