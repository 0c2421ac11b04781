"""
Realtime WebSocket Protocol

Defines the message types and payloads exchanged with viewer channels.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChannelMessageType(str, Enum):
    """WebSocket message types."""

    # Client -> Server
    PING = "ping"

    # Server -> Client
    SNAPSHOT = "snapshot"
    SECTION_ADVANCED = "sectionAdvanced"
    RESET_OCCURRED = "resetOccurred"
    ERROR = "error"
    PONG = "pong"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChannelMessage(BaseModel):
    """Envelope for every server -> viewer message."""

    model_config = ConfigDict(use_enum_values=True)

    type: ChannelMessageType
    timestamp: datetime = Field(default_factory=_utcnow)
    sequence: int | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


# ══════════════════════════════════════════════════════════════
# Specific Message Payloads
# ══════════════════════════════════════════════════════════════


class CamelModel(BaseModel):
    """Payload serialized with camelCase keys for browser clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SnapshotPayload(CamelModel):
    """Full state replayed to a channel when it connects."""

    current_section_index: int
    is_rendering: bool
    rendered_text: str
    text_by_language: dict[str, str]


class SectionAdvancedPayload(CamelModel):
    """Payload for sectionAdvanced."""

    index: int
    text_by_language: dict[str, str]
    is_rendering: bool = True


class ErrorPayload(BaseModel):
    """Payload for error message."""

    code: str
    message: str
    recoverable: bool = True
