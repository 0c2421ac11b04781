"""
Speechcast Realtime Module

WebSocket viewer channels and presentation broadcasting.
"""

from .broadcaster import PresentationBroadcaster
from .connection import ChannelRegistry, ViewerConnection
from .protocol import (
    ChannelMessage,
    ChannelMessageType,
    ErrorPayload,
    SectionAdvancedPayload,
    SnapshotPayload,
)

__all__ = [
    # Channel management
    "ChannelRegistry",
    "ViewerConnection",
    # Broadcasting
    "PresentationBroadcaster",
    # Protocol
    "ChannelMessage",
    "ChannelMessageType",
    "ErrorPayload",
    "SectionAdvancedPayload",
    "SnapshotPayload",
]
