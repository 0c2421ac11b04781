"""
Realtime WebSocket Routes

Viewer channels: a snapshot on connect, then every presentation event.
"""

from typing import Any

import orjson
import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from speechcast.api.deps import (
    get_broadcaster,
    get_channel_registry,
    get_content_provider,
)
from speechcast.content.provider import ContentProvider
from speechcast.core.errors import ContentLoadError
from speechcast.realtime import (
    ChannelMessage,
    ChannelMessageType,
    ChannelRegistry,
    PresentationBroadcaster,
    ViewerConnection,
)

logger = structlog.get_logger()

router = APIRouter()


# ══════════════════════════════════════════════════════════════
# WebSocket Endpoint
# ══════════════════════════════════════════════════════════════


@router.websocket("/ws")
async def viewer_websocket(
    websocket: WebSocket,
    registry: ChannelRegistry = Depends(get_channel_registry),
    broadcaster: PresentationBroadcaster = Depends(get_broadcaster),
    content: ContentProvider = Depends(get_content_provider),
):
    """
    Viewer channel endpoint.

    Protocol:
    1. Client connects to {base_path}/ws
    2. Server sends snapshot with the current state
    3. Server pushes sectionAdvanced / resetOccurred as they happen
    4. Client may send ping, server answers pong
    """
    connection = await registry.accept(websocket)

    try:
        try:
            catalog = await content.load()
        except ContentLoadError as e:
            logger.error(
                "Cannot send snapshot",
                connection_id=str(connection.connection_id),
                error=str(e),
            )
            connection.send_error("content_unavailable", str(e), recoverable=False)
            await connection.flush()
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        broadcaster.admit(connection, catalog)

        while True:
            raw_data = await websocket.receive()

            if raw_data.get("type") == "websocket.disconnect":
                break

            text = raw_data.get("text")
            if text is None:
                connection.send_error("invalid_message", "Binary messages are not supported")
                continue

            _handle_client_message(connection, text)

    except WebSocketDisconnect:
        logger.info(
            "WebSocket disconnected",
            connection_id=str(connection.connection_id),
        )

    except Exception as e:
        logger.error(
            "WebSocket error",
            connection_id=str(connection.connection_id),
            error=str(e),
        )

    finally:
        await registry.disconnect(connection)


def _handle_client_message(connection: ViewerConnection, text: str) -> None:
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError:
        connection.send_error("invalid_message", "Messages must be JSON objects")
        return

    msg_type = data.get("type") if isinstance(data, dict) else None

    if msg_type == ChannelMessageType.PING.value:
        connection.enqueue(ChannelMessage(type=ChannelMessageType.PONG))
    else:
        logger.warning(
            "Unknown message type",
            connection_id=str(connection.connection_id),
            type=msg_type,
        )
        connection.send_error("unknown_message", f"Unknown message type: {msg_type}")


# ══════════════════════════════════════════════════════════════
# HTTP Endpoints for Connection Info
# ══════════════════════════════════════════════════════════════


@router.get("/ws/connections")
async def get_connections(
    broadcaster: PresentationBroadcaster = Depends(get_broadcaster),
    content: ContentProvider = Depends(get_content_provider),
) -> dict[str, Any]:
    """Get channel registry statistics and the presentation phase."""
    try:
        catalog = await content.load()
    except ContentLoadError:
        catalog = None

    return broadcaster.get_stats(catalog)
