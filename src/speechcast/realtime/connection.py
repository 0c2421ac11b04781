"""
WebSocket Channel Registry

Tracks every connected viewer channel. Each channel owns a FIFO outbox
drained by its own sender task, so a broadcast only enqueues and never
waits on a slow viewer.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from fastapi import WebSocket

from .protocol import ChannelMessage, ChannelMessageType, ErrorPayload

logger = structlog.get_logger()


@dataclass(eq=False)
class ViewerConnection:
    """Represents an active viewer WebSocket connection."""

    connection_id: UUID
    websocket: WebSocket
    client: str | None = None

    # State
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sequence_counter: int = 0
    is_open: bool = True

    outbox: asyncio.Queue = field(default_factory=asyncio.Queue, repr=False)
    _sender: asyncio.Task | None = field(default=None, repr=False)

    def __hash__(self) -> int:
        return hash(self.connection_id)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ViewerConnection):
            return self.connection_id == other.connection_id
        return False

    def start(self) -> None:
        """Start delivering queued messages."""
        if self._sender is None:
            self._sender = asyncio.create_task(self._pump())

    def enqueue(self, message: ChannelMessage) -> bool:
        """
        Queue a message for delivery, stamping the channel sequence number.

        Returns False if the channel is already closed.
        """
        if not self.is_open:
            return False

        self.outbox.put_nowait(message.model_copy(update={"sequence": self.sequence_counter}))
        self.sequence_counter += 1
        return True

    def send_error(self, code: str, message: str, recoverable: bool = True) -> bool:
        """Queue an error message for the client."""
        return self.enqueue(
            ChannelMessage(
                type=ChannelMessageType.ERROR,
                payload=ErrorPayload(
                    code=code,
                    message=message,
                    recoverable=recoverable,
                ).model_dump(),
            )
        )

    async def flush(self) -> None:
        """Wait until every queued message has been sent or discarded."""
        await self.outbox.join()

    async def close(self) -> None:
        """Stop the sender and discard anything still queued."""
        self.is_open = False

        if self._sender:
            self._sender.cancel()
            try:
                await self._sender
            except asyncio.CancelledError:
                pass
            self._sender = None

        self._discard_pending()

    async def _pump(self) -> None:
        while True:
            message: ChannelMessage = await self.outbox.get()
            try:
                await self.websocket.send_json(message.model_dump(mode="json"))
            except Exception as e:
                logger.warning(
                    "Viewer channel dropped",
                    connection_id=str(self.connection_id),
                    error=str(e),
                )
                self.is_open = False
                self._discard_pending()
                return
            finally:
                self.outbox.task_done()

    def _discard_pending(self) -> None:
        while True:
            try:
                self.outbox.get_nowait()
            except asyncio.QueueEmpty:
                return
            self.outbox.task_done()


class ChannelRegistry:
    """
    Registry of active viewer channels.

    Registration and broadcast are synchronous; on a single event loop
    they cannot interleave with each other.
    """

    def __init__(self) -> None:
        # Active connections by connection_id
        self._connections: dict[UUID, ViewerConnection] = {}

        self._broadcast_count = 0

        logger.info("ChannelRegistry initialized")

    @property
    def active_connection_count(self) -> int:
        """Get number of registered channels."""
        return len(self._connections)

    @property
    def broadcast_count(self) -> int:
        return self._broadcast_count

    def connections(self) -> list[ViewerConnection]:
        return list(self._connections.values())

    async def accept(self, websocket: WebSocket) -> ViewerConnection:
        """
        Accept a WebSocket and start its sender.

        The connection receives broadcasts only once ``register`` is called.
        """
        await websocket.accept()

        client = websocket.client.host if websocket.client else None
        connection = ViewerConnection(
            connection_id=uuid4(),
            websocket=websocket,
            client=client,
        )
        connection.start()

        return connection

    def register(
        self,
        connection: ViewerConnection,
        first_message: ChannelMessage | None = None,
    ) -> None:
        """
        Add a connection to the broadcast set.

        ``first_message`` is queued before the connection becomes visible
        to ``broadcast``, so it always precedes any later event.
        """
        if first_message is not None:
            connection.enqueue(first_message)

        self._connections[connection.connection_id] = connection

        logger.info(
            "Viewer connected",
            connection_id=str(connection.connection_id),
            client=connection.client,
            active_connections=len(self._connections),
        )

    async def disconnect(self, connection: ViewerConnection) -> None:
        """Remove a connection and stop its sender."""
        self._connections.pop(connection.connection_id, None)
        await connection.close()

        logger.info(
            "Viewer disconnected",
            connection_id=str(connection.connection_id),
            active_connections=len(self._connections),
        )

    def broadcast(self, message: ChannelMessage) -> int:
        """
        Queue a message on every registered channel.

        Channels whose sender has failed are dropped.

        Returns:
            Number of channels notified
        """
        self._broadcast_count += 1
        notified = 0

        for connection in list(self._connections.values()):
            if connection.enqueue(message):
                notified += 1
            else:
                self._connections.pop(connection.connection_id, None)
                logger.info(
                    "Dropped closed viewer channel",
                    connection_id=str(connection.connection_id),
                )

        logger.debug(
            "Broadcast queued",
            type=message.type,
            notified=notified,
        )

        return notified

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        return {
            "active_connections": len(self._connections),
            "total_broadcasts": self._broadcast_count,
        }
