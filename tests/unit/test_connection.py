"""
Unit Tests for WebSocket Connection Module

Tests viewer connections and the channel registry.
"""

from datetime import datetime
from uuid import uuid4
from unittest.mock import MagicMock

import pytest

from speechcast.realtime.connection import ChannelRegistry, ViewerConnection
from speechcast.realtime.protocol import ChannelMessage, ChannelMessageType


def sent_types(ws) -> list[str]:
    return [call.args[0]["type"] for call in ws.send_json.await_args_list]


def sent_sequences(ws) -> list[int]:
    return [call.args[0]["sequence"] for call in ws.send_json.await_args_list]


# ============================================================
# ViewerConnection Tests
# ============================================================


class TestViewerConnectionInit:
    """Test ViewerConnection initialization."""

    def test_connection_creation(self):
        ws = MagicMock()
        conn_id = uuid4()

        conn = ViewerConnection(connection_id=conn_id, websocket=ws)

        assert conn.connection_id == conn_id
        assert conn.websocket == ws
        assert conn.client is None
        assert conn.is_open is True
        assert conn.sequence_counter == 0
        assert isinstance(conn.connected_at, datetime)

    def test_equality_by_id(self):
        conn_id = uuid4()

        a = ViewerConnection(connection_id=conn_id, websocket=MagicMock())
        b = ViewerConnection(connection_id=conn_id, websocket=MagicMock())

        assert a == b
        assert hash(a) == hash(b)
        assert a != "not a connection"


class TestViewerConnectionDelivery:
    """Test queued delivery."""

    @pytest.mark.asyncio
    async def test_enqueue_stamps_sequence(self, mock_websocket):
        conn = ViewerConnection(connection_id=uuid4(), websocket=mock_websocket)
        conn.start()

        message = ChannelMessage(type=ChannelMessageType.PONG)
        conn.enqueue(message)
        conn.enqueue(message)
        await conn.flush()

        assert sent_sequences(mock_websocket) == [0, 1]
        assert message.sequence is None

        await conn.close()

    @pytest.mark.asyncio
    async def test_messages_delivered_in_order(self, mock_websocket):
        conn = ViewerConnection(connection_id=uuid4(), websocket=mock_websocket)

        conn.enqueue(ChannelMessage(type=ChannelMessageType.SNAPSHOT))
        conn.enqueue(ChannelMessage(type=ChannelMessageType.SECTION_ADVANCED))
        conn.enqueue(ChannelMessage(type=ChannelMessageType.RESET_OCCURRED))
        conn.start()
        await conn.flush()

        assert sent_types(mock_websocket) == ["snapshot", "sectionAdvanced", "resetOccurred"]

        await conn.close()

    @pytest.mark.asyncio
    async def test_send_error(self, mock_websocket):
        conn = ViewerConnection(connection_id=uuid4(), websocket=mock_websocket)
        conn.start()

        conn.send_error("invalid_message", "bad", recoverable=True)
        await conn.flush()

        sent = mock_websocket.send_json.await_args.args[0]
        assert sent["type"] == "error"
        assert sent["payload"]["code"] == "invalid_message"

        await conn.close()

    @pytest.mark.asyncio
    async def test_failed_send_closes_connection(self, mock_websocket):
        mock_websocket.send_json.side_effect = RuntimeError("socket gone")
        conn = ViewerConnection(connection_id=uuid4(), websocket=mock_websocket)
        conn.start()

        conn.enqueue(ChannelMessage(type=ChannelMessageType.SNAPSHOT))
        conn.enqueue(ChannelMessage(type=ChannelMessageType.PONG))
        await conn.flush()

        assert conn.is_open is False
        assert mock_websocket.send_json.await_count == 1
        assert conn.enqueue(ChannelMessage(type=ChannelMessageType.PONG)) is False

        await conn.close()

    @pytest.mark.asyncio
    async def test_close_discards_pending(self, mock_websocket):
        conn = ViewerConnection(connection_id=uuid4(), websocket=mock_websocket)
        conn.enqueue(ChannelMessage(type=ChannelMessageType.PONG))

        await conn.close()
        await conn.flush()

        assert conn.is_open is False
        mock_websocket.send_json.assert_not_awaited()


# ============================================================
# ChannelRegistry Tests
# ============================================================


class TestChannelRegistry:
    """Test ChannelRegistry."""

    def test_init(self):
        registry = ChannelRegistry()

        assert registry.active_connection_count == 0
        assert registry.broadcast_count == 0
        assert registry.get_stats() == {"active_connections": 0, "total_broadcasts": 0}

    @pytest.mark.asyncio
    async def test_accept_does_not_register(self, mock_websocket):
        registry = ChannelRegistry()

        conn = await registry.accept(mock_websocket)

        mock_websocket.accept.assert_awaited_once()
        assert conn.client == "127.0.0.1"
        assert registry.active_connection_count == 0

        await registry.disconnect(conn)

    @pytest.mark.asyncio
    async def test_register_sends_first_message_first(self, mock_websocket):
        registry = ChannelRegistry()
        conn = await registry.accept(mock_websocket)

        registry.register(conn, ChannelMessage(type=ChannelMessageType.SNAPSHOT))
        registry.broadcast(ChannelMessage(type=ChannelMessageType.RESET_OCCURRED))
        await conn.flush()

        assert sent_types(mock_websocket) == ["snapshot", "resetOccurred"]
        assert registry.active_connection_count == 1

        await registry.disconnect(conn)

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_channel(self, websocket_factory):
        registry = ChannelRegistry()
        sockets = [websocket_factory() for _ in range(3)]
        connections = []
        for ws in sockets:
            conn = await registry.accept(ws)
            registry.register(conn)
            connections.append(conn)

        notified = registry.broadcast(ChannelMessage(type=ChannelMessageType.RESET_OCCURRED))
        for conn in connections:
            await conn.flush()

        assert notified == 3
        assert registry.broadcast_count == 1
        for ws in sockets:
            assert sent_types(ws) == ["resetOccurred"]

        for conn in connections:
            await registry.disconnect(conn)

    @pytest.mark.asyncio
    async def test_broadcast_drops_failed_channel(self, websocket_factory):
        registry = ChannelRegistry()
        healthy_ws = websocket_factory()
        broken_ws = websocket_factory()
        broken_ws.send_json.side_effect = RuntimeError("socket gone")

        healthy = await registry.accept(healthy_ws)
        broken = await registry.accept(broken_ws)
        registry.register(healthy)
        registry.register(broken)

        registry.broadcast(ChannelMessage(type=ChannelMessageType.RESET_OCCURRED))
        await broken.flush()
        notified = registry.broadcast(ChannelMessage(type=ChannelMessageType.RESET_OCCURRED))
        await healthy.flush()

        assert notified == 1
        assert registry.active_connection_count == 1
        assert sent_types(healthy_ws) == ["resetOccurred", "resetOccurred"]

        await registry.disconnect(healthy)
        await registry.disconnect(broken)

    @pytest.mark.asyncio
    async def test_disconnect(self, mock_websocket):
        registry = ChannelRegistry()
        conn = await registry.accept(mock_websocket)
        registry.register(conn)

        await registry.disconnect(conn)

        assert registry.active_connection_count == 0
        assert conn.is_open is False
        assert registry.broadcast(ChannelMessage(type=ChannelMessageType.PONG)) == 0

    @pytest.mark.asyncio
    async def test_disconnect_twice(self, mock_websocket):
        registry = ChannelRegistry()
        conn = await registry.accept(mock_websocket)
        registry.register(conn)

        await registry.disconnect(conn)
        await registry.disconnect(conn)

        assert registry.active_connection_count == 0
