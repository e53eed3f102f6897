"""Tests for the Socket.IO event handlers bound to the gateway."""

from uuid import UUID

import pytest
from socketio import exceptions as sio_exceptions

from chatrelay.realtime.server import SocketIOTransport, create_socketio_server

ALICE = UUID("11111111-1111-4111-8111-111111111111")
BOB = UUID("22222222-2222-4222-8222-222222222222")


@pytest.fixture
def sio(gateway, transport):
    server = create_socketio_server(gateway, ["*"])
    gateway.bind_transport(transport)
    server.scheduled = []
    server.start_background_task = lambda target, *args: server.scheduled.append((target, args))
    return server


def handler(sio, event):
    return sio.handlers["/"][event]


class TestServerSetup:
    """Tests for server construction."""

    async def test_binds_socketio_transport(self, gateway):
        """Test that creating the server wires the gateway to Socket.IO delivery."""
        create_socketio_server(gateway, ["http://localhost:5173"])
        assert isinstance(gateway.transport, SocketIOTransport)

    async def test_registers_chat_events(self, sio):
        """Test that every inbound chat event has a handler."""
        assert {"connect", "disconnect", "send_message", "typing", "stop_typing"} <= set(sio.handlers["/"])


class TestConnectHandler:
    """Tests for the handshake handler."""

    async def test_valid_token_registers_and_schedules_announce(self, sio, gateway, codec):
        """Test that the auth token is passed to the gateway and announce runs after the handshake."""
        await handler(sio, "connect")("sid-a", {}, {"token": codec.issue(ALICE, "alice@example.com")})

        assert gateway.presence.lookup(ALICE) == "sid-a"
        assert sio.scheduled == [(gateway.announce, ("sid-a",))]

    async def test_scheduled_announce_sends_snapshot(self, sio, gateway, codec, transport):
        """Test that the scheduled announce delivers users_online to the new connection."""
        await handler(sio, "connect")("sid-a", {}, {"token": codec.issue(ALICE, "alice@example.com")})
        target, args = sio.scheduled[0]

        await target(*args)

        assert transport.received("sid-a", "users_online") == [{"count": 1, "users": [str(ALICE)]}]

    @pytest.mark.parametrize("auth", [None, {}, {"token": ""}, {"token": "forged"}])
    async def test_bad_auth_refused(self, sio, gateway, auth):
        """Test that missing or invalid tokens refuse the connection and leave the registry empty."""
        with pytest.raises(sio_exceptions.ConnectionRefusedError):
            await handler(sio, "connect")("sid-a", {}, auth)

        assert gateway.presence.count() == 0
        assert sio.scheduled == []


class TestEventHandlers:
    """Tests for routing of chat events and disconnects."""

    async def test_send_message_routed(self, sio, online, chat_store, transport):
        """Test that send_message reaches the gateway with the sender's handle."""
        await online(ALICE, "sid-a")

        await handler(sio, "send_message")("sid-a", {"receiver_id": str(BOB), "text": "hola"})

        assert [m.content for m in chat_store.messages] == ["hola"]
        assert transport.received("sid-a", "message_sent")[0]["delivered"] is False

    async def test_typing_routed(self, sio, online, transport):
        """Test that typing and stop_typing are relayed to the recipient."""
        await online(ALICE, "sid-a")
        await online(BOB, "sid-b")

        await handler(sio, "typing")("sid-a", {"receiver_id": str(BOB)})
        await handler(sio, "stop_typing")("sid-a", {"receiver_id": str(BOB)})

        assert transport.events_for("sid-b")[-2:] == ["user_typing", "user_stop_typing"]

    async def test_disconnect_routed(self, sio, online, gateway, transport):
        """Test that a Socket.IO disconnect frees the registry slot and broadcasts user_offline."""
        await online(ALICE, "sid-a")

        await handler(sio, "disconnect")("sid-a", "client disconnect")

        assert gateway.presence.count() == 0
        assert transport.broadcast_events("user_offline") == [({"user_id": str(ALICE)}, "sid-a")]
