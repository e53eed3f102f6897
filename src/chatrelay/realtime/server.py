"""Socket.IO binding for the realtime gateway.

Clients connect on the same port as the HTTP API (default path `/socket.io`)
and present their session token in the handshake: `auth: { token }`.
"""

from typing import Any
from uuid import UUID

import socketio
from socketio import exceptions as sio_exceptions
import structlog

from chatrelay.core.core import Core
from chatrelay.core.modules.message.models import Message, MessageType
from chatrelay.core.modules.user.models import UserStatus
from chatrelay.errors import AuthenticationError
from chatrelay.realtime import events
from chatrelay.realtime.gateway import RealtimeGateway

logger = structlog.get_logger(__name__)


class CoreChatStore:
    """ChatStore backed by the MongoDB services of Core."""

    def __init__(self, core: Core) -> None:
        self._core = core

    async def create_message(self, sender_id: UUID, recipient_id: UUID, content: str, message_type: MessageType) -> Message:
        return await self._core.services.message.create_message(sender_id, recipient_id, content, message_type)

    async def mark_online(self, user_id: UUID) -> None:
        await self._core.services.user.set_status(user_id, UserStatus.ONLINE)

    async def mark_offline(self, user_id: UUID) -> None:
        await self._core.services.user.set_status(user_id, UserStatus.OFFLINE)


class SocketIOTransport:
    """Transport that delivers gateway events through a python-socketio server."""

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self._sio = sio

    async def emit(self, event: str, data: dict[str, Any], to: str) -> None:
        await self._sio.emit(event, data, to=to)

    async def broadcast(self, event: str, data: dict[str, Any], skip: str | None = None) -> None:
        await self._sio.emit(event, data, skip_sid=skip)

    async def disconnect(self, handle: str) -> None:
        await self._sio.disconnect(handle)


def create_socketio_server(gateway: RealtimeGateway, cors_origins: list[str]) -> socketio.AsyncServer:
    """Create the Socket.IO server and route its events to the gateway."""
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*" if "*" in cors_origins else cors_origins,
        logger=False,
        engineio_logger=False,
    )
    gateway.bind_transport(SocketIOTransport(sio))

    @sio.event
    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None) -> None:
        try:
            await gateway.connect(sid, auth)
        except AuthenticationError as e:
            raise sio_exceptions.ConnectionRefusedError("Autenticación fallida") from e
        # Announce after the handshake completes so the client is ready to receive
        sio.start_background_task(gateway.announce, sid)

    @sio.event
    async def disconnect(sid: str, *_: Any) -> None:
        await gateway.disconnect(sid)

    @sio.on(events.SEND_MESSAGE)
    async def send_message(sid: str, data: Any = None) -> None:
        await gateway.send_message(sid, data)

    @sio.on(events.TYPING)
    async def typing(sid: str, data: Any = None) -> None:
        await gateway.typing(sid, data)

    @sio.on(events.STOP_TYPING)
    async def stop_typing(sid: str, data: Any = None) -> None:
        await gateway.stop_typing(sid, data)

    logger.debug("socketio_server_created")
    return sio
