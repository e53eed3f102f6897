"""Realtime gateway: connection lifecycle, event routing and live delivery."""

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any
from uuid import UUID

import structlog

from chatrelay.core.modules.message.models import MessageView
from chatrelay.core.modules.session.models import SessionIdentity
from chatrelay.errors import AuthenticationError, ValidationError
from chatrelay.realtime import events
from chatrelay.realtime.events import SendMessagePayload, TypingPayload, parse_payload
from chatrelay.realtime.ports import ChatStore, TokenVerifier, Transport
from chatrelay.realtime.presence import PresenceRegistry

logger = structlog.get_logger(__name__)

SEND_FAILED_MESSAGE = "Error enviando mensaje"


class ConnectionState(StrEnum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Connection:
    """Per-connection state. The lock serializes this connection's events in arrival order."""

    handle: str
    state: ConnectionState = ConnectionState.CONNECTING
    identity: SessionIdentity | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def user_id(self) -> UUID:
        if self.identity is None:
            raise RuntimeError(f"Connection {self.handle} is not authenticated")
        return self.identity.user_id


class RealtimeGateway:
    """Authenticates connections, tracks presence and relays chat events.

    Messages are always persisted through the store before any delivery
    attempt. Delivery itself is best effort: the recipient gets the event only
    if they have a live connection at that instant.
    """

    def __init__(self, store: ChatStore, tokens: TokenVerifier, evict_stale_sessions: bool = True) -> None:
        self.presence = PresenceRegistry()
        self._store = store
        self._tokens = tokens
        self._evict_stale_sessions = evict_stale_sessions
        self._transport: Transport | None = None
        self._connections: dict[str, Connection] = {}
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._status_tasks: dict[UUID, asyncio.Task[None]] = {}

    def bind_transport(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            raise RuntimeError("Transport not bound to gateway")
        return self._transport

    def get_connection(self, handle: str) -> Connection | None:
        return self._connections.get(handle)

    # === Lifecycle ===
    async def connect(self, handle: str, auth: Any) -> SessionIdentity:
        """Authenticate a handshake and register the connection as the user's live session.

        Raises:
            AuthenticationError: If the token is missing or invalid. The
                connection never reaches the presence registry.
        """
        connection = Connection(handle=handle)
        token = auth.get("token") if isinstance(auth, dict) else None
        try:
            identity = self._tokens.verify(token)
        except AuthenticationError as e:
            connection.state = ConnectionState.CLOSED
            logger.info("connection_rejected", handle=handle, reason=str(e))
            raise

        connection.identity = identity
        connection.state = ConnectionState.AUTHENTICATED
        self._connections[handle] = connection

        previous = self.presence.register(identity.user_id, handle, identity.email)
        connection.state = ConnectionState.ACTIVE
        logger.info("user_connected", user_id=identity.user_id, email=identity.email, handle=handle)

        if previous is not None and previous.handle != handle:
            logger.info("stale_session_replaced", user_id=identity.user_id, stale_handle=previous.handle)
            if self._evict_stale_sessions:
                await self.transport.disconnect(previous.handle)

        self._schedule_status(identity.user_id, online=True)
        return identity

    async def announce(self, handle: str) -> None:
        """Tell the others that this user came online and send the newcomer the online snapshot."""
        connection = self._connections.get(handle)
        if connection is None or connection.identity is None:
            return
        async with connection.lock:
            identity = connection.identity
            await self.transport.broadcast(
                events.USER_ONLINE, {"user_id": str(identity.user_id), "email": identity.email}, skip=handle
            )
            online = self.presence.list_user_ids()
            await self.transport.emit(
                events.USERS_ONLINE, {"count": len(online), "users": sorted(str(user_id) for user_id in online)}, to=handle
            )

    async def disconnect(self, handle: str) -> None:
        """Tear down a connection. Always frees the registry slot; store bookkeeping runs detached."""
        connection = self._connections.pop(handle, None)
        if connection is None or connection.identity is None:
            return
        connection.state = ConnectionState.CLOSED
        user_id = connection.user_id

        if not self.presence.unregister(user_id, handle):
            # A newer connection for the same user owns the registry entry
            logger.debug("stale_connection_closed", user_id=user_id, handle=handle)
            return

        logger.info("user_disconnected", user_id=user_id, handle=handle)
        self._schedule_status(user_id, online=False)
        await self.transport.broadcast(events.USER_OFFLINE, {"user_id": str(user_id)}, skip=handle)

    # === Events ===
    async def send_message(self, handle: str, data: Any) -> None:
        connection = self._connections.get(handle)
        if connection is None:
            logger.warning("event_from_unknown_connection", handle=handle, socket_event=events.SEND_MESSAGE)
            return
        async with connection.lock:
            await self._send_message(connection, data)

    async def typing(self, handle: str, data: Any) -> None:
        await self._relay_typing(handle, data, events.USER_TYPING)

    async def stop_typing(self, handle: str, data: Any) -> None:
        await self._relay_typing(handle, data, events.USER_STOP_TYPING)

    async def _send_message(self, connection: Connection, data: Any) -> None:
        sender_id = connection.user_id
        try:
            payload = parse_payload(SendMessagePayload, data)
        except ValidationError as e:
            await self.transport.emit(events.MESSAGE_ERROR, {"error": str(e)}, to=connection.handle)
            return

        try:
            message = await self._store.create_message(sender_id, payload.receiver_id, payload.text, payload.type)
        except ValidationError as e:
            await self.transport.emit(events.MESSAGE_ERROR, {"error": str(e)}, to=connection.handle)
            return
        except Exception:
            logger.exception("message_persist_failed", sender_id=sender_id, recipient_id=payload.receiver_id)
            await self.transport.emit(events.MESSAGE_ERROR, {"error": SEND_FAILED_MESSAGE}, to=connection.handle)
            return

        record = MessageView.from_domain(message).to_event()
        recipient_handle = self.presence.lookup(payload.receiver_id)
        if recipient_handle is not None:
            await self.transport.emit(events.NEW_MESSAGE, record, to=recipient_handle)
            logger.debug("message_delivered", message_id=message.id, recipient_id=payload.receiver_id)
        else:
            logger.debug("recipient_offline", message_id=message.id, recipient_id=payload.receiver_id)

        await self.transport.emit(
            events.MESSAGE_SENT,
            {"id": record["id"], "timestamp": record["created_at"], "delivered": recipient_handle is not None},
            to=connection.handle,
        )

    async def _relay_typing(self, handle: str, data: Any, outbound_event: str) -> None:
        connection = self._connections.get(handle)
        if connection is None:
            return
        async with connection.lock:
            try:
                payload = parse_payload(TypingPayload, data)
            except ValidationError:
                logger.debug("typing_payload_ignored", handle=handle)
                return
            recipient_handle = self.presence.lookup(payload.receiver_id)
            if recipient_handle is not None:
                await self.transport.emit(outbound_event, {"user_id": str(connection.user_id)}, to=recipient_handle)

    # === Background bookkeeping ===
    def _schedule_status(self, user_id: UUID, online: bool) -> None:
        """Persist the user's status detached from the caller, queued behind any pending update for that user."""
        previous = self._status_tasks.get(user_id)
        task = asyncio.create_task(self._update_status(user_id, online, previous))
        self._status_tasks[user_id] = task
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(lambda done: self._forget_status_task(user_id, done))

    def _forget_status_task(self, user_id: UUID, task: asyncio.Task[None]) -> None:
        if self._status_tasks.get(user_id) is task:
            del self._status_tasks[user_id]

    async def _update_status(self, user_id: UUID, online: bool, previous: asyncio.Task[None] | None) -> None:
        if previous is not None:
            await asyncio.wait([previous])
        # Presence changed again since this update was queued; a later update owns the store
        if self.presence.is_online(user_id) != online:
            logger.debug("status_update_superseded", user_id=user_id, online=online)
            return
        try:
            if online:
                await self._store.mark_online(user_id)
            else:
                await self._store.mark_offline(user_id)
        except Exception:
            logger.exception("mark_online_failed" if online else "mark_offline_failed", user_id=user_id)

    async def drain(self) -> None:
        """Wait for pending background store updates (used on shutdown and in tests)."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))
