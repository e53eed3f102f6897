"""Collaborator interfaces the realtime gateway depends on.

Implemented by the MongoDB-backed services and the Socket.IO server.
"""

from typing import Any, Protocol
from uuid import UUID

from chatrelay.core.modules.message.models import Message, MessageType
from chatrelay.core.modules.session.models import SessionIdentity


class ChatStore(Protocol):
    """Durable side of the chat: message persistence and user status."""

    async def create_message(
        self, sender_id: UUID, recipient_id: UUID, content: str, message_type: MessageType
    ) -> Message: ...

    async def mark_online(self, user_id: UUID) -> None: ...

    async def mark_offline(self, user_id: UUID) -> None: ...


class TokenVerifier(Protocol):
    def verify(self, token: str | None) -> SessionIdentity: ...


class Transport(Protocol):
    """Outbound side of the realtime connection layer."""

    async def emit(self, event: str, data: dict[str, Any], to: str) -> None: ...

    async def broadcast(self, event: str, data: dict[str, Any], skip: str | None = None) -> None: ...

    async def disconnect(self, handle: str) -> None: ...
