from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from chatrelay.core.db import MongoModel
from chatrelay.utils import now


class MessageType(StrEnum):
    TEXT = "texto"
    IMAGE = "imagen"
    FILE = "archivo"
    AUDIO = "audio"
    VIDEO = "video"


class Message(MongoModel):
    """Direct message between two users.

    Indexed on (sender_id, recipient_id, created_at) and (recipient_id, read).
    """

    sender_id: UUID
    recipient_id: UUID
    content: str
    type: MessageType = MessageType.TEXT
    created_at: datetime = Field(default_factory=now)
    read: bool = False


class MessageView(BaseModel):
    """Message record as sent to clients over HTTP and Socket.IO."""

    id: UUID
    remitente_id: UUID
    destinatario_id: UUID
    contenido: str
    tipo: MessageType
    created_at: datetime
    leido: bool

    @classmethod
    def from_domain(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            remitente_id=message.sender_id,
            destinatario_id=message.recipient_id,
            contenido=message.content,
            tipo=message.type,
            created_at=message.created_at,
            leido=message.read,
        )

    def to_event(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
