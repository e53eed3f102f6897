from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from chatrelay.core.core import Service
from chatrelay.core.modules.message.models import Message, MessageType
from chatrelay.errors import ValidationError

logger = structlog.get_logger(__name__)

MAX_CONTENT_LENGTH = 10_000


class MessageService(Service):
    """Persists direct messages and answers conversation queries."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("messages")

    async def on_start(self) -> None:
        """Create indexes for conversation and unread lookups."""
        await self._collection.create_index([("sender_id", 1), ("recipient_id", 1), ("created_at", 1)])
        await self._collection.create_index([("recipient_id", 1), ("read", 1)])

    async def create_message(self, sender_id: UUID, recipient_id: UUID, content: str, message_type: MessageType) -> Message:
        """Durably store a new message and return it."""
        if not content.strip():
            raise ValidationError("El mensaje no puede estar vacío")
        if len(content) > MAX_CONTENT_LENGTH:
            raise ValidationError(f"El mensaje no puede superar {MAX_CONTENT_LENGTH} caracteres")

        message = Message(sender_id=sender_id, recipient_id=recipient_id, content=content, type=message_type)
        await self._collection.insert_one(message.to_mongo())
        logger.debug("message_created", message_id=message.id, sender_id=sender_id, recipient_id=recipient_id)
        return message

    async def get_conversation(self, user_id: UUID, peer_id: UUID) -> list[Message]:
        """Get all messages between two users, oldest first."""
        query = {
            "$or": [
                {"sender_id": user_id, "recipient_id": peer_id},
                {"sender_id": peer_id, "recipient_id": user_id},
            ]
        }
        cursor = self._collection.find(query).sort([("created_at", 1), ("_id", 1)])
        return await Message.list_cursor(cursor)

    async def mark_read(self, recipient_id: UUID, sender_id: UUID) -> int:
        """Mark every unread message from sender to recipient as read and return how many changed."""
        result = await self._collection.update_many(
            {"sender_id": sender_id, "recipient_id": recipient_id, "read": False}, {"$set": {"read": True}}
        )
        return result.modified_count

    async def get_last_message(self, user_id: UUID, peer_id: UUID) -> Message | None:
        query = {
            "$or": [
                {"sender_id": user_id, "recipient_id": peer_id},
                {"sender_id": peer_id, "recipient_id": user_id},
            ]
        }
        doc = await self._collection.find_one(query, sort=[("created_at", -1)])
        return Message.from_doc(doc)

    async def count_unread(self, recipient_id: UUID, sender_id: UUID) -> int:
        return await self._collection.count_documents({"sender_id": sender_id, "recipient_id": recipient_id, "read": False})
