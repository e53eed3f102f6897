from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from chatrelay.core.core import Service
from chatrelay.core.modules.contact.models import Contact
from chatrelay.errors import ConflictError, ValidationError

logger = structlog.get_logger(__name__)


class ContactService(Service):
    """Manages the directed contact list of each user."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("contacts")

    async def on_start(self) -> None:
        await self._collection.create_index([("owner_id", 1), ("contact_id", 1)], unique=True)

    async def add_contact(self, owner_id: UUID, contact_id: UUID) -> Contact:
        """Add contact_id to owner's list. Raises ConflictError if already present."""
        if owner_id == contact_id:
            raise ValidationError("No puedes agregarte a ti mismo como contacto")

        if await self._collection.find_one({"owner_id": owner_id, "contact_id": contact_id}) is not None:
            raise ConflictError("El contacto ya existe")

        contact = Contact(owner_id=owner_id, contact_id=contact_id)
        try:
            await self._collection.insert_one(contact.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError("El contacto ya existe") from e
        logger.debug("contact_added", owner_id=owner_id, contact_id=contact_id)
        return contact

    async def list_contacts(self, owner_id: UUID) -> list[Contact]:
        cursor = self._collection.find({"owner_id": owner_id}).sort("created_at", 1)
        return await Contact.list_cursor(cursor)
