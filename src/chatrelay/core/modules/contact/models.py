from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chatrelay.core.db import MongoModel
from chatrelay.utils import now


class Contact(MongoModel):
    """Directed contact edge owner -> contact, unique per pair."""

    owner_id: UUID
    contact_id: UUID
    created_at: datetime = Field(default_factory=now)


class ContactView(BaseModel):
    """Contact list entry as shown in the chat sidebar."""

    id: UUID
    username: str
    foto: str
    online: bool
    ultimo_acceso: str
    ultimoMensaje: str  # noqa: N815
    horaUltimoMensaje: str  # noqa: N815
    mensajesNoLeidos: int  # noqa: N815
