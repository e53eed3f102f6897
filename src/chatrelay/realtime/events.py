"""Socket.IO event names and inbound payload parsing."""

from typing import Any
from uuid import UUID

import pydantic
from pydantic import BaseModel, Field

from chatrelay.core.modules.message.models import MessageType
from chatrelay.errors import ValidationError

# Inbound
SEND_MESSAGE = "send_message"
TYPING = "typing"
STOP_TYPING = "stop_typing"

# Outbound
USER_ONLINE = "user_online"
USERS_ONLINE = "users_online"
NEW_MESSAGE = "new_message"
MESSAGE_SENT = "message_sent"
MESSAGE_ERROR = "message_error"
USER_TYPING = "user_typing"
USER_STOP_TYPING = "user_stop_typing"
USER_OFFLINE = "user_offline"


class SendMessagePayload(BaseModel):
    receiver_id: UUID
    text: str = Field(..., min_length=1)
    type: MessageType = MessageType.TEXT


class TypingPayload(BaseModel):
    receiver_id: UUID


def parse_payload[T: BaseModel](model: type[T], data: Any) -> T:
    """Validate an inbound event payload, raising our ValidationError on bad input."""
    if not isinstance(data, dict):
        raise ValidationError("Datos del evento inválidos")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise ValidationError(f"Datos del evento inválidos: {fields}") from e
