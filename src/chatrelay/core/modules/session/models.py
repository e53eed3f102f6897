"""Session token models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel

AuthToken = NewType("AuthToken", str)


class SessionIdentity(BaseModel):
    """Identity carried inside a verified session token."""

    user_id: UUID
    email: str
    issued_at: datetime
    expires_at: datetime
