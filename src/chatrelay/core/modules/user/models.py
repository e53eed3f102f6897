from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from chatrelay.core.db import MongoModel
from chatrelay.utils import now

DEFAULT_PHOTO = "default.jpg"


class UserStatus(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class User(MongoModel):
    """User domain model with credentials."""

    username: str
    email: str
    password_hash: str  # bcrypt hash
    photo: str = DEFAULT_PHOTO
    status: UserStatus = UserStatus.OFFLINE
    last_seen: datetime | None = None
    created_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, username=user.username, email=user.email)


class UserSearchView(BaseModel):
    """Public profile returned by user search."""

    id: UUID
    username: str
    foto: str
    online: bool

    @classmethod
    def from_domain(cls, user: User, online: bool) -> "UserSearchView":
        return cls(id=user.id, username=user.username, foto=user.photo, online=online)
