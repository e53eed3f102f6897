import re
from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from chatrelay.core.core import Service
from chatrelay.core.modules.user.models import User, UserStatus
from chatrelay.core.modules.user.validators import validate_email, validate_password, validate_username
from chatrelay.errors import ConflictError
from chatrelay.utils import now

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Manages user accounts and their durable online status."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create unique indexes for username and email."""
        await self._collection.create_index([("username", 1)], unique=True)
        await self._collection.create_index([("email", 1)], unique=True)
        logger.debug("user_service_started")

    async def find_user(self, user_id: UUID) -> User | None:
        doc = await self._collection.find_one({"_id": user_id})
        return User.from_doc(doc)

    async def find_by_login(self, login: str) -> User | None:
        """Find a user by username or, when the value contains '@', by email."""
        if "@" in login:
            doc = await self._collection.find_one({"email": login.strip().lower()})
        else:
            doc = await self._collection.find_one({"username": login.strip()})
        return User.from_doc(doc)

    async def search_by_username(self, term: str) -> User | None:
        """Case-insensitive exact username match."""
        doc = await self._collection.find_one({"username": {"$regex": f"^{re.escape(term)}$", "$options": "i"}})
        return User.from_doc(doc)

    async def get_users(self, user_ids: list[UUID]) -> dict[UUID, User]:
        users = await User.list_cursor(self._collection.find({"_id": {"$in": user_ids}}))
        return {user.id: user for user in users}

    async def create_user(self, username: str, email: str, password: str) -> User:
        """Create user with hashed password."""
        username = username.strip()
        email = email.strip().lower()
        validate_username(username)
        validate_email(email)
        validate_password(password)

        if await self._collection.find_one({"username": username}) is not None:
            raise ConflictError(f"El usuario '{username}' ya existe")
        if await self._collection.find_one({"email": email}) is not None:
            raise ConflictError(f"El email '{email}' ya está registrado")

        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = User(username=username, email=email, password_hash=password_hash)
        await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", user_id=user.id, username=username)
        return user

    async def authenticate(self, login: str, password: str) -> User | None:
        """Return the user if the password matches, otherwise None."""
        user = await self.find_by_login(login)
        if user is None:
            return None
        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            return None
        return user

    async def set_status(self, user_id: UUID, status: UserStatus) -> None:
        """Persist online/offline status and refresh last_seen."""
        await self._collection.update_one({"_id": user_id}, {"$set": {"status": status, "last_seen": now()}})
