import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from chatrelay.config import Config
from chatrelay.core.core import Core
from chatrelay.core.modules.contact.models import ContactView
from chatrelay.core.modules.message.models import MessageView
from chatrelay.core.modules.session.models import AuthToken, SessionIdentity
from chatrelay.core.modules.upload.models import StoredFile, UploadFileInfo
from chatrelay.core.modules.user.models import User, UserSearchView, UserStatus, UserView
from chatrelay.core.modules.user.validators import validate_search_term
from chatrelay.errors import AuthenticationError, NotFoundError, ValidationError
from chatrelay.realtime.gateway import RealtimeGateway
from chatrelay.realtime.server import CoreChatStore
from chatrelay.utils import format_clock, format_last_seen, now

VERSION = "1.0.0"


class AuthResult(BaseModel):
    token: AuthToken
    user: UserView


class App:
    """Facade for all application operations, validates input before delegating to Core."""

    def __init__(self, config: Config, core: Core | None = None) -> None:
        self._core = core or Core(config)
        self._started_at = time.monotonic()
        self.gateway = RealtimeGateway(
            CoreChatStore(self._core), self._core.tokens, evict_stale_sessions=config.evict_stale_sessions
        )

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            try:
                yield
            finally:
                await self.gateway.drain()

    def authenticate(self, token: str | None) -> SessionIdentity:
        """Verify a session token presented to a protected route."""
        return self._core.tokens.verify(token)

    async def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create an account and return a session token for it."""
        if not username.strip() or not email.strip() or not password:
            raise ValidationError("Todos los campos son requeridos")
        user = await self._core.services.user.create_user(username, email, password)
        return self._issue(user)

    async def login(self, login: str, password: str) -> AuthResult:
        """Authenticate by username or email and mark the user online."""
        if not login.strip() or not password:
            raise ValidationError("Username y password son requeridos")
        user = await self._core.services.user.authenticate(login, password)
        if user is None:
            raise AuthenticationError("Credenciales incorrectas")
        await self._core.services.user.set_status(user.id, UserStatus.ONLINE)
        return self._issue(user)

    async def get_contacts(self, identity: SessionIdentity) -> list[ContactView]:
        """Get the current user's contacts with presence, last message and unread count."""
        services = self._core.services
        contacts = await services.contact.list_contacts(identity.user_id)
        users = await services.user.get_users([contact.contact_id for contact in contacts])

        views: list[tuple[datetime, ContactView]] = []
        for contact in contacts:
            user = users.get(contact.contact_id)
            if user is None:
                continue
            last_message = await services.message.get_last_message(identity.user_id, user.id)
            unread = await services.message.count_unread(identity.user_id, user.id)
            online = self.gateway.presence.is_online(user.id)
            view = ContactView(
                id=user.id,
                username=user.username,
                foto=user.photo,
                online=online,
                ultimo_acceso="Ahora" if online else format_last_seen(user.last_seen),
                ultimoMensaje=last_message.content if last_message else "",
                horaUltimoMensaje=format_clock(last_message.created_at) if last_message else "",
                mensajesNoLeidos=unread,
            )
            views.append((last_message.created_at if last_message else contact.created_at, view))

        views.sort(key=lambda item: item[0], reverse=True)
        return [view for _, view in views]

    async def add_contact(self, identity: SessionIdentity, contact_id: str | None, username: str | None) -> User:
        """Add a contact by id or by username."""
        if contact_id:
            user = await self._core.services.user.find_user(_parse_user_id(contact_id))
        elif username and username.strip():
            user = await self._core.services.user.search_by_username(username.strip())
        else:
            raise ValidationError("Se requiere contacto_id o username")

        if user is None:
            raise NotFoundError("Usuario no encontrado")
        await self._core.services.contact.add_contact(identity.user_id, user.id)
        return user

    async def search_user(self, identity: SessionIdentity, term: str) -> UserSearchView | None:  # noqa: ARG002
        """Find a user by username. The term is validated before the store is queried."""
        term = validate_search_term(term)
        user = await self._core.services.user.search_by_username(term)
        if user is None:
            return None
        return UserSearchView.from_domain(user, online=self.gateway.presence.is_online(user.id))

    async def get_conversation(self, identity: SessionIdentity, peer_id: UUID) -> list[MessageView]:
        """Get message history with a peer, oldest first, and mark the peer's messages as read."""
        messages = await self._core.services.message.get_conversation(identity.user_id, peer_id)
        await self._core.services.message.mark_read(identity.user_id, peer_id)
        return [MessageView.from_domain(message) for message in messages]

    async def upload_file(
        self,
        identity: SessionIdentity,  # noqa: ARG002
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> StoredFile:
        return await self._core.services.upload.save_file(filename, content, mime_type)

    def get_upload_file_info(self, stored_name: str) -> UploadFileInfo:
        return self._core.services.upload.get_file_info(stored_name)

    def get_status(self) -> dict[str, Any]:
        """Runtime status: uptime and who is connected right now."""
        sessions = self.gateway.presence.sessions()
        return {
            "status": "online",
            "uptime": round(time.monotonic() - self._started_at, 3),
            "connected_users": len(sessions),
            "users_list": [
                {"userId": str(s.user_id), "email": s.email, "connectedAt": s.connected_at.isoformat()} for s in sessions
            ],
        }

    def get_banner(self, endpoints: dict[str, Any]) -> dict[str, Any]:
        return {
            "message": "Chat API funcionando correctamente",
            "timestamp": now().isoformat(),
            "version": VERSION,
            "endpoints": endpoints,
            "connected_users": self.gateway.presence.count(),
        }

    # === Private helpers ===
    def _issue(self, user: User) -> AuthResult:
        token = self._core.tokens.issue(user.id, user.email)
        return AuthResult(token=token, user=UserView.from_domain(user))


def _parse_user_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise NotFoundError("Usuario no encontrado") from e
