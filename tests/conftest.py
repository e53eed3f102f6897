"""Shared pytest fixtures and in-memory collaborators."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any
from uuid import UUID

import pytest

from chatrelay.config import Config
from chatrelay.core.modules.contact.models import Contact
from chatrelay.core.modules.message.models import Message, MessageType
from chatrelay.core.modules.session.codec import TokenCodec
from chatrelay.core.modules.upload.models import StoredFile
from chatrelay.core.modules.user.models import User, UserStatus
from chatrelay.errors import ConflictError, NotFoundError, ValidationError
from chatrelay.realtime.gateway import RealtimeGateway

SECRET = "test-secret-key-with-enough-length"

ALICE_ID = UUID("11111111-1111-4111-8111-111111111111")
BOB_ID = UUID("22222222-2222-4222-8222-222222222222")
CAROL_ID = UUID("33333333-3333-4333-8333-333333333333")


class FakeTransport:
    """Records everything the gateway sends."""

    def __init__(self) -> None:
        self.emitted: list[tuple[str, dict[str, Any], str]] = []
        self.broadcasts: list[tuple[str, dict[str, Any], str | None]] = []
        self.disconnected: list[str] = []

    async def emit(self, event: str, data: dict[str, Any], to: str) -> None:
        self.emitted.append((event, data, to))

    async def broadcast(self, event: str, data: dict[str, Any], skip: str | None = None) -> None:
        self.broadcasts.append((event, data, skip))

    async def disconnect(self, handle: str) -> None:
        self.disconnected.append(handle)

    def received(self, handle: str, event: str | None = None) -> list[dict[str, Any]]:
        return [data for ev, data, to in self.emitted if to == handle and (event is None or ev == event)]

    def events_for(self, handle: str) -> list[str]:
        return [ev for ev, _, to in self.emitted if to == handle]

    def broadcast_events(self, event: str) -> list[tuple[dict[str, Any], str | None]]:
        return [(data, skip) for ev, data, skip in self.broadcasts if ev == event]


class FakeChatStore:
    """In-memory ChatStore for the gateway."""

    def __init__(self) -> None:
        self.messages: list[Message] = []
        self.online_calls: list[UUID] = []
        self.offline_calls: list[UUID] = []
        self.fail_create = False
        self.fail_status = False
        self.create_gate: asyncio.Event | None = None

    async def create_message(self, sender_id: UUID, recipient_id: UUID, content: str, message_type: MessageType) -> Message:
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.fail_create:
            raise ConnectionError("database unavailable")
        message = Message(sender_id=sender_id, recipient_id=recipient_id, content=content, type=message_type)
        self.messages.append(message)
        return message

    async def mark_online(self, user_id: UUID) -> None:
        if self.fail_status:
            raise ConnectionError("database unavailable")
        self.online_calls.append(user_id)

    async def mark_offline(self, user_id: UUID) -> None:
        if self.fail_status:
            raise ConnectionError("database unavailable")
        self.offline_calls.append(user_id)


class FakeUserService:
    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}
        self.passwords: dict[UUID, str] = {}
        self.statuses: list[tuple[UUID, UserStatus]] = []
        self.search_calls: list[str] = []

    def add(self, user_id: UUID, username: str, email: str, password: str = "secret1") -> User:
        user = User(id=user_id, username=username, email=email, password_hash="not-used")
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    async def create_user(self, username: str, email: str, password: str) -> User:
        if any(u.username == username or u.email == email for u in self.users.values()):
            raise ConflictError(f"El usuario '{username}' ya existe")
        user = User(username=username, email=email, password_hash="not-used")
        self.users[user.id] = user
        self.passwords[user.id] = password
        return user

    async def authenticate(self, login: str, password: str) -> User | None:
        for user in self.users.values():
            if login in (user.username, user.email) and self.passwords[user.id] == password:
                return user
        return None

    async def find_user(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    async def search_by_username(self, term: str) -> User | None:
        self.search_calls.append(term)
        return next((u for u in self.users.values() if u.username.lower() == term.lower()), None)

    async def get_users(self, user_ids: list[UUID]) -> dict[UUID, User]:
        return {user_id: self.users[user_id] for user_id in user_ids if user_id in self.users}

    async def set_status(self, user_id: UUID, status: UserStatus) -> None:
        self.statuses.append((user_id, status))


class FakeMessageService:
    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def create_message(self, sender_id: UUID, recipient_id: UUID, content: str, message_type: MessageType) -> Message:
        if not content.strip():
            raise ValidationError("El mensaje no puede estar vacío")
        message = Message(sender_id=sender_id, recipient_id=recipient_id, content=content, type=message_type)
        self.messages.append(message)
        return message

    def _between(self, user_id: UUID, peer_id: UUID) -> list[Message]:
        pair = {user_id, peer_id}
        return [m for m in self.messages if {m.sender_id, m.recipient_id} == pair]

    async def get_conversation(self, user_id: UUID, peer_id: UUID) -> list[Message]:
        return [m.model_copy() for m in sorted(self._between(user_id, peer_id), key=lambda m: m.created_at)]

    async def mark_read(self, recipient_id: UUID, sender_id: UUID) -> int:
        changed = 0
        for message in self.messages:
            if message.sender_id == sender_id and message.recipient_id == recipient_id and not message.read:
                message.read = True
                changed += 1
        return changed

    async def get_last_message(self, user_id: UUID, peer_id: UUID) -> Message | None:
        messages = self._between(user_id, peer_id)
        return max(messages, key=lambda m: m.created_at) if messages else None

    async def count_unread(self, recipient_id: UUID, sender_id: UUID) -> int:
        return sum(1 for m in self.messages if m.sender_id == sender_id and m.recipient_id == recipient_id and not m.read)


class FakeContactService:
    def __init__(self) -> None:
        self.contacts: list[Contact] = []

    async def add_contact(self, owner_id: UUID, contact_id: UUID) -> Contact:
        if owner_id == contact_id:
            raise ValidationError("No puedes agregarte a ti mismo como contacto")
        if any(c.owner_id == owner_id and c.contact_id == contact_id for c in self.contacts):
            raise ConflictError("El contacto ya existe")
        contact = Contact(owner_id=owner_id, contact_id=contact_id)
        self.contacts.append(contact)
        return contact

    async def list_contacts(self, owner_id: UUID) -> list[Contact]:
        return [c for c in self.contacts if c.owner_id == owner_id]


class FakeUploadService:
    def __init__(self) -> None:
        self.saved: list[StoredFile] = []

    async def save_file(self, filename: str, content: bytes, mime_type: str) -> StoredFile:
        if not content:
            raise ValidationError("No se recibió archivo")
        stored = StoredFile(
            stored_name=f"1_{filename}",
            original_name=filename,
            size=len(content),
            mime_type=mime_type,
            url=f"http://testserver/uploads/1_{filename}",
        )
        self.saved.append(stored)
        return stored

    def get_file_info(self, stored_name: str) -> Any:
        raise NotFoundError("Archivo no encontrado")


class FakeCore:
    """Stands in for Core: same attributes, in-memory services, no MongoDB."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.tokens = TokenCodec(config.jwt_secret, ttl_days=config.token_ttl_days)
        self.services = SimpleNamespace(
            user=FakeUserService(),
            message=FakeMessageService(),
            contact=FakeContactService(),
            upload=FakeUploadService(),
        )

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        yield


@pytest.fixture
def config(tmp_path):
    return Config(jwt_secret=SECRET, uploads_path=str(tmp_path), public_url="http://testserver")


@pytest.fixture
def codec():
    return TokenCodec(SECRET)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def chat_store():
    return FakeChatStore()


@pytest.fixture
async def gateway(chat_store, codec, transport):
    gateway = RealtimeGateway(chat_store, codec)
    gateway.bind_transport(transport)
    yield gateway
    await gateway.drain()


@pytest.fixture
def fake_core(config):
    return FakeCore(config)


@pytest.fixture
def online(gateway, codec):
    """Connect a user through the full handshake and return the identity."""

    async def _connect(user_id: UUID, handle: str, email: str | None = None):
        token = codec.issue(user_id, email or f"{handle}@example.com")
        identity = await gateway.connect(handle, {"token": token})
        await gateway.announce(handle)
        return identity

    return _connect
