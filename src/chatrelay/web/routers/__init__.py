from chatrelay.web.routers.auth import router as auth_router
from chatrelay.web.routers.contacts import router as contacts_router
from chatrelay.web.routers.files import router as files_router
from chatrelay.web.routers.messages import router as messages_router
from chatrelay.web.routers.metadata import router as metadata_router
from chatrelay.web.routers.users import router as users_router

__all__ = [
    "auth_router",
    "contacts_router",
    "files_router",
    "messages_router",
    "metadata_router",
    "users_router",
]
