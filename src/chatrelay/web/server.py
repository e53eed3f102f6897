from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp

from chatrelay.app import VERSION, App
from chatrelay.config import Config
from chatrelay.errors import UserError
from chatrelay.realtime.server import create_socketio_server
from chatrelay.web.error_handlers import (
    general_exception_handler,
    http_exception_handler,
    request_validation_handler,
    user_error_handler,
)
from chatrelay.web.openapi import set_custom_openapi
from chatrelay.web.routers import (
    auth_router,
    contacts_router,
    files_router,
    messages_router,
    metadata_router,
    users_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Chat Relay API",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.app = app_instance
    app.state.config = config

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials="*" not in config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(auth_router, prefix="/api")
    app.include_router(contacts_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(messages_router, prefix="/api")
    app.include_router(files_router)
    app.include_router(metadata_router)

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app


def create_asgi_app(app_instance: App, config: Config) -> ASGIApp:
    """Mount the Socket.IO server in front of the FastAPI app on the same port."""
    fastapi_app = create_fastapi_app(app_instance, config)
    sio = create_socketio_server(app_instance.gateway, config.cors_origins)
    return socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
