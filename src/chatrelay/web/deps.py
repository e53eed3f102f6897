from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatrelay.app import App
from chatrelay.core.modules.session.models import SessionIdentity

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_identity(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> SessionIdentity:
    """Verify the Authorization Bearer token. Missing token is 401, invalid token is 403."""
    return app.authenticate(credentials.credentials if credentials else None)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
IdentityDep = Annotated[SessionIdentity, Depends(get_identity)]
