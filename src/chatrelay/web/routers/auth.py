from fastapi import APIRouter
from pydantic import BaseModel, Field

from chatrelay.app import AuthResult
from chatrelay.core.modules.user.models import UserView
from chatrelay.web.deps import AppDep
from chatrelay.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    """Account registration request."""

    username: str = Field("", description="Display name, unique")
    email: str = Field("", description="Email address, unique")
    password: str = Field("", description="Password, at least 6 characters without spaces")


class LoginRequest(BaseModel):
    """Authentication request."""

    username: str = Field("", description="Username or email")
    password: str = Field("", description="Password for authentication")


class AuthResponse(BaseModel):
    """Authentication response."""

    success: bool = True
    token: str = Field(..., description="Session token for the Authorization header and the Socket.IO handshake")
    usuario: UserView

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(token=result.token, usuario=result.user)


@router.post(
    "/auth/register",
    summary="Register account",
    description="Create an account and receive a session token.",
    operation_id="register",
    responses={
        200: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Username or email already registered"},
    },
)
async def register(data: RegisterRequest, app: AppDep) -> AuthResponse:
    return AuthResponse.from_result(await app.register(data.username, data.email, data.password))


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with username (or email) and password to receive a session token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(data: LoginRequest, app: AppDep) -> AuthResponse:
    return AuthResponse.from_result(await app.login(data.username, data.password))
