import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatrelay.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    TokenInvalidError,
    ValidationError,
)

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /api/status",
    "POST /api/auth/register",
    "POST /api/auth/login",
    "GET /api/contacts",
    "POST /api/contacts/add",
    "POST /api/users/search",
    "GET /api/messages/:userId",
    "POST /api/files/upload",
]


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create the {success: false, message} envelope with optional type for machine parsing."""
    content: dict[str, object] = {"success": False, "message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, TokenInvalidError):
        status_code = 403
        error_type = "invalid_token"
    elif isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ConflictError):
        status_code = 409
        error_type = "conflict"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_handler(_: Request, exc: Exception) -> Response:
    """Malformed or missing request fields are a 400 like any other validation error."""
    fields: list[str] = []
    if isinstance(exc, RequestValidationError):
        fields = [str(err["loc"][-1]) for err in exc.errors() if err.get("loc")]
    message = f"Datos inválidos: {', '.join(fields)}" if fields else "Datos inválidos"
    return create_json_error_response(status_code=400, message=message, error_type="validation_error")


async def http_exception_handler(_: Request, exc: Exception) -> Response:
    """Unmatched routes get the endpoint listing; other HTTP errors keep their status."""
    status_code = exc.status_code if isinstance(exc, StarletteHTTPException) else 500
    if status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Endpoint no encontrado", "availableEndpoints": AVAILABLE_ENDPOINTS},
        )
    detail = exc.detail if isinstance(exc, StarletteHTTPException) else "Error"
    return create_json_error_response(status_code=status_code, message=str(detail))


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500). Upstream details are logged, never returned."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="Error interno del servidor", error_type="internal_server_error"
    )
