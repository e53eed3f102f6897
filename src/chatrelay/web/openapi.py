from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from chatrelay.app import VERSION


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Chat Relay API",
            version=VERSION,
            summary="Real-time chat relay with presence and message history",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token returned by register/login",
            },
        }
        openapi_schema["security"] = [{"BearerAuth": []}]

        public_endpoints = {
            ("GET", "/"),
            ("GET", "/api/status"),
            ("POST", "/api/auth/register"),
            ("POST", "/api/auth/login"),
            ("GET", "/uploads/{file_name}"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"success": False, "message": "Credenciales incorrectas", "type": "authentication_error"},
                {"success": False, "message": "Token inválido", "type": "invalid_token"},
                {"success": False, "message": "El contacto ya existe", "type": "conflict"},
            ]
        }
    }
