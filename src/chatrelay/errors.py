from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Recurso no encontrado") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Autenticación fallida") -> None:
        super().__init__(message)


class TokenMissingError(AuthenticationError):
    """Raised when a protected operation is called without a token."""

    def __init__(self, message: str = "Token requerido") -> None:
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Raised when a token has a bad signature, is expired or malformed."""

    def __init__(self, message: str = "Token inválido") -> None:
        super().__init__(message)


class ConflictError(UserError):
    """Raised when creating something that already exists (user, contact)."""


class ValidationError(UserError):
    """Raised when user input fails validation."""
