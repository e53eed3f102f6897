import re

from chatrelay.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_RE = re.compile(r"^[\w.-]{2,32}$")
MIN_SEARCH_LENGTH = 2


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 6 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 6:
        raise ValidationError("La contraseña debe tener al menos 6 caracteres")

    if any(char.isspace() for char in password):
        raise ValidationError("La contraseña no puede contener espacios")


def validate_username(username: str) -> None:
    if not USERNAME_RE.fullmatch(username):
        raise ValidationError("El username debe tener entre 2 y 32 caracteres (letras, números, '.', '-', '_')")


def validate_email(email: str) -> None:
    if not EMAIL_RE.fullmatch(email):
        raise ValidationError("Email inválido")


def validate_search_term(term: str) -> str:
    """Return the stripped search term, rejecting terms shorter than two characters."""
    term = term.strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise ValidationError(f"El término de búsqueda debe tener al menos {MIN_SEARCH_LENGTH} caracteres")
    return term
