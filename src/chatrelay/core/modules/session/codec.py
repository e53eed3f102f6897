"""Stateless signed session tokens (JWT, HS256)."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
import structlog

from chatrelay.core.modules.session.models import AuthToken, SessionIdentity
from chatrelay.errors import TokenInvalidError, TokenMissingError
from chatrelay.utils import now

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL_DAYS = 30


class TokenCodec:
    """Issues and verifies time-limited identity tokens carrying user id and email."""

    def __init__(self, secret: str, ttl_days: int = DEFAULT_TTL_DAYS) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(days=ttl_days)

    def issue(self, user_id: UUID, email: str) -> AuthToken:
        """Sign a token for the given identity, valid for the configured TTL."""
        issued_at = now().replace(microsecond=0)
        payload = {
            "userId": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return AuthToken(jwt.encode(payload, self._secret, algorithm=ALGORITHM))

    def verify(self, token: str | None) -> SessionIdentity:
        """Decode and validate a token.

        Raises:
            TokenMissingError: If no token was presented
            TokenInvalidError: If the signature, expiry or claims are not valid
        """
        if token is None or (isinstance(token, str) and not token.strip()):
            raise TokenMissingError
        if not isinstance(token, str):
            raise TokenInvalidError

        try:
            claims: dict[str, Any] = jwt.decode(
                token, self._secret, algorithms=[ALGORITHM], options={"require": ["exp", "iat", "userId"]}
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("token_expired")
            raise TokenInvalidError from e
        except jwt.PyJWTError as e:
            logger.debug("token_rejected", error=str(e))
            raise TokenInvalidError from e

        try:
            user_id = UUID(str(claims["userId"]))
            issued_at = datetime.fromtimestamp(int(claims["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(claims["exp"]), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenInvalidError from e

        if expires_at > issued_at + self._ttl:
            raise TokenInvalidError

        email = claims.get("email")
        return SessionIdentity(
            user_id=user_id,
            email=email if isinstance(email, str) else "",
            issued_at=issued_at,
            expires_at=expires_at,
        )
