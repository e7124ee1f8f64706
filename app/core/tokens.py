"""Signed, expiring access and refresh tokens (JWT)."""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import jwt

from app.core.config import Settings

TokenType = Literal["access", "refresh"]

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class InvalidToken(Exception):
    """Token is malformed, has a bad signature, is expired or of the wrong type."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by both token types."""

    sub: str
    email: str
    role: str


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """
    Issues and verifies access/refresh tokens.

    Stateless: holds only the signing configuration it was constructed with.
    The clock is injectable so expiry can be exercised in tests.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._access_secret = settings.JWT_SECRET.get_secret_value()
        self._refresh_secret = settings.refresh_secret()
        self._algorithm = settings.JWT_ALGORITHM
        self.access_ttl = timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
        self._clock = clock

    def issue_access(self, claims: TokenClaims) -> str:
        """Create a short-lived access token."""
        return self._encode(claims, ACCESS_TOKEN, self.access_ttl, self._access_secret)

    def issue_refresh(self, claims: TokenClaims) -> str:
        """Create a long-lived refresh token."""
        return self._encode(claims, REFRESH_TOKEN, self.refresh_ttl, self._refresh_secret)

    def verify(self, token: str, expected_type: TokenType = ACCESS_TOKEN) -> TokenClaims:
        """
        Decode and validate a token; return its identity claims.
        Raises InvalidToken on bad signature, malformed input, expiry or wrong type.
        """
        secret = self._refresh_secret if expected_type == REFRESH_TOKEN else self._access_secret
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken() from e
        if payload.get("type") != expected_type:
            raise InvalidToken("Wrong token type")
        sub = payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")
        if not sub or not isinstance(email, str) or not isinstance(role, str):
            raise InvalidToken("Invalid token payload")
        return TokenClaims(sub=str(sub), email=email, role=role)

    def _encode(
        self,
        claims: TokenClaims,
        token_type: TokenType,
        ttl: timedelta,
        secret: str,
    ) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": claims.sub,
            "email": claims.email,
            "role": claims.role,
            "type": token_type,
            # Two tokens minted in the same second must still differ.
            "jti": secrets.token_urlsafe(16),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)
