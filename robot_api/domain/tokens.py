from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import BaseModel, ValidationError

from .errors import InvalidTokenError, TokenExpiredError

__all__ = [
    "TOKEN_ALGORITHM",
    "DEFAULT_TOKEN_TTL",
    "Clock",
    "TokenClaims",
    "utcnow",
    "TokenIssuer",
    "TokenAuthenticator",
]

TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(hours=10)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


# ------------------------
# Schema
# ------------------------
class TokenClaims(BaseModel):
    """Claims carried by an access token.

    `sub` and `name` both hold the username; `iat`/`exp` are epoch seconds.
    """

    sub: str
    name: str
    iat: int
    exp: int


# ------------------------
# Issue / authenticate
# ------------------------
class TokenIssuer:
    """Signs time-bounded access tokens for an authenticated subject."""

    def __init__(
        self,
        signing_key: str,
        *,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Clock = utcnow,
    ) -> None:
        if not signing_key:
            raise ValueError("signing_key must be non-empty")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._key = signing_key
        self._ttl = ttl
        self._clock = clock

    def issue(self, subject: str) -> str:
        """Return a compact HS256 JWT asserting `subject`, valid for the ttl."""
        now = self._clock()
        claims = TokenClaims(
            sub=subject,
            name=subject,
            iat=int(now.timestamp()),
            exp=int((now + self._ttl).timestamp()),
        )
        return jwt.encode(claims.model_dump(), self._key, algorithm=TOKEN_ALGORITHM)


class TokenAuthenticator:
    """Validates presented bearer tokens.

    Signature and algorithm are checked by PyJWT; expiry is checked here
    against the injected clock with no leeway. Issuer and audience are not
    checked.
    """

    def __init__(self, signing_key: str, *, clock: Clock = utcnow) -> None:
        if not signing_key:
            raise ValueError("signing_key must be non-empty")
        self._key = signing_key
        self._clock = clock

    def decode(self, token: str | None) -> TokenClaims:
        """Decode and validate a token, raising InvalidTokenError/TokenExpiredError."""
        if not token:
            raise InvalidTokenError("Missing bearer token")

        try:
            data = jwt.decode(
                token,
                self._key,
                algorithms=[TOKEN_ALGORITHM],
                options={
                    # exp is checked below against the injected clock; iat and
                    # nbf would otherwise be checked against the wall clock.
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_aud": False,
                    "verify_iss": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Token is invalid") from e

        try:
            claims = TokenClaims(**data)
        except ValidationError as e:
            raise InvalidTokenError("Token claims are malformed") from e

        if self._clock().timestamp() >= claims.exp:
            raise TokenExpiredError("Token has expired")
        return claims

    def authenticate(self, token: str | None) -> str:
        """Return the subject of a valid token."""
        return self.decode(token).sub
