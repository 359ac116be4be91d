from __future__ import annotations

import hmac
from typing import Protocol

from ..logging_conf import get_logger
from .errors import InvalidCredentialsError

__all__ = [
    "CredentialVerifier",
    "StaticCredentialVerifier",
]

logger = get_logger("auth.credentials")


class CredentialVerifier(Protocol):
    def verify(self, username: str, password: str) -> str:
        """Return the subject for a valid pair or raise InvalidCredentialsError."""
        ...


class StaticCredentialVerifier:
    """Accepts exactly one configured username/password pair.

    Stand-in for a real credential backend (hashed password store, identity
    provider); swap it out by passing another CredentialVerifier to create_app.
    """

    def __init__(self, username: str, password: str) -> None:
        self._username = username.encode("utf-8")
        self._password = password.encode("utf-8")

    def verify(self, username: str, password: str) -> str:
        # Compare both fields even when the first mismatches
        user_ok = hmac.compare_digest(username.encode("utf-8"), self._username)
        pass_ok = hmac.compare_digest(password.encode("utf-8"), self._password)
        if not (user_ok and pass_ok):
            logger.warning(
                "auth.login_failed",
                extra={"event": "auth_login_failed", "username": username},
            )
            raise InvalidCredentialsError("Invalid username or password")
        logger.info("auth.login", extra={"event": "auth_login", "username": username})
        return username
