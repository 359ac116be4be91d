from __future__ import annotations

__all__ = [
    "RobotApiError",
    "AuthError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "TokenExpiredError",
    "CommandNotFoundError",
    "BadRequestError",
    "InternalFaultError",
    "StoreUnavailableError",
]


class RobotApiError(Exception):
    """Base class for errors the API maps to a response.

    The `code` attribute is a stable machine code for the error body.
    """

    code: str = "error"


# ------------------------
# Authentication
# ------------------------
class AuthError(RobotApiError):
    code = "unauthorized"


class InvalidCredentialsError(AuthError):
    code = "invalid_credentials"


class InvalidTokenError(AuthError):
    code = "invalid_token"


class TokenExpiredError(InvalidTokenError):
    code = "token_expired"


# ------------------------
# Commands / requests
# ------------------------
class CommandNotFoundError(RobotApiError):
    code = "not_found"

    def __init__(self, command_id: int) -> None:
        super().__init__(f"Command {command_id} not found")
        self.command_id = command_id


class BadRequestError(RobotApiError):
    code = "bad_request"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


# ------------------------
# Internal faults
# ------------------------
class InternalFaultError(RobotApiError):
    """Unexpected server-side failure; detail is logged, never returned."""

    code = "internal_error"


class StoreUnavailableError(InternalFaultError):
    code = "store_unavailable"
