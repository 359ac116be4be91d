from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..service.control_service import ControlService

__all__ = ["bearer_scheme", "get_service", "require_subject"]

# auto_error=False so a missing header reaches the authenticator and gets the
# same 401 body as a bad token.
bearer_scheme = HTTPBearer(auto_error=False, description="Token from POST /login")


def get_service(request: Request) -> ControlService:
    return request.app.state.service


def require_subject(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: ControlService = Depends(get_service),
) -> str:
    """Authenticate the bearer token and return its subject."""
    token = credentials.credentials if credentials else None
    return service.authenticate(token)
