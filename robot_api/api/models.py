from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..domain.records import CamelModel, Command


class LoginRequest(CamelModel):
    """Credentials for a login attempt. Missing fields fail verification."""
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str


class CommandRequest(CamelModel):
    """Body of POST/PUT /command."""
    command_text: str
    robot: str
    user: str


class CommandAccepted(CamelModel):
    message: str
    command_id: int


class CommandUpdated(CamelModel):
    message: str
    updated_command: Command


class ErrorResponse(BaseModel):
    """Shape of every error body."""
    error: str
    code: Optional[str] = None
