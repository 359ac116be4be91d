from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StepResult:
    """Outcome of one smoke check."""

    name: str
    ok: bool
    detail: dict[str, Any] = field(default_factory=dict)


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class LoginError(SmokeError):
    """Raised when the server refuses the configured credentials."""


class RequestError(SmokeError):
    """Raised when a request fails after retries or returns an unexpected status."""
