"""Service configuration read from the environment.

Settings are loaded once at startup and passed explicitly into the
components that need them (token issuer/authenticator, credential verifier,
stores). Nothing here is mutated after the app is created.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .logging_conf import get_logger

__all__ = [
    "DEFAULT_SIGNING_KEY",
    "Settings",
    "load_settings",
]

logger = get_logger("config")

# Development-only key; deployments set ROBOT_API_SIGNING_KEY.
DEFAULT_SIGNING_KEY = "ThisIsASecretKeyForJwtTokenGeneration!123"


class Settings(BaseModel):
    """Immutable runtime settings."""

    model_config = ConfigDict(frozen=True)

    signing_key: str = Field(DEFAULT_SIGNING_KEY, min_length=1)
    token_ttl_hours: float = Field(10.0, gt=0)
    username: str = "user"
    password: str = "password"
    database_url: Optional[str] = None
    log_level: str = "INFO"
    app_version: str = "0.1.0"


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number") from e


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Raises:
        ValueError: if a variable is present but invalid.
    """
    env = os.environ if env is None else env

    ttl = _get_float(env, "ROBOT_API_TOKEN_TTL_HOURS", 10.0)
    if ttl <= 0:
        raise ValueError("ROBOT_API_TOKEN_TTL_HOURS must be > 0")

    signing_key = env.get("ROBOT_API_SIGNING_KEY") or DEFAULT_SIGNING_KEY
    if signing_key == DEFAULT_SIGNING_KEY:
        logger.warning(
            "config.default_signing_key",
            extra={"event": "config_default_signing_key"},
        )

    return Settings(
        signing_key=signing_key,
        token_ttl_hours=ttl,
        username=env.get("ROBOT_API_USERNAME", "user"),
        password=env.get("ROBOT_API_PASSWORD", "password"),
        database_url=env.get("DATABASE_URL") or None,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        app_version=env.get("APP_VERSION", "0.1.0"),
    )
