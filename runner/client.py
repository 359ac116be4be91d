from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from robot_api.logging_conf import get_logger
from runner.types import LoginError, RequestError, SmokeError

logger = get_logger("runner.client")

HEALTHY = "API is healthy"


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def wait_for_health(
    base_url: str,
    timeout_s: float = 20.0,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Ping /health until it reports healthy or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0, transport=transport) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/health")
                if r.status_code == 200 and r.json() == HEALTHY:
                    logger.info("health.ok", extra={"event": "health_ok"})
                    return
            except (httpx.HTTPError, ValueError):
                pass
            await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def login(client: httpx.AsyncClient, username: str, password: str) -> str:
    """Exchange credentials for a bearer token."""
    r = await client.post("/login", json={"username": username, "password": password})
    if r.status_code == 401:
        raise LoginError(f"credentials rejected for {username!r}")
    if r.status_code != 200:
        raise RequestError(f"login returned {r.status_code}")
    logger.info("login.ok", extra={"event": "login_ok", "username": username})
    return r.json()["token"]


async def create_command(
    client: httpx.AsyncClient, token: str, *, command_text: str, robot: str, user: str
) -> int:
    """POST a command and return its id. Not retried: creating is not idempotent."""
    r = await client.post(
        "/command",
        json={"commandText": command_text, "robot": robot, "user": user},
        headers=auth_headers(token),
    )
    if r.status_code != 200:
        raise RequestError(f"create returned {r.status_code}: {r.text}")
    command_id = r.json()["commandId"]
    logger.info("command.created", extra={"event": "command_created", "command_id": command_id})
    return command_id


async def update_command(
    client: httpx.AsyncClient,
    token: str,
    command_id: int,
    *,
    command_text: str,
    robot: str,
    user: str,
    retries: int = 2,
) -> httpx.Response:
    """PUT new fields for a command, retrying transport errors (PUT is idempotent)."""
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            return await client.put(
                "/command",
                params={"id": command_id},
                json={"commandText": command_text, "robot": robot, "user": user},
                headers=auth_headers(token),
            )
        except httpx.TransportError as e:
            last_err = e
            logger.warning(
                "update.retry",
                extra={
                    "event": "update_retry",
                    "command_id": command_id,
                    "attempt": attempt + 1,
                    "error": str(e),
                },
            )
    raise RequestError(f"update failed for {command_id}: {last_err}")


async def get(
    client: httpx.AsyncClient,
    path: str,
    token: str | None = None,
    *,
    params: dict[str, Any] | None = None,
    retries: int = 3,
) -> httpx.Response:
    """GET with retry on transport errors; status handling is left to the caller."""
    headers = auth_headers(token) if token else None
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            return await client.get(path, params=params, headers=headers)
        except httpx.TransportError as e:
            last_err = e
            logger.warning(
                "get.retry",
                extra={"event": "get_retry", "path": path, "attempt": attempt + 1, "error": str(e)},
            )
    raise RequestError(f"GET {path} failed: {last_err}")
