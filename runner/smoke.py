#!/usr/bin/env python3
"""End-to-end smoke run against a live server.

Steps:
- wait for server health
- check that protected routes reject a missing token
- login, create a command, read it back
- update it and read it back again
- read an unknown id (expects 404)
- read status and history
- emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from robot_api.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import create_command, get, login, update_command, wait_for_health
from runner.types import StepResult
from runner.utils import check, missing_id_for, summarize

setup_logging()
logger = get_logger("runner")

_ANY_COMMAND = {"commandText": "MoveForward", "robot": "Robot1", "user": "user"}

# Requests that must be refused without a bearer token.
UNAUTHENTICATED_REQUESTS = (
    ("POST", "/command", {"json": _ANY_COMMAND}),
    ("PUT", "/command", {"params": {"id": 1}, "json": _ANY_COMMAND}),
    ("GET", "/command", {"params": {"id": 1}}),
    ("GET", "/status", {}),
    ("GET", "/history", {}),
)


async def _scenario(
    client: httpx.AsyncClient, *, username: str, password: str, robot: str
) -> list[StepResult]:
    steps: list[StepResult] = []

    for method, path, kwargs in UNAUTHENTICATED_REQUESTS:
        r = await client.request(method, path, **kwargs)
        steps.append(
            check(f"unauthenticated {method} {path}", r.status_code == 401, status=r.status_code)
        )

    token = await login(client, username, password)

    command_id = await create_command(
        client, token, command_text="MoveForward", robot=robot, user=username
    )
    r = await get(client, "/command", token, params={"id": command_id})
    body = r.json() if r.status_code == 200 else {}
    steps.append(
        check(
            "get created",
            r.status_code == 200
            and body.get("id") == command_id
            and body.get("commandText") == "MoveForward",
            status=r.status_code,
        )
    )

    r = await update_command(
        client, token, command_id, command_text="TurnLeft", robot=robot, user=username
    )
    steps.append(check("update", r.status_code == 200, status=r.status_code))

    r = await get(client, "/command", token, params={"id": command_id})
    body = r.json() if r.status_code == 200 else {}
    steps.append(
        check(
            "get updated",
            body.get("commandText") == "TurnLeft" and body.get("id") == command_id,
            status=r.status_code,
        )
    )

    missing = missing_id_for(command_id)
    r = await get(client, "/command", token, params={"id": missing})
    steps.append(check("get missing", r.status_code == 404, status=r.status_code, id=missing))

    r = await get(client, "/status", token)
    steps.append(
        check("status", r.status_code == 200 and "status" in r.json(), status=r.status_code)
    )

    r = await get(client, "/history", token)
    ids = [c.get("id") for c in r.json()] if r.status_code == 200 else []
    steps.append(check("history", command_id in ids, status=r.status_code))
    return steps


async def run_smoke(
    *,
    base_url: str,
    username: str,
    password: str,
    robot: str = "Robot1",
    timeout_s: float = 20.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    await wait_for_health(base_url, timeout_s, transport=transport)
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0, transport=transport) as client:
        steps = await _scenario(client, username=username, password=password, robot=robot)
    summary, exit_code = summarize(steps)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(
        run_smoke(
            base_url=args.base_url,
            username=args.username,
            password=args.password,
            robot=args.robot,
            timeout_s=args.timeout,
        )
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
