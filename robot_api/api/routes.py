from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..domain.records import Command, RobotStatus
from ..service.control_service import ControlService
from .deps import get_service, require_subject
from .models import (
    CommandAccepted,
    CommandRequest,
    CommandUpdated,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
)

router = APIRouter()

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"}}
_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Missing or invalid parameters"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown command id"}}

# Ids are stored as signed 64-bit integers.
_ID_MIN, _ID_MAX = -(2**63), 2**63 - 1


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse}, **_BAD_REQUEST},
    summary="Exchange credentials for a bearer token",
)
async def login(
    req: LoginRequest, service: ControlService = Depends(get_service)
) -> LoginResponse:
    token = service.login(username=req.username, password=req.password)
    return LoginResponse(token=token)


# Store-touching handlers are sync so FastAPI runs them on its thread pool.


@router.post(
    "/command",
    response_model=CommandAccepted,
    responses={**_UNAUTHORIZED, **_BAD_REQUEST},
    summary="Record a new command",
)
def create_command(
    req: CommandRequest,
    subject: str = Depends(require_subject),
    service: ControlService = Depends(get_service),
) -> CommandAccepted:
    record = service.create_command(
        command_text=req.command_text, robot=req.robot, user=req.user, subject=subject
    )
    return CommandAccepted(message="Command accepted", command_id=record.id)


@router.put(
    "/command",
    response_model=CommandUpdated,
    responses={**_UNAUTHORIZED, **_BAD_REQUEST, **_NOT_FOUND},
    summary="Overwrite an existing command",
)
def update_command(
    req: CommandRequest,
    command_id: int = Query(..., alias="id", ge=_ID_MIN, le=_ID_MAX, description="Command id"),
    subject: str = Depends(require_subject),
    service: ControlService = Depends(get_service),
) -> CommandUpdated:
    record = service.update_command(
        command_id=command_id,
        command_text=req.command_text,
        robot=req.robot,
        user=req.user,
        subject=subject,
    )
    return CommandUpdated(message="Command updated", updated_command=record)


@router.get(
    "/command",
    response_model=Command,
    responses={**_UNAUTHORIZED, **_BAD_REQUEST, **_NOT_FOUND},
    summary="Fetch a command by id",
    dependencies=[Depends(require_subject)],
)
def get_command(
    command_id: int = Query(..., alias="id", ge=_ID_MIN, le=_ID_MAX, description="Command id"),
    service: ControlService = Depends(get_service),
) -> Command:
    return service.get_command(command_id=command_id)


@router.get(
    "/status",
    response_model=RobotStatus,
    responses=_UNAUTHORIZED,
    summary="Current robot status",
    dependencies=[Depends(require_subject)],
)
def get_status(service: ControlService = Depends(get_service)) -> RobotStatus:
    return service.current_status()


@router.get(
    "/history",
    response_model=list[Command],
    responses=_UNAUTHORIZED,
    summary="All commands in creation order",
    dependencies=[Depends(require_subject)],
)
def get_history(service: ControlService = Depends(get_service)) -> list[Command]:
    return service.history()
