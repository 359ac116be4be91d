from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

__all__ = [
    "CamelModel",
    "Command",
    "RobotStatus",
    "DEFAULT_STATUS",
]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts either on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Command(CamelModel):
    """A control instruction recorded for a named robot."""

    model_config = ConfigDict(frozen=True)

    id: int
    command_text: str
    robot: str
    user: str


class RobotStatus(CamelModel):
    """Last known state descriptor of a robot."""

    model_config = ConfigDict(frozen=True)

    status: str
    position: str
    task: str


# Substituted when no status has been stored; never written back.
DEFAULT_STATUS = RobotStatus(status="Idle", position="0,0", task="None")
