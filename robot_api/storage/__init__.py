"""Command store and status repository implementations."""
from .commands import CommandStore, InMemoryCommandStore, SqlCommandStore
from .database import Database
from .status import InMemoryStatusRepository, SqlStatusRepository, StatusRepository

__all__ = [
    "CommandStore",
    "Database",
    "InMemoryCommandStore",
    "InMemoryStatusRepository",
    "SqlCommandStore",
    "SqlStatusRepository",
    "StatusRepository",
]
