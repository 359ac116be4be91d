from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.errors import CommandNotFoundError, StoreUnavailableError
from ..domain.records import Command
from ..logging_conf import get_logger
from .database import CommandRow, Database

__all__ = [
    "CommandStore",
    "InMemoryCommandStore",
    "SqlCommandStore",
]

logger = get_logger("storage.commands")

# SQLite INTEGER range; ids outside it can never have been assigned.
_MIN_ID, _MAX_ID = -(2**63), 2**63 - 1


def _storable(command_id: int) -> bool:
    return _MIN_ID <= command_id <= _MAX_ID


class CommandStore(Protocol):
    """Owns command records. Ids are assigned here and never change."""

    def create(self, command_text: str, robot: str, user: str) -> Command: ...

    def get_by_id(self, command_id: int) -> Command | None: ...

    def update(self, command_id: int, command_text: str, robot: str, user: str) -> Command:
        """Overwrite the mutable fields; raises CommandNotFoundError if absent."""
        ...

    def list_all(self) -> list[Command]:
        """All records in creation order."""
        ...


class InMemoryCommandStore:
    """Process-local store.

    One lock covers id assignment, updates and reads. Records are frozen, so
    what callers get back can't alter stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, Command] = {}
        self._next_id = 1

    def create(self, command_text: str, robot: str, user: str) -> Command:
        with self._lock:
            record = Command(id=self._next_id, command_text=command_text, robot=robot, user=user)
            self._records[record.id] = record
            self._next_id += 1
        return record

    def get_by_id(self, command_id: int) -> Command | None:
        with self._lock:
            return self._records.get(command_id)

    def update(self, command_id: int, command_text: str, robot: str, user: str) -> Command:
        with self._lock:
            current = self._records.get(command_id)
            if current is None:
                raise CommandNotFoundError(command_id)
            # Replacing an existing key keeps its insertion position
            record = current.model_copy(
                update={"command_text": command_text, "robot": robot, "user": user}
            )
            self._records[command_id] = record
        return record

    def list_all(self) -> list[Command]:
        with self._lock:
            return list(self._records.values())


def _to_record(row: CommandRow) -> Command:
    return Command(id=row.id, command_text=row.command_text, robot=row.robot, user=row.user)


class SqlCommandStore:
    """SQLAlchemy-backed store; each call is one transaction under a store lock."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._lock = threading.RLock()

    @contextmanager
    def _scope(self, op: str) -> Iterator[Session]:
        with self._lock:
            try:
                with self._db.session_scope() as session:
                    yield session
            except SQLAlchemyError as e:
                logger.exception(
                    "store.error",
                    extra={"event": "store_error", "store": "commands", "op": op},
                )
                raise StoreUnavailableError("command store unavailable") from e

    def create(self, command_text: str, robot: str, user: str) -> Command:
        with self._scope("create") as session:
            row = CommandRow(command_text=command_text, robot=robot, user=user)
            session.add(row)
            session.flush()  # assigns the id
            return _to_record(row)

    def get_by_id(self, command_id: int) -> Command | None:
        if not _storable(command_id):
            return None
        with self._scope("get") as session:
            row = session.get(CommandRow, command_id)
            return _to_record(row) if row is not None else None

    def update(self, command_id: int, command_text: str, robot: str, user: str) -> Command:
        if not _storable(command_id):
            raise CommandNotFoundError(command_id)
        with self._scope("update") as session:
            row = session.get(CommandRow, command_id)
            if row is None:
                raise CommandNotFoundError(command_id)
            row.command_text = command_text
            row.robot = robot
            row.user = user
            session.flush()
            return _to_record(row)

    def list_all(self) -> list[Command]:
        with self._scope("list") as session:
            rows = session.query(CommandRow).order_by(CommandRow.id.asc()).all()
            return [_to_record(r) for r in rows]
