from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..domain.errors import StoreUnavailableError
from ..domain.records import DEFAULT_STATUS, RobotStatus
from ..logging_conf import get_logger
from .database import Database, RobotStatusRow

__all__ = [
    "StatusRepository",
    "InMemoryStatusRepository",
    "SqlStatusRepository",
]

logger = get_logger("storage.status")


class StatusRepository(Protocol):
    def current(self) -> RobotStatus:
        """Stored snapshot, or DEFAULT_STATUS when nothing is stored."""
        ...


class InMemoryStatusRepository:
    def __init__(self, initial: RobotStatus | None = None) -> None:
        self._status = initial

    def current(self) -> RobotStatus:
        return self._status if self._status is not None else DEFAULT_STATUS


class SqlStatusRepository:
    """Reads the first stored status row. Never writes."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def current(self) -> RobotStatus:
        try:
            with self._db.session_scope() as session:
                row = session.query(RobotStatusRow).order_by(RobotStatusRow.id.asc()).first()
                if row is None:
                    return DEFAULT_STATUS
                return RobotStatus(status=row.status, position=row.position, task=row.task)
        except SQLAlchemyError as e:
            logger.exception("store.error", extra={"event": "store_error", "store": "status"})
            raise StoreUnavailableError("status store unavailable") from e
