"""SQLAlchemy plumbing for the durable stores.

Used only when DATABASE_URL is configured; the default deployment keeps
everything in memory.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Column, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

__all__ = [
    "Base",
    "CommandRow",
    "RobotStatusRow",
    "Database",
    "make_engine",
]

Base = declarative_base()


class CommandRow(Base):
    __tablename__ = "commands"
    # Never reuse ids of removed rows
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    command_text = Column(Text, nullable=False)
    robot = Column(String(255), nullable=False)
    user = Column(String(255), nullable=False)


class RobotStatusRow(Base):
    """Populated by an external writer; this service only reads it."""

    __tablename__ = "robot_statuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    task = Column(String(255), nullable=False)


def make_engine(url: str) -> Engine:
    """Create an engine, sharing one connection for in-memory SQLite."""
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


class Database:
    """Engine plus session factory for one database."""

    def __init__(self, url: str | None = None, *, engine: Engine | None = None) -> None:
        if engine is None:
            if not url:
                raise ValueError("either url or engine is required")
            engine = make_engine(url)
        self.engine = engine
        # Keep attributes loaded after commit so rows can be converted to
        # records once the session is closed.
        self._session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def init_db(self) -> None:
        """Create tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transactional scope: commit on success, rollback on error, always close."""
        db: Session = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
