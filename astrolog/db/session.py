"""SQLModel engine and session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from astrolog.core.config import settings


def build_engine(url: str, **kwargs: Any) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on.

    Cascading deletes live in the schema, so SQLite must enforce them the
    same way the hosted Postgres does.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        new_engine = create_engine(url, echo=False, **kwargs)

        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return new_engine
    return create_engine(url, echo=False, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.database_url)


def init_db(bind: Engine | None = None) -> None:
    # Import for side effects: registers every table on the metadata
    import astrolog.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Commit everything written inside the block, or nothing at all."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a database session as a context manager.

    For FastAPI dependency injection, use ``astrolog.api.deps.get_db`` instead.
    """
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()
