"""SQLModel session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared across request threads."""
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, echo=False, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.database_url)


def init_db(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)


@contextmanager
def get_session(bind: Engine | None = None) -> Iterator[Session]:
    """Get a database session as a context manager (for use with 'with' statement).

    For FastAPI dependency injection, use ``app.api.deps.get_db`` instead.
    """
    session = Session(bind or engine)
    try:
        yield session
    finally:
        session.close()
