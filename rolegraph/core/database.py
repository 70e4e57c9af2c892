"""Engine, session factory and transaction helpers."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator
from urllib.parse import urlparse

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rolegraph.core.config import AppSettings, get_settings

_MEMORY_PATHS = ("", ":memory:", "/:memory:")


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the directory holding a file-backed SQLite database."""

    path = urlparse(database_url).path
    if path in _MEMORY_PATHS:
        return
    # sqlite:///./data/rolegraph.db parses to "/./data/rolegraph.db"
    db_path = Path(path[1:]) if path.startswith("/.") else Path(path)
    db_path.expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _sqlite_engine_kwargs(database_url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if urlparse(database_url).path in _MEMORY_PATHS:
        # One shared connection, otherwise every checkout sees an empty database.
        kwargs["poolclass"] = StaticPool
    return kwargs


def build_engine(settings: AppSettings) -> Engine:
    url = settings.database_url
    if not url.startswith("sqlite"):
        return create_engine(url, future=True, echo=settings.sql_echo, pool_pre_ping=True)

    _ensure_sqlite_directory(url)
    sqlite_engine = create_engine(url, future=True, echo=settings.sql_echo, **_sqlite_engine_kwargs(url))

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ANN001
        # Membership rows restrict role deletion through their foreign key.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine: Engine = build_engine(get_settings())

SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Commit on success, roll back on any error, always close."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Iterator[Session]:
    """FastAPI dependency: one transaction per request."""

    with session_scope() as session:
        yield session


def check_connection() -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
