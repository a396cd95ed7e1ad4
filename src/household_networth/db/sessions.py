"""Database engine and session management."""
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from household_networth.db import models  # noqa: F401  # pylint: disable=unused-import


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the synchronous engine for SQLModel sessions.

    SQLite connections are shared across the threadpool that serves sync
    routes; in-memory URLs use a single static connection so every session
    sees the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """Yield a database session; commits on success, rolls back on error."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call on startup (idempotent for existing tables)."""
    SQLModel.metadata.create_all(engine)
