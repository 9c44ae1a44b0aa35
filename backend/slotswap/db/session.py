"""
Database session and engine.

The engine and session factory are the store handle: created once at import (process start),
handed to the negotiation engine by the app lifespan, disposed at shutdown.
"""
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from slotswap.config import settings


def make_engine(database_url: str) -> Engine:
    """Create an engine; pool sizing applies to server databases only."""
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _sqlite_foreign_keys(dbapi_connection, _record):
            # SQLite enforces foreign keys only when this is on per connection
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_timeout=settings.db_pool_timeout,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False: engine results are read after their unit of work has closed
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(settings.database_url)
SessionLocal = make_session_factory(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(session_factory: Callable[[], Session]) -> Iterator[Session]:
    """
    One atomic unit of work: commit when the block exits normally, roll back on any exception.
    Nothing is retried here; the exception propagates to the caller.
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
