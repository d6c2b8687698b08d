"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev) and PostgreSQL (prod).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from airtracker.config import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    """Current time as naive UTC, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure SQLite for concurrent ingestion and queries.

    WAL mode lets readers keep serving the last committed snapshot while
    the scheduler writes a new batch.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA synchronous=NORMAL')
    cursor.close()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine with settings appropriate for the database type."""
    engine_kwargs = {'echo': echo}

    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        # Scheduler worker and request threads share the pool
        engine_kwargs['connect_args'] = {'check_same_thread': False}

    db_engine = create_engine(url, **engine_kwargs)

    if is_sqlite:
        event.listen(db_engine, 'connect', _set_sqlite_pragma)

    return db_engine


def create_session_factory(bind: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Rows are handed out detached after commit
    )


engine = create_db_engine(config.database.url, echo=config.debug)

SessionLocal = create_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Initialize database schema.

    Creates all tables and indices if they don't exist.
    """
    # Import models so they register on Base.metadata
    from airtracker.models import aircraft, user_location  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
