"""
Storage - Database Engine.

============================================================
RESPONSIBILITY
============================================================
Creates SQLAlchemy engines and sessions for snapshot storage.

- Engine creation with pooling for server databases
- Session factory
- Explicit transaction boundaries
- Schema creation

============================================================
DESIGN PRINCIPLES
============================================================
- Engines are created explicitly and passed around
- Commit on success, roll back on ANY exception
- SQLAlchemy errors surface as StorageError

============================================================
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.exceptions import StorageError
from storage.models import Base


logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///war_sync.db"


# =============================================================
# DATABASE ENGINE
# =============================================================

def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.getenv("DATABASE_URL")
    if not url:
        url = DEFAULT_DATABASE_URL
        logger.warning(f"DATABASE_URL not set, using default: {url}")
    return url


def create_database_engine(
    database_url: Optional[str] = None,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> Engine:
    """
    Create SQLAlchemy engine.

    SQLite gets a thread-shareable connection (commits run in a
    worker thread); in-memory SQLite additionally uses a single
    static connection so every session sees the same database.

    Args:
        database_url: SQLAlchemy URL (defaults to DATABASE_URL)
        pool_size: Number of connections to keep in pool
        max_overflow: Max connections beyond pool_size
        pool_timeout: Seconds to wait for available connection
        pool_recycle: Recycle connections after N seconds
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    database_url = database_url or get_database_url()

    logger.info(f"Creating database engine for: {database_url.split('@')[-1]}")

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)
    else:
        engine = create_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,
            echo=echo,
        )

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("Database connection established")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


# =============================================================
# SESSION MANAGEMENT
# =============================================================

@contextmanager
def transaction_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for explicit transaction boundaries.

    Commits only if no exception occurs.
    Rolls back on ANY exception.

    Usage:
        with transaction_scope(factory) as session:
            session.add(record)
            # Commits automatically at end

    Raises:
        StorageError: If the database rejects the transaction
    """
    session = session_factory()
    try:
        yield session
        session.commit()
        logger.debug("Database transaction committed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Database transaction failed, rolling back: {e}")
        session.rollback()
        raise StorageError(
            message=f"Transaction failed: {e}",
            operation="transaction",
            cause=e,
        ) from e
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================
# DATABASE INITIALIZATION
# =============================================================

def verify_database_connection(engine: Engine) -> bool:
    """
    Verify database connection is working.

    Raises:
        StorageError: If connection fails
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        raise StorageError(
            message=f"Cannot connect to database: {e}",
            operation="connect",
            cause=e,
        ) from e

    logger.info("Database connection verified successfully")
    return True


def create_all_tables(engine: Engine) -> None:
    """
    Create all tables defined in the ORM models.

    Raises:
        StorageError: If table creation fails
    """
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")
        raise StorageError(
            message=f"Table creation failed: {e}",
            operation="create_schema",
            cause=e,
        ) from e

    logger.info("Database tables created successfully")
