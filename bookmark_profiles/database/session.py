"""
Database session management for the bookmark profile store.

This module provides centralized database session management using
SQLAlchemy 2.0+. It handles engine creation, session factory setup, and
provides a context manager for safe session usage with proper cleanup.

Key Features:
    - Engine initialization from DatabaseConfig (SQLite or a pooled server database)
    - Session factory for creating database sessions
    - Context manager for automatic session cleanup
    - Connection testing function to verify database accessibility
    - Table creation helper

Usage:
    ```python
    from bookmark_profiles.database.session import get_session

    with get_session() as session:
        store = ProfileStore(session)
        profile = store.get_active_profile()
    ```
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookmark_profiles.config import DatabaseConfig, get_settings
from bookmark_profiles.database.models import Base

logger = logging.getLogger(__name__)

# Global engine instance (initialized on first use)
_engine: Engine | None = None

# Session factory (initialized after engine creation)
SessionLocal: sessionmaker[Session] | None = None


def _engine_options(db_config: DatabaseConfig) -> Dict[str, Any]:
    """
    Build create_engine keyword arguments for the configured backend.

    SQLite does not take pool sizing arguments; an in-memory SQLite database
    must share one connection or every session would see an empty database.
    """
    options: Dict[str, Any] = {"echo": db_config.echo}

    if db_config.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_config.url or db_config.url.rstrip("/") == "sqlite:":
            options["poolclass"] = StaticPool
        return options

    options.update(
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_pre_ping=True,
        pool_recycle=db_config.pool_recycle,
        pool_timeout=db_config.pool_timeout,
    )
    return options


def create_engine_from_config(db_config: DatabaseConfig) -> Engine:
    """
    Create a new engine without touching the global one.

    Raises:
        ValueError: If database URL is missing
        SQLAlchemyError: If engine creation fails
    """
    if not db_config.url:
        raise ValueError("Database URL is required. Set DATABASE_URL environment variable.")

    try:
        return create_engine(db_config.url, **_engine_options(db_config))
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database engine: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating database engine: {e}")
        raise SQLAlchemyError(f"Failed to initialize database engine: {e}") from e


def init_engine(config: DatabaseConfig | None = None) -> Engine:
    """
    Initialize the global SQLAlchemy engine.

    Args:
        config: Optional DatabaseConfig instance. If None, uses settings.database

    Returns:
        Initialized SQLAlchemy Engine instance
    """
    global _engine

    if _engine is not None:
        return _engine

    db_config = config or get_settings().database
    _engine = create_engine_from_config(db_config)
    logger.info(f"Database engine initialized (sqlite={db_config.is_sqlite})")
    return _engine


def create_tables(engine: Engine | None = None) -> None:
    """Create every table known to the models' metadata."""
    Base.metadata.create_all(engine or init_engine())
    logger.info("Database tables created")


def get_session_factory() -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Returns:
        Session factory (sessionmaker) for creating database sessions
    """
    global SessionLocal

    if SessionLocal is not None:
        return SessionLocal

    engine = init_engine()

    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    logger.debug("Session factory created")
    return SessionLocal


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    The session is committed on success, rolled back on exception, and
    closed in all cases.

    Yields:
        SQLAlchemy Session instance
    """
    session_factory = get_session_factory()
    session: Session = session_factory()

    try:
        yield session
        session.commit()
        logger.debug("Session committed successfully")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error occurred, rolling back transaction: {e}")
        raise
    except Exception as e:
        session.rollback()
        logger.error(f"Unexpected error in session, rolling back transaction: {e}")
        raise
    finally:
        session.close()
        logger.debug("Session closed")


def test_connection(config: DatabaseConfig | None = None) -> bool:
    """
    Test database connection to verify accessibility.

    Returns:
        True if connection test succeeds, False otherwise
    """
    db_config = config or get_settings().database

    try:
        test_engine = create_engine_from_config(db_config)
        with test_engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        test_engine.dispose()

        logger.info("Database connection test successful")
        return True

    except (SQLAlchemyError, ValueError) as e:
        logger.error(f"Database connection test failed: {e}")
        return False


def close_engine() -> None:
    """
    Close the database engine and cleanup resources.

    Call during application shutdown, or between tests that need a fresh engine.
    """
    global _engine, SessionLocal

    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine closed")

    SessionLocal = None
