"""
Database configuration and session management for the Store Ratings API.

The engine and its connection pool are owned by a ``Database`` object that is
created when the application starts and disposed when it shuts down. Route
handlers get sessions through the ``get_db`` dependency.
"""

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException, Request, status
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from store_ratings.config import settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """Turn on foreign key enforcement so ON DELETE rules apply."""
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class Database:
    """Owns the engine, its connection pool and the session factory."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: Optional[int] = None,
        pool_timeout: Optional[int] = None,
    ):
        self.url = url
        engine_kwargs = {"echo": echo}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection, otherwise each thread sees its own empty DB
                engine_kwargs["poolclass"] = StaticPool
            else:
                db_dir = os.path.dirname(url.replace("sqlite:///", ""))
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
        else:
            if pool_size is not None:
                engine_kwargs["pool_size"] = pool_size
            if pool_timeout is not None:
                engine_kwargs["pool_timeout"] = pool_timeout
            engine_kwargs["pool_pre_ping"] = True

        self.engine: Engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.DATABASE_POOL_SIZE,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        )

    def create_all(self) -> None:
        """
        Initialize database by creating all tables.
        """
        # Import models to ensure they're registered
        from store_ratings.models import user, store, rating  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        from store_ratings.models import user, store, rating  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Context manager for database session.
        Use for non-FastAPI contexts (scripts, startup tasks).
        """
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        """Close every pooled connection."""
        logger.info("Disposing database connection pool")
        self.engine.dispose()


def commit_or_conflict(db: Session, conflict_detail: str) -> None:
    """
    Commit the session; a uniqueness violation becomes a 400 with the given
    message instead of a raw database error.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error on commit: {e.orig}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=conflict_detail)


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency for getting database session.
    Use in FastAPI route dependencies.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
