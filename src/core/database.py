"""Database connection and session management.

This module owns the SQLAlchemy engine behind an explicitly constructed
``Database`` handle. The handle is created at startup, passed to whatever
needs it, and disposed at shutdown.
"""

import functools
import logging
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import DATABASE_TIMEOUT
from core.exceptions import StoreUnavailableError
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, url: str, timeout: float = DATABASE_TIMEOUT):
        """Initialize the database handle.

        Args:
            url: SQLAlchemy database URL.
            timeout: Seconds a connection may wait on a lock or the pool.
        """
        self.url = url
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite":
            if parsed.database and parsed.database != ":memory:":
                # Ensure data directory exists
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False, "timeout": timeout},
            )
        else:
            self.engine = create_engine(url, pool_timeout=timeout, pool_pre_ping=True)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def iter_session(self) -> Iterator[Session]:
        """Yield a session and close it afterwards."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def store_operation(func):
    """Translate store failures raised by a manager method.

    Any ``SQLAlchemyError`` rolls back the manager's session, is logged with
    its traceback and surfaces as ``StoreUnavailableError``.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Store operation %s failed", func.__qualname__)
            raise StoreUnavailableError() from exc

    return wrapper
