"""Relational database configuration and session management."""

import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from crm.config import Settings

logger = logging.getLogger(__name__)

Base: Any = declarative_base()


class Database:
    """Owns the SQLAlchemy engine (connection pool) and session factory.

    Built once per application and handed to whatever needs it; nothing in the
    package reaches for a module-level engine.
    """

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
        )

    def init_schema(self) -> None:
        """Create any missing tables."""
        # Import all models here so they are registered with Base.metadata
        from crm import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        """Return True if a connection can be checked out and used."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Relational database ping failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Relational database pool disposed")


def get_database(request: Request) -> Database:
    """Dependency that provides the application's Database."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = get_database(request).SessionLocal()
    try:
        yield db
    finally:
        db.close()
