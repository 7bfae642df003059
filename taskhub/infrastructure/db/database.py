"""
Database configuration and session management.
"""

from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import NullPool

from taskhub.config import Settings, get_settings


# Create declarative base
Base = declarative_base()


def create_db_engine(settings: Optional[Settings] = None) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.
    """
    settings = settings or get_settings()

    if settings.database_url.startswith("sqlite"):
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    return create_engine(
        settings.database_url,
        poolclass=NullPool,
        echo=settings.debug,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Create a session factory bound to ``engine``.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """
    Create all tables. Intended for development and tests.
    """
    # Import models so they are registered on Base.metadata
    from taskhub.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Yield a database session and close it afterwards.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
