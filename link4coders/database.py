"""Database configuration and session management."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from link4coders.config import get_settings

settings = get_settings()

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables and synchronize the template catalog."""
    # Import all models here so they are registered with Base.metadata
    from link4coders import models  # noqa: F401
    from link4coders.services.templates import sync_template_catalog

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        sync_template_catalog(db)
    finally:
        db.close()
