"""Database configuration using SQLAlchemy."""

from typing import Callable, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from .settings import settings

# Sync engine; FastAPI runs sync database work in its thread pool and the
# processor services wrap their queries in asyncio.to_thread
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
    pool_recycle=3600,
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """Dependency that provides the session factory for processor services."""
    return SessionLocal


def init_db() -> None:
    """Initialize database tables."""
    # Import all models to register them with Base
    from api import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

