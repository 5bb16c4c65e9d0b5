"""Database configuration for processor."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from processor.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
