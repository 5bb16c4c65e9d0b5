"""Configuration module for the sentiment API."""

from .settings import settings
from .database import get_db, get_session_factory, engine, SessionLocal

__all__ = ["settings", "get_db", "get_session_factory", "engine", "SessionLocal"]
