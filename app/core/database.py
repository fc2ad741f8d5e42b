"""
Database engine and session management using SQLAlchemy.
Uses synchronous SQLite by default; any SQLAlchemy URL can be configured.
"""

from typing import Any, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.core.config import get_settings

settings = get_settings()


def _unicode_lower(value: Any) -> Optional[Any]:
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `url`.
    SQLite connections are shared with worker threads and get a
    Unicode-aware lower(), which case-insensitive matching compiles to.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    db_engine = create_engine(url, connect_args={"check_same_thread": False}, echo=echo)
    event.listen(db_engine, "connect", _register_sqlite_functions)
    return db_engine


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""
    pass


def init_db() -> None:
    """Create all database tables from model metadata."""
    # Register models on the metadata before creating tables
    import app.models.transaction  # noqa: F401

    Base.metadata.create_all(bind=engine)
