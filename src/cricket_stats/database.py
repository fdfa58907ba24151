"""Database connection and session management."""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import settings


# Global engine instance
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url``; SQLite connections enforce foreign keys."""
    engine = create_engine(url, pool_pre_ping=True, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_database_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database.url, echo=settings.database.echo)
    return _engine


def configure_engine(engine: Optional[Engine]) -> None:
    """Swap the global engine (tests, alternative databases)."""
    global _engine, _SessionLocal
    _engine = engine
    _SessionLocal = None


def get_session_local() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=get_database_engine()
        )
    return _SessionLocal


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session with automatic cleanup."""
    session_local = get_session_local()
    session = session_local()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create all database tables."""
    from .models import Base
    Base.metadata.create_all(bind=get_database_engine())


def drop_tables() -> None:
    """Drop all database tables."""
    from .models import Base
    Base.metadata.drop_all(bind=get_database_engine())
