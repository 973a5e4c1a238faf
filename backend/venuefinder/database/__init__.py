"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from datetime import datetime
import logging
import math
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from venuefinder.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _clamped_acos(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return math.acos(max(-1.0, min(1.0, value)))


def _null_safe(func: Any) -> Any:
    def wrapper(*args: Any) -> Any:
        if any(arg is None for arg in args):
            return None
        return func(*args)

    return wrapper


def install_sqlite_functions(dbapi_connection: Any) -> None:
    """
    Register the SQL math functions the search predicates rely on.

    Postgres ships them natively; SQLite (local dev and tests) does not
    reliably have them, so they are provided from Python.
    """
    dbapi_connection.create_function("acos", 1, _clamped_acos, deterministic=True)
    dbapi_connection.create_function("cos", 1, _null_safe(math.cos), deterministic=True)
    dbapi_connection.create_function("sin", 1, _null_safe(math.sin), deterministic=True)
    dbapi_connection.create_function("radians", 1, _null_safe(math.radians), deterministic=True)
    dbapi_connection.create_function("least", -1, _null_safe(min), deterministic=True)
    dbapi_connection.create_function("greatest", -1, _null_safe(max), deterministic=True)


def _build_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            db_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            future=True,
        )

        @event.listens_for(sqlite_engine, "connect")
        def _on_sqlite_connect(dbapi_connection: Any, _connection_record: Any) -> None:
            install_sqlite_functions(dbapi_connection)

        return sqlite_engine

    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_recycle=300,
        pool_pre_ping=True,
        future=True,
    )


engine: Engine = _build_engine(settings.database_url)


# Log pool events for monitoring
@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


@event.listens_for(engine, "checkout")
def receive_checkout(dbapi_connection: Any, connection_record: Any, connection_proxy: Any) -> None:
    logger.debug("Connection checked out from pool")


@event.listens_for(engine, "checkin")
def receive_checkin(dbapi_connection: Any, connection_record: Any) -> None:
    logger.debug("Connection returned to pool")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_engine() -> Engine:
    """FastAPI dependency for components that manage their own connections."""
    return engine


def get_db_pool_status() -> dict[str, Any]:
    """Get current database pool statistics."""
    pool = engine.pool
    if not isinstance(pool, QueuePool):
        return {"pool": type(pool).__name__}
    return {
        "size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "total": pool.size() + pool.overflow(),
        "overflow": pool.overflow(),
    }


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_pool_status",
    "get_engine",
    "install_sqlite_functions",
]
