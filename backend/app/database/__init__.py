"""
Engine, session factory and declarative Base for Sideout.

Deployments talk to Postgres through the Supabase transaction pooler; tests
use in-memory SQLite. Sessions never autocommit: services commit through
``BaseService.transaction()``.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Generator, TypeVar
from urllib.parse import urlparse

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# pgbouncer restarts surface as these; anything else is a real failure
_TRANSIENT_DISCONNECTS = (
    "server closed the connection",
    "ssl connection has been closed unexpectedly",
)


def _postgres_connect_args(db_url: str) -> dict[str, Any]:
    connect_args: dict[str, Any] = {
        "connect_timeout": 5,
        "keepalives": 1,
        "keepalives_idle": 15,
        "application_name": "sideout_api",
    }
    if settings.db_statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={settings.db_statement_timeout_ms}"
    if "supabase" in (urlparse(db_url).hostname or "").lower():
        connect_args["sslmode"] = "require"
    return connect_args


def build_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        # one shared connection, otherwise every session sees its own empty database
        if ":memory:" in db_url or db_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)

    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=2,
        # Supavisor drops idle server connections after about a minute
        pool_recycle=30,
        pool_pre_ping=True,
        connect_args=_postgres_connect_args(db_url),
    )


engine: Engine = build_engine(settings.database_url)


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # lesson -> instructor cascades and review -> lesson uniqueness rely on FKs
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, rolled back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def with_db_retry(op_name: str, func: Callable[[], T], *, max_attempts: int = 3) -> T:
    """Run ``func``, retrying only the transient pooler disconnects."""
    attempt = 1
    while True:
        try:
            return func()
        except OperationalError as exc:
            message = str(exc).lower()
            if attempt >= max_attempts or not any(s in message for s in _TRANSIENT_DISCONNECTS):
                raise
            delay = 0.1 * (2 ** (attempt - 1)) + random.uniform(0, 0.05 * attempt)
            logger.warning(
                f"Transient database disconnect during {op_name}, retrying",
                extra={"op": op_name, "attempt": attempt, "delay": delay},
            )
            time.sleep(delay)
            attempt += 1


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db", "with_db_retry"]
