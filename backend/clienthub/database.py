"""
ClientHub Backend - Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, admission gate and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers and the auth gate via FastAPI's dependency injection.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling:
    pool_size=10, max_overflow=0:  at most 10 physical connections
    pool_timeout=30:               a request waits this long for a free connection
    pool_pre_ping:                 validates connections before use
    pool_recycle=3600:             recycles connections every hour

    SQLite URLs (tests, local runs) use NullPool and skip the sizing arguments.

Admission Control:
    The pool itself queues waiters without limit. AdmissionGate counts requests
    holding or waiting for a session and rejects new ones with ServiceBusyError
    once pool capacity + DB_QUEUE_LIMIT are in flight.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Dict

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from clienthub.config import settings
from clienthub.exceptions import ServiceBusyError

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    """Pool arguments for the configured backend."""
    if settings.is_sqlite:
        return {"poolclass": pool.NullPool}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.sqlalchemy_url,
    # Echo SQL queries in DEBUG mode for development visibility
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the dependency commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share one metadata object,
    which Alembic and the test fixtures use to create the schema.
    """
    pass


# ── Admission Gate ────────────────────────────────────────────────────────
class AdmissionGate:
    """
    Caps the number of requests holding or waiting for a database session.

    Single event loop, so a plain counter is enough; increments and
    decrements never interleave with an await.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self.in_flight = 0

    @asynccontextmanager
    async def admit(self) -> AsyncIterator[None]:
        if self.in_flight >= self.capacity:
            logger.warning(
                "Admission rejected: %d requests in flight (capacity %d)",
                self.in_flight,
                self.capacity,
            )
            raise ServiceBusyError(in_flight=self.in_flight, capacity=self.capacity)
        self.in_flight += 1
        try:
            yield
        finally:
            self.in_flight -= 1


admission_gate = AdmissionGate(
    capacity=settings.db_pool_size + settings.db_max_overflow + settings.db_queue_limit,
)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Passes the admission gate (503 when saturated)
        2. Creates a new session from the factory
        3. Yields it to the route handler and the auth gate
        4. On success: commits the transaction
        5. On error: rolls back the transaction and re-raises
        6. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/clients")
        async def list_clients(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with admission_gate.admit():
        async with async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections; called during application shutdown."""
    await engine.dispose()
