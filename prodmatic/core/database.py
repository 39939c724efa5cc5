"""
Async database session management.

One request = one session = one transaction. The request-scoped session is
committed once after the handler returns; any exception rolls back the whole
unit of work, so a mutation and its audit entry are persisted together or not
at all. SQLAlchemy failures surface as StorageError.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from prodmatic.core.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the engine and hands out sessions with rollback on failure."""

    def __init__(self, database_url: str, **engine_kwargs: Any) -> None:
        engine_kwargs.setdefault("pool_pre_ping", True)
        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> DatabaseSessionManager:
        """Wrap an existing engine (used by the test suite)."""
        manager = cls.__new__(cls)
        manager.engine = engine
        manager._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        return manager

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that rolls back on any exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as exc:
            await session.rollback()
            logger.error("Integrity constraint violated: %s", exc.orig)
            raise ConflictError(
                "The change conflicts with existing data", code="INTEGRITY_CONFLICT"
            ) from exc
        except OperationalError as exc:
            await session.rollback()
            logger.error("Database operational error: %s", exc.orig)
            raise StorageError("The database is unavailable") from exc
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Database operation failed: %s", exc)
            raise StorageError("Database operation failed") from exc
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except StorageError:
            logger.exception("Database health check failed")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Initialized on startup
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **engine_kwargs: Any) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **engine_kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: request-scoped session committed after the handler."""
    async with get_db_manager().session() as session:
        yield session
        await session.commit()
