"""Database engine and session management."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from sectionstore.core.config import get_settings
from sectionstore.core.structured_logging import log_json

logger = logging.getLogger(__name__)


def _install_slow_query_logging(engine: AsyncEngine, threshold_ms: float) -> None:
    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _before_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ) -> None:
        context._query_start_time = time.perf_counter()

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def _after_cursor_execute(
        conn, cursor, statement, parameters, context, executemany
    ) -> None:
        start = getattr(context, "_query_start_time", None)
        if start is None:
            return

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms < threshold_ms:
            return

        max_len = 2000
        stmt = str(statement)
        if len(stmt) > max_len:
            stmt = stmt[: max_len - 3] + "..."

        log_json(
            logger,
            logging.WARNING,
            "slow_query",
            duration_ms=round(duration_ms, 2),
            statement=stmt,
        )


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the async engine from settings on first use.

    Raises:
        RuntimeError: If DATABASE_URL is not configured
    """
    settings = get_settings()
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured")

    # NullPool for test databases avoids sharing connections across event loops
    use_null_pool = settings.environment == "test" or "test" in settings.database_url
    kwargs = {"poolclass": NullPool} if use_null_pool else {"pool_pre_ping": True}
    engine = create_async_engine(settings.database_url, echo=False, **kwargs)

    if settings.slow_query_ms > 0:
        _install_slow_query_logging(engine, settings.slow_query_ms)

    return engine


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Provide a session that commits on success and rolls back on error.

    Usage:
        async with session_scope() as db:
            await SectionService(db).set_section_name(7, 3, ".text")
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
