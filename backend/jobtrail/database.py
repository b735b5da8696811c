"""
JobTrail Backend — Database Engine & Session Management
=========================================================

What:  Async SQLAlchemy engine construction, the declarative Base, and the
       per-request session dependency.
How:   build_engine() creates an engine for either deployment shape
       (PostgreSQL via asyncpg, SQLite via aiosqlite). The engine and its
       session factory are owned by the ServiceContext (see context.py);
       get_db_session() borrows a session from the context attached to the app.

Session Lifecycle:
    1. A session is opened from the context's factory for each request
    2. The route handler runs its service calls against it
    3. On success: commit
    4. On error: rollback, then re-raise for the global handlers
"""

import logging
from contextlib import contextmanager
from typing import AsyncGenerator, Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from jobtrail.config import Settings
from jobtrail.exceptions import DatabaseError, StoreUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models register on this metadata; Alembic and the startup
    create_all() both read it.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement off for every new connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured store.

    SQLite (local mode) uses SQLAlchemy's default pool for aiosqlite and
    foreign keys are switched on per connection. PostgreSQL (cloud mode) gets
    the configured pool size, overflow and pre-ping.
    """
    url = settings.resolved_database_url

    if settings.is_sqlite:
        engine = create_async_engine(
            url,
            echo=settings.log_level == "DEBUG",
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    else:
        engine = create_async_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            echo=settings.log_level == "DEBUG",
        )

    logger.info(
        "Database engine created (mode=%s, dialect=%s)",
        settings.storage_mode,
        engine.dialect.name,
    )
    return engine


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Translates SQLAlchemy failures raised inside a service call.

    Connection-level failures become StoreUnavailableError (retryable);
    anything else SQLAlchemy raises becomes DatabaseError. Application
    exceptions pass through untouched.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.error("Record store unavailable during %s: %s", operation, str(e))
        raise StoreUnavailableError(context={"operation": operation}) from e
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Raises:
        StoreUnavailableError: the context has not been started (or was
            closed), or the store refused the connection.
    """
    context = request.app.state.context
    factory = context.session_factory
    if factory is None:
        logger.error("Request received before the record store was initialized")
        raise StoreUnavailableError(retry_after=context.settings.store_retry_after)

    async with factory() as session:
        try:
            yield session
            await session.commit()
        except (OperationalError, InterfaceError, ConnectionError) as e:
            await session.rollback()
            logger.error("Record store unavailable: %s", str(e))
            raise StoreUnavailableError(
                retry_after=context.settings.store_retry_after,
                context={"error_type": type(e).__name__},
            ) from e
        except Exception:
            await session.rollback()
            raise
