"""
JobTrail Backend — Service Context
====================================

What:  One object that owns the process-wide resources: settings, the async
       engine, the session factory, the auth attempt limiter and the account
       service configured from settings.
Why:   Nothing is created at import time. Each app instance (and each test)
       gets its own store, and shutdown disposes exactly what startup built.
How:   create_app() attaches a ServiceContext to app.state.context; the
       lifespan handler calls start() and close(). Dependencies read it back
       from request.app.state.context.

Startup sequence (start()):
    1. Build the engine for the configured storage mode
    2. Probe the store with SELECT 1, retried by tenacity
    3. create_all() the schema when AUTO_CREATE_SCHEMA is on
    4. Publish the session factory; requests are served from here on
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from jobtrail import models  # noqa: F401  (registers every table on Base.metadata)
from jobtrail.config import Settings
from jobtrail.database import Base, build_engine
from jobtrail.middleware.rate_limit import AuthAttemptLimiter
from jobtrail.services.auth_service import AuthService
from jobtrail.timestamps import utc_now

logger = logging.getLogger(__name__)


class ServiceContext:
    """Process-wide resources for one application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self.auth_limiter = AuthAttemptLimiter(
            max_attempts=settings.auth_rate_limit_attempts,
            window_seconds=settings.auth_rate_limit_window,
        )
        self.auth_service = AuthService(
            token_ttl_days=settings.token_ttl_days,
            pin_hash_rounds=settings.pin_hash_rounds,
        )
        self.started_at = utc_now()

    @property
    def is_ready(self) -> bool:
        return self.session_factory is not None

    async def start(self) -> None:
        """
        Connects to the record store and prepares the schema.

        Raises:
            OperationalError / InterfaceError: the store stayed unreachable
                for every configured attempt.
        """
        engine = build_engine(self.settings)
        try:
            await self._wait_for_store(engine)
            if self.settings.auto_create_schema:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                logger.info("Schema ensured (create_all)")
        except Exception:
            await engine.dispose()
            raise

        self.engine = engine
        # expire_on_commit=False: response models are built from ORM rows
        # after the request's commit.
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.started_at = utc_now()
        logger.info("Record store ready (%s)", engine.dialect.name)

    async def _wait_for_store(self, engine: AsyncEngine) -> None:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((OperationalError, InterfaceError, OSError)),
            stop=stop_after_attempt(self.settings.store_connect_attempts),
            wait=wait_fixed(self.settings.store_connect_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))

    async def check_store(self) -> bool:
        """Single readiness probe for /health; never raises."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (OperationalError, InterfaceError, OSError) as e:
            logger.warning("Health check: record store unreachable: %s", str(e))
            return False

    async def close(self) -> None:
        """Disposes the engine. Requests after close() get 503."""
        self.session_factory = None
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info("Database engine disposed")
