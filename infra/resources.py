"""Infrastructure resources: DB and Redis.

This module is part of the infra layer and must not import from application features.
"""
from typing import Any, Optional

import redis.asyncio as redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str, **engine_options: Any):
        self.database_url = database_url
        self.engine_options = engine_options
        self.engine: Optional[AsyncEngine] = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        if self.engine is not None:
            return self
        options = {"echo": False, "pool_pre_ping": True, "pool_recycle": 3600}
        options.update(self.engine_options)
        self.engine = create_async_engine(self.database_url, **options)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def ping(self) -> None:
        """Fail loudly when the database cannot be reached."""
        assert self.engine is not None, "Database not initialized"
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_tables(self, base: type[DeclarativeBase]) -> None:
        """Create any missing tables declared on `base`."""
        assert self.engine is not None, "Database not initialized"
        async with self.engine.begin() as conn:
            await conn.run_sync(base.metadata.create_all)

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class RedisResource:
    """Redis resource for dependency injection."""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self.client: Optional[redis.Redis] = None

    async def init(self):
        """Create the client; no connection is opened until first use."""
        if self.client is None:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
        return self

    async def connect(self):
        """Verify the server is reachable."""
        await self.init()
        await self.client.ping()

    async def disconnect(self):
        """Disconnect from Redis."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
