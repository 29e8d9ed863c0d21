"""Session stores for registration sessions.

Both stores give read-your-writes per key, expire sessions after a period of
inactivity and hand out a per-key lock that serialises one transition
(get, mutate, save) for a user. Different keys never contend.
"""
from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import LockError, RedisError

from api.shared.exceptions import StoreError
from bot.session import RegistrationSession
from infra.resources import RedisResource

logger = structlog.get_logger("eventbot.sessions")


class SessionStore(ABC):
    """Keyed storage of registration sessions."""

    def create(self, user_key: str) -> RegistrationSession:
        """New session at BEGIN; nothing is stored until `save`."""
        return RegistrationSession(user_key=user_key)

    @abstractmethod
    async def get(self, user_key: str) -> Optional[RegistrationSession]:
        """Current session for the key, or None when absent or expired."""

    @abstractmethod
    async def save(self, session: RegistrationSession) -> None:
        """Persist the session and restart its inactivity timer."""

    @abstractmethod
    async def invalidate(self, user_key: str) -> None:
        """Expire the session immediately."""

    @abstractmethod
    def lock(self, user_key: str):
        """Async context manager giving exclusive access to one key."""


class _KeyedLocks:
    """asyncio locks created on demand and dropped once nobody holds or waits."""

    def __init__(self) -> None:
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)


class InMemorySessionStore(SessionStore):
    """Process-local store. Suitable for a single worker process."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Sessions are kept serialised so callers never share a mutable copy
        self._sessions: Dict[str, Tuple[str, float]] = {}
        self._locks = _KeyedLocks()

    async def get(self, user_key: str) -> Optional[RegistrationSession]:
        entry = self._sessions.get(user_key)
        if entry is None:
            return None
        payload, expires_at = entry
        if expires_at <= self._clock():
            del self._sessions[user_key]
            logger.info("session.expired", user_key=user_key)
            return None
        return RegistrationSession.model_validate_json(payload)

    async def save(self, session: RegistrationSession) -> None:
        now = self._clock()
        self._sweep(now)
        self._sessions[session.user_key] = (session.model_dump_json(), now + self.ttl_seconds)

    def _sweep(self, now: float) -> None:
        """Drop every expired session, not only those read again."""
        expired = [key for key, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for key in expired:
            del self._sessions[key]
        if expired:
            logger.info("session.swept", count=len(expired))

    async def invalidate(self, user_key: str) -> None:
        self._sessions.pop(user_key, None)

    def lock(self, user_key: str):
        return self._locks.hold(user_key)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """Redis-backed store shared by every API worker.

    Sessions live as JSON under `<prefix>:<key>` with an `EX` expiry; the
    per-key lock is a Redis lock under `<prefix>-lock:<key>`.
    """

    def __init__(
        self,
        redis_resource: RedisResource,
        ttl_seconds: int,
        key_prefix: str = "session",
        lock_timeout: float = 10.0,
    ):
        self.redis_resource = redis_resource
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.lock_timeout = lock_timeout

    @property
    def client(self):
        if self.redis_resource.client is None:
            raise StoreError("Redis session store is not connected")
        return self.redis_resource.client

    def _key(self, user_key: str) -> str:
        return f"{self.key_prefix}:{user_key}"

    async def get(self, user_key: str) -> Optional[RegistrationSession]:
        try:
            payload = await self.client.get(self._key(user_key))
        except RedisError as e:
            raise StoreError("could not read session", {"user_key": user_key}) from e
        if payload is None:
            return None
        try:
            return RegistrationSession.model_validate_json(payload)
        except PydanticValidationError as e:
            raise StoreError("stored session is corrupt", {"user_key": user_key}) from e

    async def save(self, session: RegistrationSession) -> None:
        try:
            await self.client.set(
                self._key(session.user_key),
                session.model_dump_json(),
                ex=self.ttl_seconds,
            )
        except RedisError as e:
            raise StoreError("could not save session", {"user_key": session.user_key}) from e

    async def invalidate(self, user_key: str) -> None:
        try:
            await self.client.delete(self._key(user_key))
        except RedisError as e:
            raise StoreError("could not invalidate session", {"user_key": user_key}) from e

    @asynccontextmanager
    async def lock(self, user_key: str) -> AsyncIterator[None]:
        lock = self.client.lock(
            f"{self.key_prefix}-lock:{user_key}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            raise StoreError("could not lock session", {"user_key": user_key}) from e
        if not acquired:
            raise StoreError("timed out waiting for session lock", {"user_key": user_key})
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # The lock outlived its timeout and was taken over; the turn already ran
                logger.warning("session.lock_expired", user_key=user_key)
