"""Read-through Redis cache of effective permissions.

One entry per user, key ``{prefix}:{user_id}``, value the JSON
``EffectivePermissions`` payload, fixed TTL (30 minutes by default).

The cache never decides an authorization on its own: on any backend
error or timeout it logs and falls through to direct computation.
Invalidation is explicit; every write path that changes a user's level,
active flag, overrides or expiry must call :meth:`PermissionCache.invalidate`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional, TypeVar

from pydantic import ValidationError
from redis.exceptions import RedisError

from .config import DEFAULT_CACHE_KEY_PREFIX, DEFAULT_CACHE_TTL_SECONDS, AccessConfig
from .exceptions import CacheError
from .interfaces import UserRecord
from .logging import get_user_logger
from .permissions.models import EffectivePermissions
from .permissions.resolver import PermissionResolver

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_BACKEND_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class PermissionCache:
    """Cache wrapping a :class:`PermissionResolver`.

    Args:
        resolver: Computes permissions on a miss.
        client: ``redis.asyncio.Redis`` (or compatible) client; ``None``
            disables caching.
        ttl_seconds: Entry lifetime.
        key_prefix: Key prefix, user id appended after ``:``.
        timeout: Upper bound in seconds for each Redis round-trip.
        retry_after: Seconds to bypass Redis after a backend failure.
    """

    def __init__(
        self,
        resolver: PermissionResolver,
        client: Optional[Any] = None,
        *,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        key_prefix: str = DEFAULT_CACHE_KEY_PREFIX,
        timeout: float = 0.5,
        retry_after: float = 5.0,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._ttl = ttl_seconds
        self._prefix = key_prefix
        self._timeout = timeout
        self._retry_after = retry_after
        self._unavailable_until = 0.0

    @classmethod
    def from_config(cls, config: AccessConfig, resolver: PermissionResolver) -> PermissionCache:
        """Build a cache with a ``redis.asyncio`` client from ``config.redis_url``."""
        client = None
        if config.redis_url:
            import redis.asyncio as aioredis

            client = aioredis.from_url(
                config.redis_url,
                decode_responses=True,
                socket_timeout=config.cache_timeout_seconds,
                socket_connect_timeout=config.cache_timeout_seconds,
            )
        else:
            logger.info("REDIS_URL not set, permission cache disabled")
        return cls(
            resolver,
            client,
            ttl_seconds=config.cache_ttl_seconds,
            key_prefix=config.cache_key_prefix,
            timeout=config.cache_timeout_seconds,
            retry_after=config.cache_retry_after_seconds,
        )

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def key(self, user_id: int) -> str:
        return f"{self._prefix}:{user_id}"

    # ── Backend guard ───────────────────────────────────

    def _available(self) -> bool:
        return self._client is not None and time.monotonic() >= self._unavailable_until

    def _mark_unavailable(self) -> None:
        self._unavailable_until = time.monotonic() + self._retry_after

    async def _call(self, awaitable: Awaitable[_T]) -> _T:
        return await asyncio.wait_for(awaitable, timeout=self._timeout)

    # ── Read-through ────────────────────────────────────

    async def get(self, user: UserRecord) -> EffectivePermissions:
        """Return cached permissions for ``user`` or compute and store them."""
        log = get_user_logger(__name__, user_id=user.id)

        if not self._available():
            return self._resolver.resolve(user)

        key = self.key(user.id)
        cached = await self._read(key, log)
        if cached is not None:
            log.debug("Cache hit for user %s authorizations.", user.id)
            return cached

        log.debug("Cache miss for user %s authorizations. Calculating.", user.id)
        permissions = self._resolver.resolve(user)
        if self._available():
            await self._store(key, permissions, log)
        return permissions

    async def _read(self, key: str, log: logging.LoggerAdapter) -> Optional[EffectivePermissions]:
        try:
            raw = await self._call(self._client.get(key))
        except _BACKEND_ERRORS as e:
            log.error("Error retrieving permission cache %s: %s", key, e)
            self._mark_unavailable()
            return None

        if not raw:
            return None

        try:
            permissions = EffectivePermissions.model_validate_json(raw)
        except ValidationError as e:
            log.warning("Discarding unreadable permission cache entry %s: %s", key, e.error_count())
            await self._delete_quietly(key, log)
            return None

        if permissions.expires_at is not None and permissions.expires_at < self._resolver.now():
            log.info("Authorization cache expired for %s. Recalculating.", key)
            await self._delete_quietly(key, log)
            return None

        return permissions

    async def _store(self, key: str, permissions: EffectivePermissions, log: logging.LoggerAdapter) -> None:
        try:
            await self._call(self._client.setex(key, self._ttl, permissions.model_dump_json()))
            log.debug("Authorizations cached under %s.", key)
        except _BACKEND_ERRORS as e:
            log.error("Error caching authorizations under %s: %s", key, e)
            self._mark_unavailable()

    async def _delete_quietly(self, key: str, log: logging.LoggerAdapter) -> None:
        try:
            await self._call(self._client.delete(key))
        except _BACKEND_ERRORS as e:
            log.error("Error deleting permission cache %s: %s", key, e)
            self._mark_unavailable()

    # ── Invalidation ────────────────────────────────────

    async def invalidate(self, user_id: int) -> None:
        """Delete the cached entry of ``user_id``.

        Ignores the failure bypass window: a delete is always attempted
        when a backend is configured.

        Raises:
            CacheError: The backend is configured but the delete failed.
        """
        if self._client is None:
            return

        key = self.key(user_id)
        try:
            await self._call(self._client.delete(key))
        except _BACKEND_ERRORS as e:
            logger.error("Failed to invalidate authorization cache for user %s: %s", user_id, e)
            self._mark_unavailable()
            raise CacheError(
                f"Authorization cache for user {user_id} could not be invalidated",
                user_id=user_id,
            ) from e
        logger.debug("Authorization cache invalidated for user %s", user_id)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()


__all__ = ["PermissionCache"]
