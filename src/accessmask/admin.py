"""Write paths for user authorization state.

Every method persists the change through ``UserStore.save`` and then
invalidates the user's permission cache entry before returning, so the
next check resolves from the new state.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from .cache import PermissionCache
from .gate import load_user
from .interfaces import UserRecord, UserStore
from .permissions.codec import PermissionCodec

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for "argument not passed" where ``None`` is a meaningful value."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class AuthorizationAdmin:
    """Mutate level, active flag, overrides and expiry of users."""

    def __init__(self, users: UserStore, cache: PermissionCache, codec: PermissionCodec) -> None:
        self._users = users
        self._cache = cache
        self._codec = codec

    async def update_authorization(
        self,
        user_id: int,
        *,
        level: int = UNSET,
        permissions: Optional[Mapping[str, Sequence[str]]] = UNSET,
        is_active: bool = UNSET,
        expires_at: Optional[datetime] = UNSET,
    ) -> UserRecord:
        """Update any of level, overrides, active flag and override expiry.

        ``permissions=None`` removes the overrides; a mapping of feature
        names to action lists replaces them.

        Raises:
            NotFoundError: Unknown user.
            EncodingError: The catalog cannot be encoded in 16 bits.
            CacheError: The change was saved but the cache entry could not be dropped.
        """
        user = await load_user(self._users, user_id)

        if level is not UNSET:
            user.level = level
        if permissions is not UNSET:
            user.override_string = None if permissions is None else self._codec.encode(permissions)
        if is_active is not UNSET:
            user.is_active = is_active
        if expires_at is not UNSET:
            user.overrides_expire_at = expires_at

        return await self._commit(user, "authorization updated")

    async def update_user_status(
        self,
        user_id: int,
        *,
        expires_at: Optional[datetime] = UNSET,
        level: int = UNSET,
        is_active: bool = UNSET,
    ) -> UserRecord:
        """Activate/deactivate a user, change level, or set override expiry."""
        return await self.update_authorization(
            user_id,
            level=level,
            is_active=is_active,
            expires_at=expires_at,
        )

    async def clear_overrides(self, user_id: int) -> UserRecord:
        """Drop the user's overrides and their expiry, back to level defaults."""
        user = await load_user(self._users, user_id)
        user.override_string = None
        user.overrides_expire_at = None
        return await self._commit(user, "overrides cleared")

    async def _commit(self, user: UserRecord, what: str) -> UserRecord:
        await self._users.save(user)
        await self._cache.invalidate(user.id)
        logger.info("User %s %s (level=%s, active=%s)", user.id, what, user.level, user.is_active)
        return user


__all__ = ["AuthorizationAdmin", "UNSET"]
