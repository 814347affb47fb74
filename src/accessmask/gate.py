"""Authorization gate: boolean queries for the HTTP middleware.

Provides ``has_action`` and ``has_level`` on top of the permission cache,
plus catalog listings. Unknown users raise :class:`NotFoundError`; every
other failure resolves to a deny.
"""

from __future__ import annotations

from .cache import PermissionCache
from .exceptions import NotFoundError
from .interfaces import UserRecord, UserStore
from .logging import get_user_logger
from .permissions.codec import PermissionCodec
from .permissions.models import AuthorizationSummary, EffectivePermissions
from .permissions.registry import FeatureRegistry


async def load_user(users: UserStore, user_id: int) -> UserRecord:
    """Fetch a user or raise :class:`NotFoundError`."""
    user = await users.get(user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found.", user_id=user_id)
    return user


class AuthorizationGate:
    """Answer "may this user do X?" questions.

    Usage::

        gate = AuthorizationGate(users, cache, registry)
        if not await gate.has_action(user_id, "product", "create"):
            ...  # respond 403
    """

    def __init__(
        self,
        users: UserStore,
        cache: PermissionCache,
        registry: FeatureRegistry,
        codec: PermissionCodec | None = None,
    ) -> None:
        self._users = users
        self._cache = cache
        self._registry = registry
        self._codec = codec or PermissionCodec(registry)

    async def has_action(self, user_id: int, feature: str, action: str) -> bool:
        """True when ``user_id`` may perform ``action`` on ``feature``.

        Inactive users are denied before any cache or resolution work.
        """
        user = await load_user(self._users, user_id)
        log = get_user_logger(__name__, user_id=user_id)
        if not user.is_active:
            log.debug(
                "Authorization check for user %s: inactive. Denying %s/%s.",
                user_id,
                feature,
                action,
            )
            return False

        permissions = await self._cache.get(user)
        allowed = permissions.allows(feature, action)
        log.debug("Authorization check for user %s, %s/%s: %s", user_id, feature, action, allowed)
        return allowed

    async def has_level(self, user_id: int, required_level: int) -> bool:
        """True when ``user_id`` is active and at or above ``required_level``."""
        user = await load_user(self._users, user_id)
        log = get_user_logger(__name__, user_id=user_id)
        if not user.is_active:
            log.debug("Level check for user %s: inactive. Required %s denied.", user_id, required_level)
            return False

        allowed = user.level >= required_level
        log.debug("Level check for user %s (level %s) vs required %s: %s", user_id, user.level, required_level, allowed)
        return allowed

    async def effective_permissions(self, user_id: int) -> EffectivePermissions:
        """Resolved permissions of ``user_id`` (through the cache when active)."""
        user = await load_user(self._users, user_id)
        return await self._effective(user)

    async def _effective(self, user: UserRecord) -> EffectivePermissions:
        if not user.is_active:
            return self._cache.resolver.resolve(user)
        return await self._cache.get(user)

    async def get_authorization(self, user_id: int) -> AuthorizationSummary:
        """Admin view: effective actions, raw overrides, expiry, level and status."""
        user = await load_user(self._users, user_id)
        permissions = await self._effective(user)
        return AuthorizationSummary(
            authorization=permissions.as_action_map(),
            overrides=self._codec.decode_named(user.override_string),
            expires_at=permissions.expires_at,
            level=user.level,
            is_active=user.is_active,
        )

    # ── Catalog listings ────────────────────────────────

    def list_all_features(self) -> dict[str, list[str]]:
        return self._registry.list_all_features()

    def list_actions_at_level(self, level: int) -> dict[str, list[str]]:
        return self._registry.list_actions_at_level(level)

    def list_actions_by_level(self) -> dict[int, dict[str, list[str]]]:
        return self._registry.list_actions_by_level()


__all__ = ["AuthorizationGate", "load_user"]
