"""Explicit construction of the permission engine.

Build everything once at process start and hand the resulting
``AuthorizationServices`` to whatever needs it::

    services = build_services(user_store, load_config_from_env())
    allowed = await services.gate.has_action(user_id, "product", "read")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .admin import AuthorizationAdmin
from .cache import PermissionCache
from .config import AccessConfig
from .gate import AuthorizationGate
from .interfaces import UserStore
from .permissions.catalog import DEFAULT_FEATURES, FeatureConfig
from .permissions.codec import PermissionCodec
from .permissions.registry import FeatureRegistry
from .permissions.resolver import PermissionResolver


@dataclass(frozen=True)
class AuthorizationServices:
    """Wired-up permission engine components."""

    registry: FeatureRegistry
    codec: PermissionCodec
    resolver: PermissionResolver
    cache: PermissionCache
    gate: AuthorizationGate
    admin: AuthorizationAdmin

    async def close(self) -> None:
        await self.cache.close()


def build_services(
    users: UserStore,
    config: Optional[AccessConfig] = None,
    *,
    features: Iterable[FeatureConfig] = DEFAULT_FEATURES,
    redis_client: Optional[Any] = None,
) -> AuthorizationServices:
    """Build registry, codec, resolver, cache, gate and admin.

    Args:
        users: User collaborator.
        config: Settings; defaults to ``AccessConfig()`` (no cache).
        features: Feature catalog.
        redis_client: Pre-built async Redis client; overrides ``config.redis_url``.

    Raises:
        ConfigurationError: The catalog is invalid.
    """
    config = config or AccessConfig()
    registry = FeatureRegistry.build(features)
    codec = PermissionCodec(registry)
    resolver = PermissionResolver(registry, codec)

    if redis_client is not None:
        cache = PermissionCache(
            resolver,
            redis_client,
            ttl_seconds=config.cache_ttl_seconds,
            key_prefix=config.cache_key_prefix,
            timeout=config.cache_timeout_seconds,
            retry_after=config.cache_retry_after_seconds,
        )
    else:
        cache = PermissionCache.from_config(config, resolver)

    return AuthorizationServices(
        registry=registry,
        codec=codec,
        resolver=resolver,
        cache=cache,
        gate=AuthorizationGate(users, cache, registry, codec),
        admin=AuthorizationAdmin(users, cache, codec),
    )


__all__ = ["AuthorizationServices", "build_services"]
