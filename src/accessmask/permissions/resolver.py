"""Effective permission resolution.

Combines a user's base level, active flag, override string and override
expiry into :class:`EffectivePermissions`. Pure and deterministic for a
given user record and clock reading; no I/O.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from ..interfaces import UserRecord
from ..logging import get_user_logger
from .codec import PermissionCodec
from .models import EffectivePermissions, FeatureGrant
from .registry import FeatureRegistry


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes; pass aware ones and ``None`` through."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class PermissionResolver:
    """Resolve effective permissions from the registry and a user record.

    Args:
        registry: Built feature registry.
        codec: Codec used to decode the user's override string.
        clock: Returns the current aware datetime (injectable for tests).
    """

    def __init__(
        self,
        registry: FeatureRegistry,
        codec: Optional[PermissionCodec] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._codec = codec or PermissionCodec(registry)
        self._clock = clock

    @property
    def registry(self) -> FeatureRegistry:
        return self._registry

    def now(self) -> datetime:
        return self._clock()

    def resolve(self, user: UserRecord, *, now: Optional[datetime] = None) -> EffectivePermissions:
        """Compute the effective permissions of ``user``.

        Rules, in order:
        1. Inactive users get nothing, whatever else is set.
        2. Overrides whose expiry has passed are ignored entirely.
        3. A decoded override mask replaces the level default of its feature.
        4. An action is allowed when the final mask holds its whole combined mask.
        """
        log = get_user_logger(__name__, user_id=user.id)
        expire_at = as_utc(user.overrides_expire_at)

        if not user.is_active:
            log.info("User %s is inactive. No effective permissions will be granted.", user.id)
            return EffectivePermissions(
                user_id=user.id,
                level=user.level,
                expires_at=expire_at,
                permissions={},
            )

        current = as_utc(now) if now is not None else self.now()
        overrides_expired = expire_at is not None and expire_at < current
        if overrides_expired:
            log.info(
                "Overrides for user %s expired at %s. Using default level permissions.",
                user.id,
                expire_at.isoformat(),
            )

        overrides: dict[int, int] = {}
        if user.override_string and not overrides_expired:
            overrides = self._codec.decode(user.override_string)

        permissions: dict[str, FeatureGrant] = {}
        for feature in self._registry:
            processed = self._registry.processed(feature.id)
            if processed is None:
                log.error(
                    "Feature %d (%s) missing from processed feature map. Configuration might be corrupt.",
                    feature.id,
                    feature.name,
                )
                continue

            if feature.id in overrides:
                final_mask = overrides[feature.id]
                log.debug("Feature %s: using override mask %d", feature.name, final_mask)
            else:
                final_mask = processed.default_mask(user.level)
                log.debug("Feature %s: using default mask %d for level %d", feature.name, final_mask, user.level)

            allowed = [
                name
                for name, action in processed.actions.items()
                if final_mask & action.combined_mask == action.combined_mask
            ]
            if allowed:
                permissions[feature.name] = FeatureGrant(id=feature.id, actions=allowed)

        return EffectivePermissions(
            user_id=user.id,
            level=user.level,
            expires_at=None if overrides_expired else expire_at,
            permissions=permissions,
        )


__all__ = ["PermissionResolver", "as_utc", "utc_now"]
