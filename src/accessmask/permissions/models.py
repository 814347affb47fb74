"""Pydantic models exchanged by the resolver, cache and gate.

``EffectivePermissions`` is also the cache payload; it round-trips through
JSON with ``model_dump_json()`` / ``model_validate_json()``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FeatureGrant(BaseModel):
    """Actions allowed on one feature."""

    id: int
    actions: list[str] = Field(default_factory=list)


class EffectivePermissions(BaseModel):
    """Resolved permissions of a user at a point in time.

    A feature is present in ``permissions`` only if at least one of its
    actions is allowed.
    """

    user_id: int
    level: int
    expires_at: Optional[datetime] = None
    permissions: dict[str, FeatureGrant] = Field(default_factory=dict)

    def allows(self, feature: str, action: str) -> bool:
        grant = self.permissions.get(feature)
        return grant is not None and action in grant.actions

    def as_action_map(self) -> dict[str, list[str]]:
        return {name: list(grant.actions) for name, grant in self.permissions.items()}


class AuthorizationSummary(BaseModel):
    """Admin view of a user's authorization state."""

    authorization: dict[str, list[str]] = Field(default_factory=dict)
    overrides: dict[str, list[str]] = Field(default_factory=dict)
    expires_at: Optional[datetime] = None
    level: int
    is_active: bool


__all__ = [
    "AuthorizationSummary",
    "EffectivePermissions",
    "FeatureGrant",
]
