"""Security levels and catalog-wide action defaults.

Provides:
- ``SecurityLevel``: ordered access tiers carried by every user.
- ``Actions``: names of the four actions every feature inherits.
- ``MAX_FEATURE_ID`` / ``MAX_MASK``: 16-bit bounds of the override format.
"""

from __future__ import annotations

from enum import IntEnum


class SecurityLevel(IntEnum):
    """Base access tier of a user.

    Higher values grant more. ``NOBODY`` is used for actions that no
    level-derived default may ever grant (only an explicit override can).
    """

    EXTERNAL = 1
    READER = 2
    USER = 3
    INTEGRATOR = 4
    ADMIN = 5
    NOBODY = 999


class Actions:
    """Action names with catalog-wide defaults."""

    READ = "read"
    UPDATE = "update"
    CREATE = "create"
    EXECUTE = "execute"

    # Common feature-specific extras
    DELETE = "delete"
    EXPORT = "export"

    DEFAULTS: tuple[str, ...] = (READ, UPDATE, CREATE, EXECUTE)


# ── Override format bounds ──────────────────────────────
# packed = (feature_id << 16) | mask, both halves unsigned 16-bit.

FEATURE_ID_BITS = 16
MAX_FEATURE_ID = 0xFFFF
MAX_MASK = 0xFFFF
MAX_PACKED = 0xFFFFFFFF


__all__ = [
    "Actions",
    "FEATURE_ID_BITS",
    "MAX_FEATURE_ID",
    "MAX_MASK",
    "MAX_PACKED",
    "SecurityLevel",
]
