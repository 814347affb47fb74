"""Static feature catalog.

Provides:
- ``ActionSpec``: partial, per-feature action declaration.
- ``ActionConfig``: fully populated action after merging with defaults.
- ``FeatureConfig``: one protected feature and its declared actions.
- ``DEFAULT_ACTIONS``: the four actions every feature receives.
- ``DEFAULT_FEATURES``: the production catalog.

Feature ids and action bit values are persisted inside users' override
strings: once assigned they are never changed or reused.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .constants import Actions, SecurityLevel


@dataclass(frozen=True)
class ActionSpec:
    """Action declared by a feature. ``None`` fields fall back to the default action."""

    value: Optional[int] = None
    min_level: Optional[int] = None
    inherits: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class ActionConfig:
    """Raw action configuration with every field resolved."""

    value: int
    min_level: int
    inherits: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureConfig:
    """A protected feature as declared in the catalog."""

    id: int
    name: str
    actions: Mapping[str, ActionSpec] = field(default_factory=dict)


DEFAULT_ACTIONS: Mapping[str, ActionConfig] = {
    Actions.READ: ActionConfig(value=1, min_level=SecurityLevel.READER),
    Actions.UPDATE: ActionConfig(value=2, min_level=SecurityLevel.USER, inherits=(Actions.READ,)),
    Actions.CREATE: ActionConfig(
        value=4,
        min_level=SecurityLevel.USER,
        inherits=(Actions.READ, Actions.UPDATE),
    ),
    Actions.EXECUTE: ActionConfig(value=8, min_level=SecurityLevel.USER),
}


# ── Catalog ─────────────────────────────────────────────

_R = SecurityLevel.READER
_U = SecurityLevel.USER
_I = SecurityLevel.INTEGRATOR
_A = SecurityLevel.ADMIN


def _crud(level: int = _I, **extra: ActionSpec) -> dict[str, ActionSpec]:
    """Standard read/update/create block with writes gated at ``level``."""
    actions = {
        Actions.READ: ActionSpec(value=1, min_level=_R),
        Actions.UPDATE: ActionSpec(value=2, min_level=level),
        Actions.CREATE: ActionSpec(value=4, min_level=level, inherits=(Actions.UPDATE,)),
    }
    actions.update(extra)
    return actions


def _deletable(level: int = _I) -> dict[str, ActionSpec]:
    """``_crud`` plus delete on bit 8; the default execute moves to bit 16."""
    return _crud(level, delete=ActionSpec(value=8, min_level=level), execute=ActionSpec(value=16))


DEFAULT_FEATURES: tuple[FeatureConfig, ...] = (
    FeatureConfig(
        id=1,
        name="user",
        actions=_crud(
            _U,
            delete=ActionSpec(value=8, min_level=_A),
            execute=ActionSpec(value=16, min_level=_U),
            export=ActionSpec(value=32, min_level=_U),
        ),
    ),
    FeatureConfig(id=2, name="customer_group", actions=_deletable()),
    FeatureConfig(
        id=3,
        name="customer",
        actions=_crud(
            delete=ActionSpec(value=8, min_level=_I),
            export=ActionSpec(value=16, min_level=_I),
            execute=ActionSpec(value=32),
        ),
    ),
    FeatureConfig(
        id=4,
        name="supplier",
        actions=_crud(
            delete=ActionSpec(value=8, min_level=_I),
            export=ActionSpec(value=16, min_level=_I),
            execute=ActionSpec(value=32),
        ),
    ),
    FeatureConfig(
        id=5,
        name="product",
        actions=_crud(
            delete=ActionSpec(value=8, min_level=_I),
            export=ActionSpec(value=16, min_level=_I),
            execute=ActionSpec(value=32),
        ),
    ),
    FeatureConfig(id=6, name="product_category", actions=_deletable()),
    FeatureConfig(
        id=7,
        name="stock_movement",
        actions=_crud(execute=ActionSpec(value=8, min_level=_I), export=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(id=8, name="warehouse", actions=_deletable()),
    FeatureConfig(id=9, name="shop", actions=_deletable()),
    FeatureConfig(
        id=10,
        name="purchase_order",
        actions=_crud(execute=ActionSpec(value=8, min_level=_I), export=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(
        id=11,
        name="purchase_reception",
        actions=_crud(execute=ActionSpec(value=8, min_level=_I), export=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(
        id=12,
        name="sales_order",
        actions=_crud(
            delete=ActionSpec(value=16, min_level=_I),
            execute=ActionSpec(value=32, min_level=_U),
            export=ActionSpec(value=64, min_level=_I),
        ),
    ),
    FeatureConfig(
        id=13,
        name="customer_invoice",
        actions=_crud(execute=ActionSpec(value=8, min_level=_I), export=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(
        id=14,
        name="payment",
        actions=_crud(execute=ActionSpec(value=8, min_level=_I), export=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(id=15, name="cash_register", actions=_deletable()),
    FeatureConfig(
        id=16,
        name="cash_register_session",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_R),
            Actions.CREATE: ActionSpec(value=4, min_level=_I),
            Actions.EXECUTE: ActionSpec(value=8, min_level=_I),
        },
    ),
    FeatureConfig(
        id=17,
        name="cash_register_transaction",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_R),
            Actions.CREATE: ActionSpec(value=4, min_level=_I),
        },
    ),
    FeatureConfig(
        id=18,
        name="config",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_R),
            Actions.UPDATE: ActionSpec(value=2, min_level=_I),
            Actions.CREATE: ActionSpec(value=4, min_level=_I),
            Actions.DELETE: ActionSpec(value=8, min_level=_I),
            Actions.EXECUTE: ActionSpec(value=16, min_level=_I),
        },
    ),
    FeatureConfig(
        id=19,
        name="notification",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_I),
            Actions.CREATE: ActionSpec(value=2, min_level=_I),
            Actions.UPDATE: ActionSpec(value=4, min_level=_I),
            Actions.DELETE: ActionSpec(value=8, min_level=_I),
            Actions.EXECUTE: ActionSpec(value=16, min_level=_I),
        },
    ),
    FeatureConfig(
        id=20,
        name="user_activity_log",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_I),
            Actions.UPDATE: ActionSpec(min_level=_I),
            Actions.CREATE: ActionSpec(min_level=_I),
            Actions.EXECUTE: ActionSpec(min_level=_I),
            Actions.EXPORT: ActionSpec(value=16, min_level=_I),
        },
    ),
    FeatureConfig(
        id=21,
        name="import",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_I),
            Actions.UPDATE: ActionSpec(min_level=_I),
            Actions.CREATE: ActionSpec(value=4, min_level=_I),
            Actions.EXECUTE: ActionSpec(value=8, min_level=_I),
        },
    ),
    # id 22 is retired
    FeatureConfig(
        id=23,
        name="authorization",
        actions={
            Actions.READ: ActionSpec(value=1, min_level=_A),
            Actions.UPDATE: ActionSpec(value=2, min_level=_A),
            Actions.DELETE: ActionSpec(value=4, min_level=_A),
            Actions.CREATE: ActionSpec(value=8, min_level=_A),
            Actions.EXECUTE: ActionSpec(value=16, min_level=_A),
        },
    ),
    FeatureConfig(
        id=24,
        name="supplier_return",
        actions=_crud(delete=ActionSpec(value=8, min_level=_I), execute=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(id=25, name="supplier_invoice", actions=_deletable()),
    FeatureConfig(
        id=26,
        name="stock_transfer",
        actions=_crud(delete=ActionSpec(value=8, min_level=_I), execute=ActionSpec(value=16, min_level=_I)),
    ),
    FeatureConfig(
        id=27,
        name="quote",
        actions=_crud(delete=ActionSpec(value=8, min_level=_I), execute=ActionSpec(value=16, min_level=_I)),
    ),
)


__all__ = [
    "DEFAULT_ACTIONS",
    "DEFAULT_FEATURES",
    "ActionConfig",
    "ActionSpec",
    "FeatureConfig",
]
