"""Action inheritance and combined-mask computation.

Provides:
- ``merge_feature_actions()``: defaults + feature-specific declarations.
- ``combined_mask()``: transitive bitmask of an action and everything it inherits.
- ``ProcessedAction``: the build-time result consumed by the resolver.

Runs once per feature while the registry is built; nothing here is
evaluated per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from ..exceptions import ConfigurationError
from .catalog import DEFAULT_ACTIONS, ActionConfig, FeatureConfig
from .constants import MAX_MASK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedAction:
    """Fully resolved action of a feature.

    ``combined_mask`` is ``value`` OR-ed with the combined masks of every
    action reachable through ``inherits``.
    """

    name: str
    value: int
    combined_mask: int
    min_level: int


def merge_feature_actions(
    feature: FeatureConfig,
    defaults: Mapping[str, ActionConfig] = DEFAULT_ACTIONS,
) -> dict[str, ActionConfig]:
    """Merge default actions with a feature's own declarations.

    Feature-specific ``value``/``min_level``/``inherits`` win field by field.
    Default actions come first (in default order), then extra actions in
    declaration order.

    Raises:
        ConfigurationError: An extra action lacks ``value`` or ``min_level``.
    """
    merged: dict[str, ActionConfig] = {}

    for name, default in defaults.items():
        spec = feature.actions.get(name)
        if spec is None:
            merged[name] = default
            continue
        merged[name] = ActionConfig(
            value=default.value if spec.value is None else spec.value,
            min_level=default.min_level if spec.min_level is None else spec.min_level,
            inherits=default.inherits if spec.inherits is None else tuple(spec.inherits),
        )

    for name, spec in feature.actions.items():
        if name in merged:
            continue
        if spec.value is None or spec.min_level is None:
            raise ConfigurationError(
                f"Action '{name}' of feature '{feature.name}' must declare value and min_level",
                feature=feature.name,
                action=name,
            )
        merged[name] = ActionConfig(
            value=spec.value,
            min_level=spec.min_level,
            inherits=tuple(spec.inherits or ()),
        )

    return merged


def combined_mask(action: str, actions: Mapping[str, ActionConfig]) -> int:
    """Compute the transitive bitmask of ``action``.

    Iterative depth-first walk over ``inherits`` with a visited set, so a
    cyclic declaration terminates (and is logged).

    Example::

        >>> combined_mask("create", DEFAULT_ACTIONS)
        7
    """
    mask = 0
    visited: set[str] = set()
    stack = [action]

    while stack:
        current = stack.pop()
        if current in visited:
            if current == action:
                logger.warning("Inheritance cycle detected through action '%s'", action)
            continue
        visited.add(current)
        config = actions.get(current)
        if config is None:
            continue
        mask |= config.value
        stack.extend(config.inherits)

    return mask


def _validate_actions(feature: FeatureConfig, actions: Mapping[str, ActionConfig]) -> None:
    seen: dict[int, str] = {}
    for name, config in actions.items():
        value = config.value
        if value <= 0 or value > MAX_MASK or value & (value - 1):
            raise ConfigurationError(
                f"Action '{name}' of feature '{feature.name}' has invalid bit value {value}; "
                "expected a single bit within 16 bits",
                feature=feature.name,
                action=name,
            )
        if value in seen:
            raise ConfigurationError(
                f"Actions '{seen[value]}' and '{name}' of feature '{feature.name}' share bit {value}",
                feature=feature.name,
                action=name,
            )
        seen[value] = name
        for parent in config.inherits:
            if parent not in actions:
                raise ConfigurationError(
                    f"Action '{name}' of feature '{feature.name}' inherits unknown action '{parent}'",
                    feature=feature.name,
                    action=name,
                )
            # A lower-level action must not pull in bits reserved for higher levels.
            if actions[parent].min_level > config.min_level:
                raise ConfigurationError(
                    f"Action '{name}' of feature '{feature.name}' (level {config.min_level}) "
                    f"inherits '{parent}' which requires level {actions[parent].min_level}",
                    feature=feature.name,
                    action=name,
                )


def process_feature_actions(
    feature: FeatureConfig,
    defaults: Mapping[str, ActionConfig] = DEFAULT_ACTIONS,
) -> tuple[dict[str, ActionConfig], dict[str, ProcessedAction]]:
    """Validate a feature and compute its processed actions.

    Returns:
        ``(raw_actions, processed_actions)`` keyed by action name, same order.

    Raises:
        ConfigurationError: Invalid bit values, shared bits, unknown
            inherited actions or level escalation through inheritance.
    """
    raw = merge_feature_actions(feature, defaults)
    _validate_actions(feature, raw)

    processed = {
        name: ProcessedAction(
            name=name,
            value=config.value,
            combined_mask=combined_mask(name, raw),
            min_level=config.min_level,
        )
        for name, config in raw.items()
    }
    return raw, processed


__all__ = [
    "ProcessedAction",
    "combined_mask",
    "merge_feature_actions",
    "process_feature_actions",
]
