"""Immutable feature registry built once at process start.

The registry owns both lookups derived from the catalog: the raw, merged
action configs per feature and the processed per-feature action maps
(with combined masks). Build it once with :meth:`FeatureRegistry.build`
and pass it explicitly to the codec, resolver and gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from ..exceptions import ConfigurationError
from .catalog import DEFAULT_ACTIONS, DEFAULT_FEATURES, ActionConfig, FeatureConfig
from .constants import MAX_FEATURE_ID, SecurityLevel
from .inheritance import ProcessedAction, process_feature_actions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedFeature:
    """A feature with every action resolved and its combined mask computed."""

    id: int
    name: str
    actions: Mapping[str, ProcessedAction]

    def action_names(self) -> list[str]:
        return list(self.actions)

    def default_mask(self, level: int) -> int:
        """OR of combined masks of every action granted at ``level``."""
        mask = 0
        for action in self.actions.values():
            if action.min_level <= level:
                mask |= action.combined_mask
        return mask


class FeatureRegistry:
    """Read-only catalog of features, safe to share across concurrent callers.

    Usage::

        registry = FeatureRegistry.build()
        registry.by_name("product").actions["create"].combined_mask  # 7
    """

    __slots__ = ("_features", "_by_id", "_by_name", "_raw", "_processed")

    def __init__(
        self,
        features: tuple[FeatureConfig, ...],
        raw: Mapping[int, Mapping[str, ActionConfig]],
        processed: Mapping[int, ProcessedFeature],
    ) -> None:
        self._features = features
        self._by_id = MappingProxyType({f.id: f for f in features})
        self._by_name = MappingProxyType({f.name: f for f in features})
        self._raw = MappingProxyType(dict(raw))
        self._processed = MappingProxyType(dict(processed))

    @classmethod
    def build(
        cls,
        features: Iterable[FeatureConfig] = DEFAULT_FEATURES,
        defaults: Mapping[str, ActionConfig] = DEFAULT_ACTIONS,
    ) -> FeatureRegistry:
        """Validate the catalog and compute every processed action.

        Raises:
            ConfigurationError: Duplicate or out-of-range feature ids,
                duplicate names, or any invalid action declaration.
        """
        catalog = tuple(features)
        raw: dict[int, Mapping[str, ActionConfig]] = {}
        processed: dict[int, ProcessedFeature] = {}
        names: set[str] = set()

        for feature in catalog:
            if not 0 <= feature.id <= MAX_FEATURE_ID:
                raise ConfigurationError(
                    f"Feature '{feature.name}' has id {feature.id} outside 0..{MAX_FEATURE_ID}",
                    feature=feature.name,
                )
            if feature.id in raw:
                raise ConfigurationError(f"Duplicate feature id {feature.id}", feature=feature.name)
            if feature.name in names:
                raise ConfigurationError(f"Duplicate feature name '{feature.name}'", feature=feature.name)
            names.add(feature.name)

            raw_actions, processed_actions = process_feature_actions(feature, defaults)
            raw[feature.id] = MappingProxyType(raw_actions)
            processed[feature.id] = ProcessedFeature(
                id=feature.id,
                name=feature.name,
                actions=MappingProxyType(processed_actions),
            )

        logger.debug("Feature registry built with %d features", len(catalog))
        return cls(catalog, raw, processed)

    # ── Lookups ─────────────────────────────────────────

    def __iter__(self) -> Iterator[FeatureConfig]:
        return iter(self._features)

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._processed

    @property
    def features(self) -> tuple[FeatureConfig, ...]:
        return self._features

    def by_name(self, name: str) -> Optional[FeatureConfig]:
        return self._by_name.get(name)

    def by_id(self, feature_id: int) -> Optional[FeatureConfig]:
        return self._by_id.get(feature_id)

    def raw_actions(self, feature_id: int) -> Optional[Mapping[str, ActionConfig]]:
        return self._raw.get(feature_id)

    def processed(self, feature_id: int) -> Optional[ProcessedFeature]:
        return self._processed.get(feature_id)

    def default_mask(self, feature_id: int, level: int) -> int:
        """Level-derived mask for a feature; 0 for unknown features."""
        feature = self._processed.get(feature_id)
        if feature is None:
            logger.warning("Default mask requested for unknown feature id %d", feature_id)
            return 0
        return feature.default_mask(level)

    # ── Listings ────────────────────────────────────────

    def list_all_features(self) -> dict[str, list[str]]:
        """Every feature with all of its action names."""
        result: dict[str, list[str]] = {}
        for feature in self._features:
            processed = self._processed.get(feature.id)
            if processed is not None:
                result[feature.name] = processed.action_names()
        return result

    def list_actions_at_level(self, level: int) -> dict[str, list[str]]:
        """Actions a user at ``level`` gets by default, per feature."""
        result: dict[str, list[str]] = {}
        for feature in self._features:
            processed = self._processed.get(feature.id)
            if processed is not None:
                result[feature.name] = [
                    name for name, action in processed.actions.items() if action.min_level <= level
                ]
        return result

    def list_actions_by_level(self) -> dict[int, dict[str, list[str]]]:
        """:meth:`list_actions_at_level` for every :class:`SecurityLevel`."""
        return {int(level): self.list_actions_at_level(level) for level in SecurityLevel}


__all__ = [
    "FeatureRegistry",
    "ProcessedFeature",
]
