"""Tests for the feature catalog, inheritance and the built registry."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from accessmask import (
    DEFAULT_FEATURES,
    ActionSpec,
    ConfigurationError,
    FeatureConfig,
    FeatureRegistry,
    SecurityLevel,
)
from accessmask.permissions import DEFAULT_ACTIONS, ActionConfig, combined_mask, merge_feature_actions


def _transitive_parents(name: str, actions: dict[str, ActionConfig]) -> set[str]:
    seen: set[str] = set()
    stack = list(actions[name].inherits)
    while stack:
        current = stack.pop()
        if current not in seen:
            seen.add(current)
            stack.extend(actions[current].inherits)
    return seen


class TestCombinedMask:
    """Tests for combined-mask computation."""

    def test_defaults(self) -> None:
        assert combined_mask("read", DEFAULT_ACTIONS) == 1
        assert combined_mask("update", DEFAULT_ACTIONS) == 3
        assert combined_mask("create", DEFAULT_ACTIONS) == 7
        assert combined_mask("execute", DEFAULT_ACTIONS) == 8

    def test_cycle_terminates(self) -> None:
        """A cyclic declaration still yields the union of the cycle."""
        actions = {
            "a": ActionConfig(value=1, min_level=1, inherits=("b",)),
            "b": ActionConfig(value=2, min_level=1, inherits=("c",)),
            "c": ActionConfig(value=4, min_level=1, inherits=("a",)),
        }
        assert combined_mask("a", actions) == 7
        assert combined_mask("c", actions) == 7

    def test_self_inheritance(self) -> None:
        actions = {"a": ActionConfig(value=1, min_level=1, inherits=("a",))}
        assert combined_mask("a", actions) == 1

    def test_diamond(self) -> None:
        actions = {
            "base": ActionConfig(value=1, min_level=1),
            "left": ActionConfig(value=2, min_level=1, inherits=("base",)),
            "right": ActionConfig(value=4, min_level=1, inherits=("base",)),
            "top": ActionConfig(value=8, min_level=1, inherits=("left", "right")),
        }
        assert combined_mask("top", actions) == 15


class TestMergeFeatureActions:
    """Tests for merging defaults with feature declarations."""

    def test_every_feature_gets_defaults(self) -> None:
        merged = merge_feature_actions(FeatureConfig(id=1, name="bare"))
        assert list(merged) == ["read", "update", "create", "execute"]
        assert merged["create"].inherits == ("read", "update")

    def test_partial_override_keeps_default_fields(self) -> None:
        feature = FeatureConfig(
            id=1,
            name="f",
            actions={"update": ActionSpec(min_level=SecurityLevel.ADMIN)},
        )
        merged = merge_feature_actions(feature)
        assert merged["update"].value == 2
        assert merged["update"].inherits == ("read",)
        assert merged["update"].min_level == SecurityLevel.ADMIN

    def test_extra_actions_follow_defaults(self) -> None:
        feature = FeatureConfig(
            id=1,
            name="f",
            actions={
                "export": ActionSpec(value=32, min_level=SecurityLevel.USER),
                "read": ActionSpec(value=1, min_level=SecurityLevel.READER),
            },
        )
        assert list(merge_feature_actions(feature)) == ["read", "update", "create", "execute", "export"]

    def test_extra_action_requires_value_and_level(self) -> None:
        feature = FeatureConfig(id=1, name="f", actions={"export": ActionSpec(value=32)})
        with pytest.raises(ConfigurationError, match="must declare value and min_level"):
            merge_feature_actions(feature)


class TestRegistryBuild:
    """Tests for FeatureRegistry.build validation."""

    def test_default_catalog_builds(self) -> None:
        registry = FeatureRegistry.build()
        assert len(registry) == len(DEFAULT_FEATURES)
        assert registry.by_name("product").id == 5
        assert registry.by_id(23).name == "authorization"
        assert 22 not in registry

    def test_duplicate_id(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate feature id"):
            FeatureRegistry.build([FeatureConfig(id=1, name="a"), FeatureConfig(id=1, name="b")])

    def test_duplicate_name(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate feature name"):
            FeatureRegistry.build([FeatureConfig(id=1, name="a"), FeatureConfig(id=2, name="a")])

    @pytest.mark.parametrize("feature_id", [-1, 0x10000])
    def test_feature_id_out_of_range(self, feature_id: int) -> None:
        with pytest.raises(ConfigurationError, match="outside"):
            FeatureRegistry.build([FeatureConfig(id=feature_id, name="a")])

    @pytest.mark.parametrize("value", [0, 3, 0x10000, -2])
    def test_invalid_bit_value(self, value: int) -> None:
        feature = FeatureConfig(
            id=1,
            name="a",
            actions={"export": ActionSpec(value=value, min_level=SecurityLevel.USER)},
        )
        with pytest.raises(ConfigurationError, match="invalid bit value"):
            FeatureRegistry.build([feature])

    def test_shared_bit(self) -> None:
        """An extra action may not reuse a default action's bit."""
        feature = FeatureConfig(
            id=1,
            name="a",
            actions={"delete": ActionSpec(value=8, min_level=SecurityLevel.ADMIN)},
        )
        with pytest.raises(ConfigurationError, match="share bit 8"):
            FeatureRegistry.build([feature])

    def test_unknown_inherited_action(self) -> None:
        feature = FeatureConfig(
            id=1,
            name="a",
            actions={"export": ActionSpec(value=16, min_level=SecurityLevel.USER, inherits=("archive",))},
        )
        with pytest.raises(ConfigurationError, match="unknown action 'archive'"):
            FeatureRegistry.build([feature])

    def test_level_escalation_through_inheritance(self) -> None:
        """A USER action inheriting an ADMIN action would leak the ADMIN bit."""
        feature = FeatureConfig(
            id=1,
            name="a",
            actions={"read": ActionSpec(min_level=SecurityLevel.ADMIN)},
        )
        with pytest.raises(ConfigurationError, match="requires level"):
            FeatureRegistry.build([feature])

    def test_cycle_does_not_hang(self) -> None:
        feature = FeatureConfig(
            id=1,
            name="a",
            actions={
                "read": ActionSpec(inherits=("create",), min_level=SecurityLevel.USER),
            },
        )
        registry = FeatureRegistry.build([feature])
        actions = registry.processed(1).actions
        assert actions["read"].combined_mask == 7
        assert actions["create"].combined_mask == 7


class TestRegistryInvariants:
    """Combined-mask invariants over the production catalog."""

    @pytest.fixture(scope="class")
    def default_registry(self) -> FeatureRegistry:
        return FeatureRegistry.build()

    def test_combined_mask_contains_own_value(self, default_registry: FeatureRegistry) -> None:
        for feature in default_registry:
            for action in default_registry.processed(feature.id).actions.values():
                assert action.combined_mask & action.value == action.value, (feature.name, action.name)

    def test_combined_mask_contains_inherited(self, default_registry: FeatureRegistry) -> None:
        for feature in default_registry:
            raw = dict(default_registry.raw_actions(feature.id))
            processed = default_registry.processed(feature.id).actions
            for name in raw:
                for parent in _transitive_parents(name, raw):
                    parent_mask = processed[parent].combined_mask
                    assert processed[name].combined_mask & parent_mask == parent_mask, (feature.name, name, parent)

    def test_values_pairwise_distinct(self, default_registry: FeatureRegistry) -> None:
        for feature in default_registry:
            values = [a.value for a in default_registry.processed(feature.id).actions.values()]
            assert len(values) == len(set(values)), feature.name

    def test_unique_ids_and_names(self) -> None:
        ids = [f.id for f in DEFAULT_FEATURES]
        names = [f.name for f in DEFAULT_FEATURES]
        assert len(ids) == len(set(ids))
        assert len(names) == len(set(names))

    def test_processed_maps_are_read_only(self, default_registry: FeatureRegistry) -> None:
        actions = default_registry.processed(5).actions
        assert isinstance(actions, MappingProxyType)
        with pytest.raises(TypeError):
            actions["read"] = None  # type: ignore[index]

    def test_authorization_feature_is_admin_only(self, default_registry: FeatureRegistry) -> None:
        listing = default_registry.list_actions_at_level(SecurityLevel.INTEGRATOR)
        assert listing["authorization"] == []
        assert default_registry.default_mask(23, SecurityLevel.INTEGRATOR) == 0


class TestListings:
    """Tests for catalog listings."""

    def test_list_all_features(self, registry: FeatureRegistry) -> None:
        assert registry.list_all_features() == {
            "product": ["read", "update", "create", "execute", "delete"],
            "config": ["read", "update", "create", "execute"],
        }

    def test_list_actions_at_level(self, registry: FeatureRegistry) -> None:
        assert registry.list_actions_at_level(SecurityLevel.USER) == {
            "product": ["read", "update", "create"],
            "config": [],
        }
        assert registry.list_actions_at_level(SecurityLevel.ADMIN) == {
            "product": ["read", "update", "create", "delete"],
            "config": ["read", "update", "create", "execute"],
        }

    def test_list_actions_by_level(self, registry: FeatureRegistry) -> None:
        by_level = registry.list_actions_by_level()
        assert set(by_level) == {int(level) for level in SecurityLevel}
        assert by_level[SecurityLevel.EXTERNAL] == {"product": [], "config": []}
        assert "execute" in by_level[SecurityLevel.NOBODY]["product"]

    def test_default_mask(self, registry: FeatureRegistry) -> None:
        assert registry.default_mask(5, SecurityLevel.EXTERNAL) == 0
        assert registry.default_mask(5, SecurityLevel.READER) == 1
        assert registry.default_mask(5, SecurityLevel.USER) == 7
        assert registry.default_mask(5, SecurityLevel.ADMIN) == 23
        assert registry.default_mask(999, SecurityLevel.ADMIN) == 0
