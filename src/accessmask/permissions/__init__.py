"""Feature catalog, bitmask inheritance, override codec and resolver.

Defines:
- SecurityLevel / Actions: level scale and default action names
- FeatureConfig / ActionSpec: catalog declarations
- DEFAULT_FEATURES: the production catalog
- FeatureRegistry: immutable, validated catalog with combined masks
- PermissionCodec: override string encode/decode
- PermissionResolver: effective permissions for a user
"""

from .catalog import (
    DEFAULT_ACTIONS,
    DEFAULT_FEATURES,
    ActionConfig,
    ActionSpec,
    FeatureConfig,
)
from .codec import PermissionCodec, pack, unpack
from .constants import MAX_FEATURE_ID, MAX_MASK, Actions, SecurityLevel
from .inheritance import ProcessedAction, combined_mask, merge_feature_actions
from .models import AuthorizationSummary, EffectivePermissions, FeatureGrant
from .registry import FeatureRegistry, ProcessedFeature
from .resolver import PermissionResolver

__all__ = [
    "DEFAULT_ACTIONS",
    "DEFAULT_FEATURES",
    "MAX_FEATURE_ID",
    "MAX_MASK",
    "ActionConfig",
    "ActionSpec",
    "Actions",
    "AuthorizationSummary",
    "EffectivePermissions",
    "FeatureConfig",
    "FeatureGrant",
    "FeatureRegistry",
    "PermissionCodec",
    "PermissionResolver",
    "ProcessedAction",
    "ProcessedFeature",
    "SecurityLevel",
    "combined_mask",
    "merge_feature_actions",
    "pack",
    "unpack",
]
