"""Override string codec.

Wire format (persisted on the user record): ASCII decimal integers joined
with ``.``; each integer is an unsigned 32-bit value
``(feature_id << 16) | mask`` with both halves in ``0..65535``.

Provides:
- ``pack()`` / ``unpack()``: fixed-width integer packing of one entry.
- ``PermissionCodec``: ``{feature: [actions]}`` ↔ override string.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Sequence

from ..exceptions import EncodingError
from ..logging import safe_preview
from .constants import FEATURE_ID_BITS, MAX_FEATURE_ID, MAX_MASK, MAX_PACKED
from .registry import FeatureRegistry

logger = logging.getLogger(__name__)

SEPARATOR = "."

_DIGITS = re.compile(r"[0-9]+")
_MAX_PACKED_DIGITS = len(str(MAX_PACKED))


def pack(feature_id: int, mask: int) -> int:
    """Pack a feature id and its mask into one unsigned 32-bit value.

    Raises:
        EncodingError: Either half is negative or wider than 16 bits.
    """
    if not 0 <= feature_id <= MAX_FEATURE_ID:
        raise EncodingError(f"Feature id {feature_id} does not fit in 16 bits", feature_id=feature_id)
    if not 0 <= mask <= MAX_MASK:
        raise EncodingError(f"Mask {mask} does not fit in 16 bits", feature_id=feature_id, mask=mask)
    return (feature_id << FEATURE_ID_BITS) | mask


def unpack(packed: int) -> tuple[int, int]:
    """Split a packed value into ``(feature_id, mask)``."""
    packed &= MAX_PACKED
    return packed >> FEATURE_ID_BITS, packed & MAX_MASK


class PermissionCodec:
    """Encode action lists into override strings and decode them back.

    Decoding never raises: malformed tokens are logged and dropped, which
    means "no override" for that entry.
    """

    def __init__(self, registry: FeatureRegistry) -> None:
        self._registry = registry

    def encode(self, permissions: Optional[Mapping[str, Sequence[str]]]) -> Optional[str]:
        """Encode ``{feature_name: [action, ...]}`` into an override string.

        Each listed action contributes its combined mask, so granting
        ``update`` also grants everything ``update`` inherits. A known
        feature whose actions all fail to resolve is encoded with mask 0,
        an explicit "nothing" override.

        Returns:
            The override string, or ``None`` when nothing could be encoded.

        Raises:
            EncodingError: A catalog id or mask falls outside 16 bits.
        """
        if not permissions:
            return None

        parts: list[str] = []
        for feature_name, action_names in permissions.items():
            feature = self._registry.by_name(feature_name)
            if feature is None:
                logger.warning("Encoding permissions: unknown feature '%s'. Skipping.", feature_name)
                continue

            processed = self._registry.processed(feature.id)
            if processed is None:
                logger.error(
                    "Encoding permissions: feature %d (%s) missing from processed map. Skipping.",
                    feature.id,
                    feature_name,
                )
                continue

            if isinstance(action_names, (str, bytes)) or not isinstance(action_names, Sequence):
                logger.warning(
                    "Encoding permissions: invalid action list for feature '%s' (%s). Skipping.",
                    feature_name,
                    type(action_names).__name__,
                )
                continue

            mask = 0
            for action_name in action_names:
                action = processed.actions.get(action_name)
                if action is None:
                    logger.warning(
                        "Encoding permissions: unknown action '%s' for feature '%s'. Skipping.",
                        action_name,
                        feature_name,
                    )
                    continue
                mask |= action.combined_mask

            parts.append(str(pack(feature.id, mask)))

        return SEPARATOR.join(parts) if parts else None

    def decode(self, override_string: Optional[str]) -> dict[int, int]:
        """Decode an override string into ``{feature_id: mask}``.

        Tokens that are empty, not plain decimal digits, wider than 32 bits,
        or that name a feature id missing from the registry are skipped.
        """
        decoded: dict[int, int] = {}
        if not override_string:
            return decoded

        for token in override_string.split(SEPARATOR):
            if not _DIGITS.fullmatch(token):
                logger.warning(
                    "Invalid non-numeric or negative override token '%s'. Skipping.",
                    safe_preview(token, limit=40),
                )
                continue

            significant = token.lstrip("0") or "0"
            if len(significant) > _MAX_PACKED_DIGITS or int(significant) > MAX_PACKED:
                logger.warning("Override token '%s' exceeds 32 bits. Skipping.", safe_preview(token, limit=40))
                continue

            feature_id, mask = unpack(int(significant))
            if feature_id not in self._registry:
                logger.warning(
                    "Decoded unknown feature id %d from override token '%s'. Ignoring.",
                    feature_id,
                    token,
                )
                continue
            decoded[feature_id] = mask

        return decoded

    def decode_named(self, override_string: Optional[str]) -> dict[str, list[str]]:
        """Decode into ``{feature_name: [action, ...]}`` for display.

        An action is listed when the mask holds every bit it requires.
        """
        result: dict[str, list[str]] = {}
        for feature_id, mask in self.decode(override_string).items():
            processed = self._registry.processed(feature_id)
            if processed is None:
                continue
            result[processed.name] = [
                name
                for name, action in processed.actions.items()
                if mask & action.combined_mask == action.combined_mask
            ]
        return result


__all__ = [
    "PermissionCodec",
    "SEPARATOR",
    "pack",
    "unpack",
]
