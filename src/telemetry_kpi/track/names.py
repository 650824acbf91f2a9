"""Track name normalization: free-text event names to track-cuts lookup keys.

Event names carry session numbers, layout suffixes and dates
(``"Brands Hatch Indy 2024-05-01 2"``); the cuts files are keyed by a plain
slug (``brands_hatch``).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType

DEFAULT_TRACK_SLUG = "brands_hatch"

DEFAULT_TRACK_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "brands": "brands_hatch",
        "donington": "donington",
        "silverstone": "silverstone",
        "snetterton": "snetterton",
    }
)

_SUFFIX_RE = re.compile(r"\s+(\d+|gp|national|international|club|indy)$", re.IGNORECASE)
_DATE_RE = re.compile(r"\s+\d{4}-\d{2}-\d{2}")
_SPACE_RE = re.compile(r"\s+")
_TRAILING_RE = re.compile(r"[_\d]+$")


class TrackNameNormalizer:
    """Map a free-text track name to a canonical slug.

    Args:
        aliases: Substring → slug table; the first key contained in the
            normalized name wins (insertion order).
        default_slug: Returned for empty input or when normalization leaves
            nothing behind.
    """

    def __init__(
        self,
        aliases: Mapping[str, str] = DEFAULT_TRACK_ALIASES,
        default_slug: str = DEFAULT_TRACK_SLUG,
    ) -> None:
        if not default_slug:
            raise ValueError("default_slug must be non-empty")
        self.aliases = MappingProxyType(dict(aliases))
        self.default_slug = default_slug

    def normalize(self, name: str | None) -> str:
        """Return the lookup slug for *name*. Never fails, never returns ``""``."""
        if not name:
            return self.default_slug

        normalized = name.lower().strip()
        normalized = _SUFFIX_RE.sub("", normalized)
        normalized = _DATE_RE.sub("", normalized)
        normalized = _SPACE_RE.sub("_", normalized)
        normalized = _TRAILING_RE.sub("", normalized)

        for key, slug in self.aliases.items():
            if key in normalized:
                return slug

        return normalized or self.default_slug


_DEFAULT_NORMALIZER = TrackNameNormalizer()


def normalize_track_name(name: str | None) -> str:
    """Normalize *name* with the default alias table."""
    return _DEFAULT_NORMALIZER.normalize(name)
