"""TrackCutsStore: loads ``<slug>_cuts.json`` files from a cuts directory."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from telemetry_kpi.errors import TrackCutsNotFoundError
from telemetry_kpi.telemetry.models import ParsedTelemetry
from telemetry_kpi.track.models import TrackCuts
from telemetry_kpi.track.names import DEFAULT_TRACK_SLUG, TrackNameNormalizer

_logger = logging.getLogger(__name__)

_SUFFIX = "_cuts.json"

CutsLoader = Callable[[ParsedTelemetry], TrackCuts]
"""Returns the cuts for a parsed session, e.g. by its ``Track:`` preamble line."""


def load_track_cuts(path: str | Path) -> TrackCuts:
    """Load and validate a single cuts file.

    A missing ``track`` field is filled from the file name.

    Raises:
        TrackCutsNotFoundError: If the file does not exist, is not valid JSON,
            or does not describe valid cuts.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise TrackCutsNotFoundError(f"Track cuts file not found: {str(path)!r}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise TrackCutsNotFoundError(f"Track cuts file {str(path)!r} is unreadable: {exc}") from exc

    if isinstance(data, dict) and not data.get("track"):
        name = path.name
        data["track"] = name[: -len(_SUFFIX)] if name.endswith(_SUFFIX) else path.stem
    try:
        return TrackCuts.model_validate(data)
    except ValidationError as exc:
        raise TrackCutsNotFoundError(f"Track cuts file {str(path)!r} is invalid: {exc}") from exc


class TrackCutsStore:
    """Resolve track names to cuts files in *cuts_dir*.

    Args:
        cuts_dir: Directory holding ``<slug>_cuts.json`` files. Defaults to
            ``$TELEMETRY_KPI_CUTS_DIR`` or ``./track_cuts``.
        fallback_slug: Slug used when the requested track has no cuts file.
            ``None`` disables the fallback.
        normalizer: Track name normalizer used by :meth:`resolve`.
    """

    def __init__(
        self,
        cuts_dir: str | Path | None = None,
        fallback_slug: str | None = DEFAULT_TRACK_SLUG,
        normalizer: TrackNameNormalizer | None = None,
    ) -> None:
        self.cuts_dir = Path(cuts_dir or os.environ.get("TELEMETRY_KPI_CUTS_DIR", "track_cuts"))
        self.fallback_slug = fallback_slug
        self.normalizer = normalizer or TrackNameNormalizer()

    @classmethod
    def from_env(cls, cuts_dir: str | Path | None = None) -> TrackCutsStore:
        """Build a store whose fallback slug comes from ``$TELEMETRY_KPI_DEFAULT_TRACK``."""
        fallback = os.environ.get("TELEMETRY_KPI_DEFAULT_TRACK", DEFAULT_TRACK_SLUG)
        return cls(cuts_dir, fallback_slug=fallback or None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def path_for(self, slug: str) -> Path:
        """Return the expected cuts file path for *slug* (may not exist)."""
        return self.cuts_dir / f"{slug}{_SUFFIX}"

    def available(self) -> list[str]:
        """Return the sorted slugs that have a cuts file."""
        if not self.cuts_dir.is_dir():
            return []
        return sorted(p.name[: -len(_SUFFIX)] for p in self.cuts_dir.glob(f"*{_SUFFIX}"))

    def resolve(self, track_name: str | None) -> Path:
        """Return the cuts file for *track_name*, falling back to the default slug.

        Raises:
            TrackCutsNotFoundError: If neither the slug nor the fallback exist.
        """
        slug = self.normalizer.normalize(track_name)
        path = self.path_for(slug)
        if path.is_file():
            return path

        if self.fallback_slug:
            fallback = self.path_for(self.fallback_slug)
            if fallback.is_file():
                _logger.warning(
                    "No track cuts for %r (slug %s), using %s", track_name, slug, fallback.name
                )
                return fallback

        available = self.available()
        raise TrackCutsNotFoundError(
            f"Track configuration not found for {track_name!r} (slug {slug!r}); "
            f"available: {', '.join(available) or 'none'}",
            available=available,
        )

    def load(self, track_name: str | None) -> TrackCuts:
        """Resolve and load the cuts for *track_name*."""
        return load_track_cuts(self.resolve(track_name))


def cuts_loader(
    cuts_path: str | Path | None = None,
    track: str | None = None,
    cuts_dir: str | Path | None = None,
) -> CutsLoader:
    """Return a :data:`CutsLoader` for one request.

    An explicit *cuts_path* wins. Otherwise *track*, or the track named in the
    telemetry itself, is looked up in *cuts_dir* with the default fallback.
    """

    def load(telemetry: ParsedTelemetry) -> TrackCuts:
        if cuts_path:
            return load_track_cuts(cuts_path)
        track_name = track or telemetry.track_name
        _logger.debug("Looking up cuts for track %r", track_name)
        return TrackCutsStore.from_env(cuts_dir).load(track_name)

    return load
