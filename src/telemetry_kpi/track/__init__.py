"""Track configuration: sector cuts and track name normalization."""

from telemetry_kpi.track.models import TrackCut, TrackCuts
from telemetry_kpi.track.names import (
    DEFAULT_TRACK_ALIASES,
    DEFAULT_TRACK_SLUG,
    TrackNameNormalizer,
    normalize_track_name,
)
from telemetry_kpi.track.store import CutsLoader, TrackCutsStore, cuts_loader, load_track_cuts

__all__ = [
    "CutsLoader",
    "DEFAULT_TRACK_ALIASES",
    "DEFAULT_TRACK_SLUG",
    "TrackCut",
    "TrackCuts",
    "TrackCutsStore",
    "TrackNameNormalizer",
    "cuts_loader",
    "load_track_cuts",
    "normalize_track_name",
]
