"""Error taxonomy shared by every pipeline stage.

Each error carries a stable ``kind`` string and the process ``exit_code`` the
command-line tools report for it, so callers can tell failures apart without
parsing messages.
"""

from __future__ import annotations


class TelemetryKpiError(Exception):
    """Base class for all errors raised by the telemetry_kpi core."""

    kind = "error"
    exit_code = 1


class ParseError(TelemetryKpiError):
    """The telemetry input is empty, has no recognizable header, or no valid rows."""

    kind = "parse_error"
    exit_code = 2


class TrackCutsNotFoundError(TelemetryKpiError):
    """No track cuts file exists for the slug and the fallback is missing too.

    Args:
        message: Human-readable description.
        available: Slugs that *do* have a cuts file, for diagnostics.
    """

    kind = "track_cuts_not_found"
    exit_code = 3

    def __init__(self, message: str, available: list[str] | None = None) -> None:
        super().__init__(message)
        self.available = list(available or [])


class LapNotFoundError(TelemetryKpiError):
    """A numeric (or ``fastest``) lap selector does not match any lap."""

    kind = "lap_not_found"
    exit_code = 4


class TheoreticalBestUnavailableError(TelemetryKpiError):
    """A theoretical best was requested but the session has no valid lap."""

    kind = "theoretical_best_unavailable"
    exit_code = 5


class ModeResolutionError(TelemetryKpiError):
    """Selectors cannot be mapped to a comparison mode, or a required one is absent."""

    kind = "mode_resolution_error"
    exit_code = 6


class SegmentationError(TelemetryKpiError):
    """Internal consistency violation while segmenting laps (e.g. negative sector time)."""

    kind = "segmentation_error"
    exit_code = 7


class PathNotAllowedError(TelemetryKpiError):
    """A Web API request named a file or directory outside the configured data root."""

    kind = "path_not_allowed"
    exit_code = 8
