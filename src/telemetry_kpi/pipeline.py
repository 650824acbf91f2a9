"""File-to-artifact entry points used by the CLI, the web service and scripts."""

from __future__ import annotations

from pathlib import Path

from telemetry_kpi.analysis.summary import build_session_summary
from telemetry_kpi.comparison.engine import compare_sessions
from telemetry_kpi.comparison.models import ComparisonResult
from telemetry_kpi.comparison.modes import ComparisonMode, Selector
from telemetry_kpi.reporting.artifacts import write_comparison_artifacts
from telemetry_kpi.track.store import cuts_loader

__all__ = ["build_session_summary", "compare"]


def compare(
    mode: str | ComparisonMode | None,
    file_a: str | Path,
    cuts_path: str | Path | None = None,
    file_b: str | Path | None = None,
    lap_a: Selector = None,
    lap_b: Selector = None,
    output_dir: str | Path | None = None,
    track: str | None = None,
    cuts_dir: str | Path | None = None,
) -> ComparisonResult:
    """Compare laps of one or two telemetry files.

    Without *cuts_path*, the cuts are looked up by *track* (or the track named
    in file A) in *cuts_dir*. When *output_dir* is given,
    ``ui_artifacts.json`` and ``comparison.md`` are written there. No images
    are produced.

    Raises:
        TelemetryKpiError: Any subclass, see :mod:`telemetry_kpi.errors`.
    """
    result = compare_sessions(
        mode,
        file_a,
        cuts_loader(cuts_path, track=track, cuts_dir=cuts_dir),
        file_b=file_b,
        lap_a=lap_a,
        lap_b=lap_b,
    )
    if output_dir is not None:
        write_comparison_artifacts(result, output_dir)
    return result
