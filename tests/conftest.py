"""Shared test-data helpers: synthetic sessions, cuts files and CSV logs."""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from pathlib import Path

import pytest

from telemetry_kpi.analysis.models import Lap
from telemetry_kpi.analysis.summary import SessionAnalysis, SessionSummaryBuilder
from telemetry_kpi.telemetry.models import ParsedTelemetry, TelemetrySample
from telemetry_kpi.track.models import TrackCut, TrackCuts

TRACK_LENGTH_M = 1000.0


def make_cuts(
    cut_distances: Sequence[float] = (400.0, 700.0),
    track_length_m: float = TRACK_LENGTH_M,
    track: str = "test_track",
) -> TrackCuts:
    """Cuts with one sector more than *cut_distances*."""
    return TrackCuts(
        track=track,
        track_length_m=track_length_m,
        cuts=tuple(TrackCut(distance_m=d, sector=i) for i, d in enumerate(cut_distances, 1)),
    )


def make_session_samples(
    laps: Sequence[Sequence[float]],
    cuts: TrackCuts | None = None,
    outlap: tuple[float, float] | None = (800.0, 10.0),
    inlap: tuple[float, float] | None = (300.0, 15.0),
    dt: float = 0.5,
) -> list[TelemetrySample]:
    """Build a session driving the given per-sector times.

    *outlap* is ``(start_distance_m, seconds_to_line)``; *inlap* is
    ``(end_distance_m, seconds_after_line)``. Speed is constant inside each
    segment and every sector boundary is hit by a sample exactly.
    """
    cuts = cuts or make_cuts()
    length = cuts.track_length_m
    boundaries_m = [c.distance_m for c in cuts.cuts] + [length]

    # knots: (session time, cumulative distance)
    if outlap is not None:
        start_m, to_line = outlap
        knots = [(0.0, start_m - length), (to_line, 0.0)]
    else:
        knots = [(0.0, 0.0)]

    for lap_no, sector_times in enumerate(laps):
        assert len(sector_times) == cuts.sector_count
        for end_m, sector_time in zip(boundaries_m, sector_times):
            knots.append((knots[-1][0] + sector_time, lap_no * length + end_m))

    if inlap is not None:
        end_m, duration = inlap
        knots.append((knots[-1][0] + duration, len(laps) * length + end_m))

    samples: list[TelemetrySample] = []
    for (t0, d0), (t1, d1) in zip(knots, knots[1:]):
        speed_kph = (d1 - d0) / (t1 - t0) * 3.6
        n = max(1, math.ceil((t1 - t0) / dt))
        for i in range(n):
            w = i / n
            samples.append(
                TelemetrySample(
                    time_s=t0 + w * (t1 - t0),
                    distance=(d0 + w * (d1 - d0)) % length,
                    speed_kph=speed_kph,
                )
            )
    t_end, d_end = knots[-1]
    samples.append(
        TelemetrySample(time_s=t_end, distance=d_end % length, speed_kph=samples[-1].speed_kph)
    )
    return samples


def make_lap(
    lap_index: int,
    sector_times: Sequence[float],
    is_outlap: bool = False,
    is_inlap: bool = False,
) -> Lap:
    return Lap(
        lap_index=lap_index,
        time_s=sum(sector_times),
        sector_times=tuple(sector_times),
        is_outlap=is_outlap,
        is_inlap=is_inlap,
    )


def session_csv(samples: Sequence[TelemetrySample], track_name: str | None = None) -> str:
    """Render samples as a CSV log with an optional ``Track:`` preamble line."""
    lines: list[str] = []
    if track_name:
        lines.append(f"Track: {track_name}")
    lines.append("Time (s),Distance (m),Speed (km/h)")
    for s in samples:
        lines.append(f"{s.time_s:.6f},{s.distance:.6f},{s.speed_kph:.4f}")
    return "\n".join(lines) + "\n"


def write_session(
    directory: Path,
    name: str,
    laps: Sequence[Sequence[float]],
    track_name: str | None = None,
    **kwargs,
) -> Path:
    """Write a synthetic session CSV; *kwargs* go to :func:`make_session_samples`."""
    path = directory / name
    path.write_text(session_csv(make_session_samples(laps, **kwargs), track_name))
    return path


def write_cuts(directory: Path, cuts: TrackCuts, slug: str | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{slug or cuts.track}_cuts.json"
    path.write_text(json.dumps(cuts.model_dump(mode="json")))
    return path


@pytest.fixture
def cuts() -> TrackCuts:
    return make_cuts()


@pytest.fixture
def cuts_file(tmp_path: Path, cuts: TrackCuts) -> Path:
    return write_cuts(tmp_path / "track_cuts", cuts)


def make_analysis(
    laps: Sequence[Sequence[float]],
    cuts: TrackCuts | None = None,
    source: str = "a.csv",
    **kwargs,
) -> SessionAnalysis:
    """Segment and summarize a synthetic session."""
    cuts = cuts or make_cuts()
    telemetry = ParsedTelemetry(
        samples=make_session_samples(laps, cuts=cuts, **kwargs),
        source=source,
    )
    return SessionSummaryBuilder().build(telemetry, cuts)
