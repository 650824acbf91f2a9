"""Comparison data models.

A side of a comparison is a :data:`ComparableLap`: either a :class:`RealLap`
backed by recorded samples, or a :class:`TheoreticalLap` assembled from the
traces of the laps that set each best sector. Both answer "when was the car
at this point of the lap, and how fast" so the delta code treats them alike.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from telemetry_kpi.analysis.models import Lap, LapTrace, TheoreticalBest, format_lap_time


@dataclass
class RealLap:
    """A recorded lap of session *session*."""

    session: str
    """``"A"`` or ``"B"``."""

    lap: Lap
    trace: LapTrace
    source: str = ""
    kind: str = field(default="lap", init=False)

    @property
    def time_s(self) -> float:
        return self.lap.time_s

    @property
    def sector_times(self) -> tuple[float, ...]:
        return self.lap.sector_times

    @property
    def label(self) -> str:
        return f"Session {self.session} lap {self.lap.lap_index}"

    def time_at(self, fraction: float) -> float:
        return self.trace.time_at(fraction)

    def speed_at(self, fraction: float) -> float:
        return self.trace.speed_at(fraction)

    def to_dict(self) -> dict:
        return {
            "session": self.session,
            "kind": self.kind,
            "label": self.label,
            "source": self.source,
            "lap_index": self.lap.lap_index,
            "time_s": round(self.time_s, 3),
            "time_str": format_lap_time(self.time_s),
            "sector_times": [round(t, 3) for t in self.sector_times],
            "is_valid": self.lap.is_valid,
        }


@dataclass
class TheoreticalLap:
    """Synthetic best-sector lap of session *session*.

    It has no samples of its own: inside sector *k* the time and speed come
    from the trace of ``best.best_sector_laps[k]``, re-based so the sector
    starts at the sum of the preceding best sector times.
    """

    session: str
    best: TheoreticalBest
    sector_traces: list[LapTrace]
    boundaries: list[float]
    """Sector end fractions, last one ``1.0``."""

    source: str = ""
    kind: str = field(default="theoretical", init=False)

    @property
    def time_s(self) -> float:
        return self.best.theoretical_lap_time_s

    @property
    def sector_times(self) -> tuple[float, ...]:
        return self.best.best_sector_times

    @property
    def label(self) -> str:
        return f"Session {self.session} theoretical best"

    def _sector(self, fraction: float) -> int:
        return min(bisect.bisect_left(self.boundaries, fraction), len(self.boundaries) - 1)

    def time_at(self, fraction: float) -> float:
        k = self._sector(fraction)
        start = self.boundaries[k - 1] if k > 0 else 0.0
        trace = self.sector_traces[k]
        within = trace.time_at(max(fraction, start)) - trace.time_at(start)
        within = min(max(within, 0.0), self.best.best_sector_times[k])
        return sum(self.best.best_sector_times[:k]) + within

    def speed_at(self, fraction: float) -> float:
        return self.sector_traces[self._sector(fraction)].speed_at(fraction)

    def to_dict(self) -> dict:
        return {
            "session": self.session,
            "kind": self.kind,
            "label": self.label,
            "source": self.source,
            "lap_index": None,
            "time_s": round(self.time_s, 3),
            "time_str": format_lap_time(self.time_s),
            "sector_times": [round(t, 3) for t in self.sector_times],
            "best_sector_laps": list(self.best.best_sector_laps),
            "potential_gain_s": round(self.best.potential_gain_s, 3),
        }


ComparableLap = RealLap | TheoreticalLap


@dataclass
class SectorDelta:
    """Time difference in one sector. Positive = side A was faster."""

    sector: int
    """1-based sector number."""

    time_a_s: float
    time_b_s: float
    delta_s: float
    """``time_b_s - time_a_s``."""


@dataclass
class DeltaSeries:
    """Both laps sampled on a common distance grid.

    ``distance_m`` holds metres, or lap fractions when ``distance_unit`` is
    ``"fraction"``.
    """

    distance_m: list[float] = field(default_factory=list)
    time_delta_s: list[float] = field(default_factory=list)
    """Cumulative gap ``time_b - time_a`` at each distance."""

    speed_a_kph: list[float] = field(default_factory=list)
    speed_b_kph: list[float] = field(default_factory=list)
    speed_delta_kph: list[float] = field(default_factory=list)
    """``speed_b - speed_a``."""

    distance_unit: str = "m"
    """``"m"``, or ``"fraction"`` when the track length is unknown."""


@dataclass
class ComparisonResult:
    """Full comparison of two laps.

    Sign convention: every delta is *B minus A*, so a positive
    ``total_delta_s`` means lap A was faster.
    """

    mode: str
    track: str
    track_length_m: float | None
    side_a: ComparableLap
    side_b: ComparableLap
    total_delta_s: float
    sectors: list[SectorDelta]
    series: DeltaSeries
    time_gained_s: float
    """Sum of sector deltas where A was faster (>= 0)."""

    time_lost_s: float
    """Sum of sector deltas where A was slower, as a positive number."""

    max_gap_s: float
    max_gap_distance_m: float
    min_gap_s: float
    min_gap_distance_m: float

    def to_dict(self) -> dict:
        """Return the ``ui_artifacts.json`` payload."""
        places = 4 if self.series.distance_unit == "fraction" else 1
        return {
            "mode": self.mode,
            "track": self.track,
            "track_length_m": self.track_length_m,
            "distance_unit": self.series.distance_unit,
            "sign_convention": "delta = B - A; positive means A is faster",
            "lap_a": self.side_a.to_dict(),
            "lap_b": self.side_b.to_dict(),
            "summary": {
                "total_delta_s": round(self.total_delta_s, 3),
                "faster_side": _faster_side(self.total_delta_s),
                "time_gained_s": round(self.time_gained_s, 3),
                "time_lost_s": round(self.time_lost_s, 3),
                "max_gap_s": round(self.max_gap_s, 3),
                "max_gap_distance_m": round(self.max_gap_distance_m, places),
                "min_gap_s": round(self.min_gap_s, 3),
                "min_gap_distance_m": round(self.min_gap_distance_m, places),
            },
            "sectors": [
                {
                    "sector": s.sector,
                    "time_a_s": round(s.time_a_s, 3),
                    "time_b_s": round(s.time_b_s, 3),
                    "delta_s": round(s.delta_s, 3),
                }
                for s in self.sectors
            ],
            "series": {
                "distance_m": [round(v, places + 1) for v in self.series.distance_m],
                "time_delta_s": [round(v, 4) for v in self.series.time_delta_s],
                "speed_a_kph": [round(v, 2) for v in self.series.speed_a_kph],
                "speed_b_kph": [round(v, 2) for v in self.series.speed_b_kph],
                "speed_delta_kph": [round(v, 2) for v in self.series.speed_delta_kph],
            },
        }


def _faster_side(delta: float) -> str | None:
    if abs(delta) < 0.0005:
        return None
    return "A" if delta > 0 else "B"
