"""Lap, theoretical-best and session summary models."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

SUM_TOLERANCE_S = 0.001
"""Allowed mismatch between ``sum(sector_times)`` and ``time_s``."""


def format_lap_time(seconds: float | None) -> str:
    """Format *seconds* as ``M:SS.mmm`` (``"-"`` for ``None``)."""
    if seconds is None:
        return "-"
    millis = int(round(seconds * 1000))
    sign = "-" if millis < 0 else ""
    millis = abs(millis)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{sign}{minutes}:{secs:02d}.{millis:03d}"


@dataclass(frozen=True)
class Lap:
    """One segmented lap of a session.

    ``sector_times`` always has one entry per track sector; sectors a partial
    lap never drove through are ``0.0`` so the sum still equals ``time_s``.
    """

    lap_index: int
    """1-based position of the lap in the session."""

    time_s: float
    """Elapsed time from the lap's opening crossing (or first sample) to its close."""

    sector_times: tuple[float, ...]

    is_outlap: bool = False
    """First lap: starts wherever recording began, ends at the first line crossing."""

    is_inlap: bool = False
    """Trailing partial lap with no closing crossing."""

    start_time_s: float = 0.0
    """Session time at which the lap opens."""

    end_time_s: float = 0.0
    """Session time at which the lap closes."""

    start_index: int = 0
    """Index of the first sample belonging to this lap."""

    end_index: int = 0
    """Index of the last sample belonging to this lap (inclusive)."""

    @property
    def is_valid(self) -> bool:
        """A lap counts towards statistics unless it is an outlap or inlap."""
        return not (self.is_outlap or self.is_inlap)

    @property
    def time_str(self) -> str:
        return format_lap_time(self.time_s)

    def to_dict(self) -> dict:
        return {
            "lap_index": self.lap_index,
            "time_s": round(self.time_s, 3),
            "time_str": self.time_str,
            "sector_times": [round(t, 3) for t in self.sector_times],
            "is_outlap": self.is_outlap,
            "is_inlap": self.is_inlap,
            "is_valid": self.is_valid,
            "start_time_s": round(self.start_time_s, 3),
            "end_time_s": round(self.end_time_s, 3),
            "start_index": self.start_index,
            "end_index": self.end_index,
        }


@dataclass(frozen=True)
class TheoreticalBest:
    """Best-sector composite lap for one session.

    ``potential_gain_s`` is ``fastest_actual_lap_time_s - theoretical_lap_time_s``
    and is never negative.
    """

    theoretical_lap_time_s: float
    fastest_actual_lap_time_s: float
    potential_gain_s: float
    best_sector_times: tuple[float, ...]
    best_sector_laps: tuple[int, ...]
    """``lap_index`` that set each best sector."""

    @property
    def theoretical_lap_time_str(self) -> str:
        return format_lap_time(self.theoretical_lap_time_s)

    def to_dict(self) -> dict:
        return {
            "theoretical_lap_time_s": round(self.theoretical_lap_time_s, 3),
            "theoretical_lap_time_str": self.theoretical_lap_time_str,
            "fastest_actual_lap_time_s": round(self.fastest_actual_lap_time_s, 3),
            "potential_gain_s": round(self.potential_gain_s, 3),
            "best_sector_times": [round(t, 3) for t in self.best_sector_times],
            "best_sector_laps": list(self.best_sector_laps),
        }


@dataclass
class SessionSummary:
    """All laps of one telemetry file plus fastest lap and theoretical best."""

    laps: list[Lap]
    fastest_lap_index: int | None = None
    theoretical_best: TheoreticalBest | None = None
    track: str = ""
    source: str = ""
    skipped_rows: int = 0

    @property
    def valid_laps(self) -> list[Lap]:
        return [lap for lap in self.laps if lap.is_valid]

    @property
    def fastest_lap(self) -> Lap | None:
        if self.fastest_lap_index is None:
            return None
        return self.get_lap(self.fastest_lap_index)

    @property
    def fastest_lap_time_s(self) -> float | None:
        lap = self.fastest_lap
        return lap.time_s if lap else None

    def get_lap(self, lap_index: int) -> Lap | None:
        """Return the lap with *lap_index*, or ``None``."""
        for lap in self.laps:
            if lap.lap_index == lap_index:
                return lap
        return None

    def to_dict(self) -> dict:
        """Return the session summary JSON document."""
        fastest = self.fastest_lap_time_s
        return {
            "session": {
                "source": self.source,
                "track": self.track,
                "lap_count": len(self.laps),
                "valid_lap_count": len(self.valid_laps),
                "skipped_rows": self.skipped_rows,
                "fastest_lap_index": self.fastest_lap_index,
                "fastest_lap_time_s": round(fastest, 3) if fastest is not None else None,
                "fastest_lap_time_str": format_lap_time(fastest) if fastest is not None else None,
                "laps": [lap.to_dict() for lap in self.laps],
            },
            "theoretical_best": self.theoretical_best.to_dict() if self.theoretical_best else None,
        }


@dataclass
class TracePoint:
    """One point of a lap trace, in lap-relative terms."""

    fraction: float
    """Lap fraction [0.0, 1.0]."""

    elapsed_s: float
    """Time since the lap opened, seconds."""

    speed_kph: float


def _interpolate(xs: list[float], ys: list[float], query: float) -> float:
    """Linear interpolation of *ys* at *query*; clamped to the first/last point."""
    if not xs:
        return 0.0
    if query <= xs[0]:
        return ys[0]
    if query >= xs[-1]:
        return ys[-1]
    idx = bisect.bisect_right(xs, query)
    x0, x1 = xs[idx - 1], xs[idx]
    span = x1 - x0
    if span < 1e-12:
        return ys[idx - 1]
    t = (query - x0) / span
    return ys[idx - 1] + t * (ys[idx] - ys[idx - 1])


@dataclass
class LapTrace:
    """Samples of one lap ordered by strictly increasing lap fraction.

    The opening and closing line crossings are included as interpolated
    points, so a full lap runs from fraction 0.0 (elapsed 0) to 1.0
    (elapsed ``time_s``).
    """

    lap_index: int
    points: list[TracePoint] = field(default_factory=list)
    _fractions: list[float] = field(init=False, repr=False, default_factory=list)
    _elapsed: list[float] = field(init=False, repr=False, default_factory=list)
    _speeds: list[float] = field(init=False, repr=False, default_factory=list)

    def __post_init__(self) -> None:
        self._fractions = [p.fraction for p in self.points]
        self._elapsed = [p.elapsed_s for p in self.points]
        self._speeds = [p.speed_kph for p in self.points]

    def time_at(self, fraction: float) -> float:
        """Elapsed lap time when the car was at *fraction*."""
        return _interpolate(self._fractions, self._elapsed, fraction)

    def speed_at(self, fraction: float) -> float:
        """Speed in km/h at *fraction*."""
        return _interpolate(self._fractions, self._speeds, fraction)
