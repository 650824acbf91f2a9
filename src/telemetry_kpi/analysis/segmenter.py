"""Lap segmentation: splits a session into laps and sectors using track cuts.

Every sample position is mapped to a lap fraction and *unwrapped*: each time
the fraction drops by more than half a lap, the car crossed the start/finish
line and one lap is added. Sector and lap boundaries then sit at
``lap + boundary`` on this unwrapped axis and are matched in order; the
crossing time is interpolated between the two samples straddling it.

Boundary convention: a boundary at ``b`` is crossed between samples ``u0`` and
``u1`` when ``u0 < b <= u1``. A sample exactly on a cut therefore closes the
sector/lap it ends and never opens the next one.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from telemetry_kpi.analysis.models import SUM_TOLERANCE_S, Lap, LapTrace, TracePoint
from telemetry_kpi.errors import SegmentationError
from telemetry_kpi.telemetry.models import TelemetrySample
from telemetry_kpi.track.models import TrackCuts

_logger = logging.getLogger(__name__)

_NEGATIVE_TOLERANCE_S = 1e-9


@dataclass(frozen=True)
class _Crossing:
    cycle: int
    """Lap cycle the boundary belongs to (0 = the lap recording started in)."""

    sector: int
    """0-based sector the boundary closes; the last sector closes the lap."""

    time_s: float


class LapSegmenter:
    """Segment a sample sequence into :class:`Lap` objects.

    Args:
        cuts: Sector cuts of the session's track.
        wrap_threshold: Fraction drop between consecutive samples treated as a
            start/finish wrap rather than noise.
    """

    def __init__(self, cuts: TrackCuts, wrap_threshold: float = 0.5) -> None:
        self.cuts = cuts
        self.wrap_threshold = wrap_threshold

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fraction(self, distance: float, distance_unit: str = "m") -> float:
        """Map a sample position to a lap fraction in ``[0.0, 1.0)``.

        Raises:
            SegmentationError: If *distance* is in metres and the cuts give no
                track length.
        """
        if distance_unit == "fraction":
            return distance % 1.0
        if self.cuts.track_length_m is None:
            raise SegmentationError(
                f"Track cuts for {self.cuts.track or 'this track'} have no track_length_m; "
                "telemetry distances in metres cannot be mapped to the lap"
            )
        return (distance / self.cuts.track_length_m) % 1.0

    def unwrap(self, samples: Sequence[TelemetrySample], distance_unit: str = "m") -> list[float]:
        """Return the cumulative lap position of every sample (laps + fraction)."""
        positions: list[float] = []
        wraps = 0
        prev: float | None = None
        for sample in samples:
            f = self.fraction(sample.distance, distance_unit)
            if prev is not None:
                if f - prev < -self.wrap_threshold:
                    wraps += 1
                elif f - prev > self.wrap_threshold:
                    wraps -= 1
            positions.append(wraps + f)
            prev = f
        return positions

    def segment(self, samples: Sequence[TelemetrySample], distance_unit: str = "m") -> list[Lap]:
        """Split *samples* into laps.

        The first lap is the outlap (recording start → first line crossing);
        samples after the last crossing form the inlap. A session without any
        line crossing yields an empty list.

        Raises:
            SegmentationError: If a sector time comes out negative or the
                sector times do not add up to the lap time.
        """
        if len(samples) < 2:
            return []
        return self.segment_positions(samples, self.unwrap(samples, distance_unit))

    def segment_positions(
        self,
        samples: Sequence[TelemetrySample],
        positions: Sequence[float],
    ) -> list[Lap]:
        """Like :meth:`segment`, reusing *positions* from :meth:`unwrap`."""
        if len(samples) < 2:
            return []

        crossings = self._find_crossings(samples, positions)
        line_times = [c.time_s for c in crossings if c.sector == self.cuts.sector_count - 1]
        if not line_times:
            _logger.info("No start/finish crossing in %d samples; no laps", len(samples))
            return []

        times = [s.time_s for s in samples]
        by_cycle: dict[int, dict[int, float]] = {}
        for c in crossings:
            by_cycle.setdefault(c.cycle, {})[c.sector] = c.time_s

        first_sector = bisect.bisect_right(self.cuts.boundaries, positions[0])
        bounds = [times[0]] + line_times
        if times[-1] > line_times[-1]:
            bounds.append(times[-1])

        laps: list[Lap] = []
        for cycle in range(len(bounds) - 1):
            start, end = bounds[cycle], bounds[cycle + 1]
            is_outlap = cycle == 0
            is_inlap = cycle == len(line_times)
            sector_times = self._sector_times(
                by_cycle.get(cycle, {}),
                start,
                end,
                first_sector if is_outlap else 0,
            )
            lap = Lap(
                lap_index=cycle + 1,
                time_s=end - start,
                sector_times=sector_times,
                is_outlap=is_outlap,
                is_inlap=is_inlap,
                start_time_s=start,
                end_time_s=end,
                start_index=0 if is_outlap else bisect.bisect_right(times, start),
                end_index=bisect.bisect_right(times, end) - 1,
            )
            self._check(lap)
            laps.append(lap)

        _logger.debug(
            "Segmented %d samples into %d laps (%d valid)",
            len(samples),
            len(laps),
            sum(1 for lap in laps if lap.is_valid),
        )
        return laps

    def trace(
        self,
        samples: Sequence[TelemetrySample],
        lap: Lap,
        positions: Sequence[float],
    ) -> LapTrace:
        """Build the fraction-ordered trace of *lap*.

        *positions* must come from :meth:`unwrap` on the same *samples*.
        Boundary crossings are added as interpolated points; samples that move
        backwards along the track are dropped so fractions strictly increase.
        """
        cycle = lap.lap_index - 1
        times = [s.time_s for s in samples]
        points: list[TracePoint] = []

        def add(fraction: float, elapsed: float, speed: float) -> None:
            if not points or fraction > points[-1].fraction:
                points.append(TracePoint(fraction=fraction, elapsed_s=elapsed, speed_kph=speed))

        if not lap.is_outlap:
            add(0.0, 0.0, _speed_at_time(samples, times, lap.start_time_s))
        for i in range(lap.start_index, lap.end_index + 1):
            rel = positions[i] - cycle
            if 0.0 <= rel <= 1.0:
                add(rel, samples[i].time_s - lap.start_time_s, samples[i].speed_kph)
        if not lap.is_inlap:
            add(1.0, lap.time_s, _speed_at_time(samples, times, lap.end_time_s))
        return LapTrace(lap_index=lap.lap_index, points=points)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _find_crossings(
        self,
        samples: Sequence[TelemetrySample],
        positions: Sequence[float],
    ) -> list[_Crossing]:
        boundaries = self.cuts.boundaries
        n_sectors = len(boundaries)

        cycle = 0
        sector = bisect.bisect_right(boundaries, positions[0])
        crossings: list[_Crossing] = []

        for i in range(1, len(samples)):
            u0, u1 = positions[i - 1], positions[i]
            while True:
                target = cycle + boundaries[sector]
                if not (u0 < target <= u1):
                    break
                t0, t1 = samples[i - 1].time_s, samples[i].time_s
                t = t0 + (target - u0) / (u1 - u0) * (t1 - t0)
                crossings.append(_Crossing(cycle=cycle, sector=sector, time_s=t))
                sector += 1
                if sector == n_sectors:
                    sector = 0
                    cycle += 1
        return crossings

    def _sector_times(
        self,
        crossed: dict[int, float],
        start: float,
        end: float,
        first_sector: int,
    ) -> tuple[float, ...]:
        times = [0.0] * self.cuts.sector_count
        prev = start
        for sector in range(first_sector, self.cuts.sector_count):
            if sector in crossed:
                times[sector] = crossed[sector] - prev
                prev = crossed[sector]
            else:
                times[sector] = end - prev
                break
        return tuple(times)

    def _check(self, lap: Lap) -> None:
        if len(lap.sector_times) != self.cuts.sector_count:
            raise SegmentationError(
                f"Lap {lap.lap_index} has {len(lap.sector_times)} sector times, "
                f"expected {self.cuts.sector_count}"
            )
        for idx, t in enumerate(lap.sector_times, start=1):
            if t < -_NEGATIVE_TOLERANCE_S:
                raise SegmentationError(
                    f"Lap {lap.lap_index} sector {idx} time is negative ({t:.6f}s)"
                )
        if abs(sum(lap.sector_times) - lap.time_s) >= SUM_TOLERANCE_S:
            raise SegmentationError(
                f"Lap {lap.lap_index} sector times sum to {sum(lap.sector_times):.4f}s "
                f"but the lap took {lap.time_s:.4f}s"
            )


def _speed_at_time(samples: Sequence[TelemetrySample], times: Sequence[float], t: float) -> float:
    """Speed linearly interpolated in time at session time *t*."""
    idx = bisect.bisect_left(times, t)
    if idx <= 0:
        return samples[0].speed_kph
    if idx >= len(samples):
        return samples[-1].speed_kph
    s0, s1 = samples[idx - 1], samples[idx]
    span = s1.time_s - s0.time_s
    if span <= 0:
        return s1.speed_kph
    w = (t - s0.time_s) / span
    return s0.speed_kph + w * (s1.speed_kph - s0.speed_kph)
