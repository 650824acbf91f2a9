"""Point-by-point delta calculation between two comparable laps.

Both laps are interpolated onto the same lap-fraction grid, so different
sample rates and the synthetic theoretical lap are handled transparently.
"""

from __future__ import annotations

from telemetry_kpi.comparison.models import ComparableLap, DeltaSeries, SectorDelta


class DeltaCalculator:
    """Compute time and speed deltas of lap B relative to lap A.

    Args:
        n_grid: Number of equally-spaced positions used for the delta series.
    """

    def __init__(self, n_grid: int = 501) -> None:
        if n_grid < 2:
            raise ValueError("n_grid must be at least 2")
        self.n_grid = n_grid

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute_point_deltas(
        self,
        lap_a: ComparableLap,
        lap_b: ComparableLap,
    ) -> list[tuple[float, float]]:
        """Return ``(lap_fraction, delta_seconds)`` for *n_grid* evenly spaced positions.

        ``delta > 0`` means lap A is ahead (faster) at that point; ``delta < 0``
        means lap B is ahead.
        """
        step = 1.0 / (self.n_grid - 1)
        result: list[tuple[float, float]] = []
        for i in range(self.n_grid):
            p = i * step
            result.append((p, lap_b.time_at(p) - lap_a.time_at(p)))
        return result

    def compute_series(
        self,
        lap_a: ComparableLap,
        lap_b: ComparableLap,
        track_length_m: float | None,
    ) -> DeltaSeries:
        """Return time and speed deltas on the grid, with distances in metres.

        Without a *track_length_m* the distances stay lap fractions.
        """
        if track_length_m:
            series = DeltaSeries()
            scale = track_length_m
        else:
            series = DeltaSeries(distance_unit="fraction")
            scale = 1.0
        for p, delta in self.compute_point_deltas(lap_a, lap_b):
            speed_a = lap_a.speed_at(p)
            speed_b = lap_b.speed_at(p)
            series.distance_m.append(p * scale)
            series.time_delta_s.append(delta)
            series.speed_a_kph.append(speed_a)
            series.speed_b_kph.append(speed_b)
            series.speed_delta_kph.append(speed_b - speed_a)
        return series

    def compute_sector_deltas(
        self,
        lap_a: ComparableLap,
        lap_b: ComparableLap,
    ) -> list[SectorDelta]:
        """Return one :class:`SectorDelta` per sector (``time_b - time_a``)."""
        return [
            SectorDelta(sector=idx, time_a_s=ta, time_b_s=tb, delta_s=tb - ta)
            for idx, (ta, tb) in enumerate(zip(lap_a.sector_times, lap_b.sector_times), start=1)
        ]
