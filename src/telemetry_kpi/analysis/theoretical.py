"""Theoretical best lap: sum of the best time in each sector across valid laps."""

from __future__ import annotations

from collections.abc import Sequence

from telemetry_kpi.analysis.models import SUM_TOLERANCE_S, Lap, TheoreticalBest
from telemetry_kpi.errors import SegmentationError, TheoreticalBestUnavailableError


class TheoreticalBestCalculator:
    """Compute a :class:`TheoreticalBest` from segmented laps.

    Only valid laps (neither outlap nor inlap) take part. One valid lap is
    enough; the theoretical best then equals that lap.
    """

    def compute(self, laps: Sequence[Lap]) -> TheoreticalBest:
        """Return the theoretical best for *laps*.

        Raises:
            TheoreticalBestUnavailableError: If there is no valid lap.
            SegmentationError: If the best-sector sum exceeds the fastest lap,
                which means the sector times are inconsistent.
        """
        valid = [lap for lap in laps if lap.is_valid]
        if not valid:
            raise TheoreticalBestUnavailableError(
                "Theoretical best needs at least one valid lap (outlaps and inlaps excluded)"
            )

        n_sectors = len(valid[0].sector_times)
        best_times: list[float] = []
        best_laps: list[int] = []
        for sector in range(n_sectors):
            # ties go to the earlier lap
            best = min(valid, key=lambda lap: lap.sector_times[sector])
            best_times.append(best.sector_times[sector])
            best_laps.append(best.lap_index)

        theoretical = sum(best_times)
        fastest = min(lap.time_s for lap in valid)
        gain = fastest - theoretical
        if gain < -SUM_TOLERANCE_S:
            raise SegmentationError(
                f"Theoretical best {theoretical:.3f}s is slower than the fastest lap "
                f"{fastest:.3f}s"
            )

        return TheoreticalBest(
            theoretical_lap_time_s=theoretical,
            fastest_actual_lap_time_s=fastest,
            potential_gain_s=max(gain, 0.0),
            best_sector_times=tuple(best_times),
            best_sector_laps=tuple(best_laps),
        )
