"""Session summary pipeline: parse → segment → theoretical best."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from telemetry_kpi.analysis.models import LapTrace, SessionSummary
from telemetry_kpi.analysis.segmenter import LapSegmenter
from telemetry_kpi.analysis.theoretical import TheoreticalBestCalculator
from telemetry_kpi.errors import LapNotFoundError, TheoreticalBestUnavailableError
from telemetry_kpi.telemetry.models import ParsedTelemetry
from telemetry_kpi.telemetry.parser import TelemetryFileParser
from telemetry_kpi.track.models import TrackCuts
from telemetry_kpi.track.store import load_track_cuts

_logger = logging.getLogger(__name__)


@dataclass
class SessionAnalysis:
    """A session summary together with the samples it was built from.

    Comparisons need the sample traces, which the summary JSON does not carry.
    """

    summary: SessionSummary
    telemetry: ParsedTelemetry
    cuts: TrackCuts
    positions: list[float]
    _traces: dict[int, LapTrace] = field(default_factory=dict, repr=False)

    def trace(self, lap_index: int) -> LapTrace:
        """Return (and cache) the distance trace of lap *lap_index*.

        Raises:
            LapNotFoundError: If the session has no such lap.
        """
        if lap_index not in self._traces:
            lap = self.summary.get_lap(lap_index)
            if lap is None:
                raise LapNotFoundError(
                    f"Lap {lap_index} not found in {self.summary.source or 'session'} "
                    f"({len(self.summary.laps)} laps)"
                )
            segmenter = LapSegmenter(self.cuts)
            self._traces[lap_index] = segmenter.trace(self.telemetry.samples, lap, self.positions)
        return self._traces[lap_index]


class SessionSummaryBuilder:
    """Build a :class:`SessionSummary` for one telemetry file.

    Each call creates its own parser, segmenter and calculator, so a builder
    can be shared between concurrent requests.
    """

    def build(self, telemetry: ParsedTelemetry, cuts: TrackCuts) -> SessionAnalysis:
        """Segment *telemetry* with *cuts* and compute the summary."""
        segmenter = LapSegmenter(cuts)
        positions = segmenter.unwrap(telemetry.samples, telemetry.distance_unit)
        laps = segmenter.segment_positions(telemetry.samples, positions)

        valid = [lap for lap in laps if lap.is_valid]
        fastest_index = min(valid, key=lambda lap: lap.time_s).lap_index if valid else None

        theoretical = None
        try:
            theoretical = TheoreticalBestCalculator().compute(laps)
        except TheoreticalBestUnavailableError:
            _logger.info("%s: no valid laps, theoretical best not computed", telemetry.source)

        summary = SessionSummary(
            laps=laps,
            fastest_lap_index=fastest_index,
            theoretical_best=theoretical,
            track=cuts.track,
            source=telemetry.source,
            skipped_rows=telemetry.skipped_rows,
        )
        return SessionAnalysis(summary=summary, telemetry=telemetry, cuts=cuts, positions=positions)

    def build_from_files(self, telemetry_path: str | Path, cuts_path: str | Path) -> SessionAnalysis:
        """Parse *telemetry_path*, load *cuts_path* and build the analysis."""
        cuts = load_track_cuts(cuts_path)
        telemetry = TelemetryFileParser().parse(telemetry_path)
        return self.build(telemetry, cuts)


def build_session_summary(telemetry_path: str | Path, cuts_path: str | Path) -> SessionSummary:
    """Return the :class:`SessionSummary` for one telemetry file."""
    return SessionSummaryBuilder().build_from_files(telemetry_path, cuts_path).summary
