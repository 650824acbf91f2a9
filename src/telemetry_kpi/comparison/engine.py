"""ComparisonEngine: selects both laps for a mode and computes the comparison."""

from __future__ import annotations

import logging
from pathlib import Path

from telemetry_kpi.analysis.summary import SessionAnalysis, SessionSummaryBuilder
from telemetry_kpi.comparison.delta import DeltaCalculator
from telemetry_kpi.comparison.models import (
    ComparableLap,
    ComparisonResult,
    RealLap,
    TheoreticalLap,
)
from telemetry_kpi.comparison.modes import (
    FASTEST,
    THEORETICAL,
    ComparisonMode,
    ResolvedComparison,
    Selector,
    SideKind,
    resolve_request,
)
from telemetry_kpi.errors import (
    LapNotFoundError,
    ModeResolutionError,
    TheoreticalBestUnavailableError,
)
from telemetry_kpi.telemetry.parser import TelemetryFileParser
from telemetry_kpi.track.store import CutsLoader

_logger = logging.getLogger(__name__)


class ComparisonEngine:
    """Resolve comparison sides and compute deltas.

    Args:
        delta_calculator: Calculator used for the distance series; defaults to
            a 501-point grid.
    """

    def __init__(self, delta_calculator: DeltaCalculator | None = None) -> None:
        self.delta = delta_calculator or DeltaCalculator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compare(
        self,
        request: ResolvedComparison,
        session_a: SessionAnalysis,
        session_b: SessionAnalysis | None = None,
    ) -> ComparisonResult:
        """Compare the two laps described by *request*.

        Single-session modes take both sides from *session_a*; two-session
        modes take side A from *session_a* and side B from *session_b*.

        Raises:
            ModeResolutionError: If a two-session mode gets no *session_b*.
            LapNotFoundError: If a lap number is out of range or a session has
                no valid lap to be its fastest.
            TheoreticalBestUnavailableError: If a theoretical side is requested
                for a session without valid laps.
        """
        mode = request.mode
        spec = mode.spec
        if spec.multi_session:
            if session_b is None:
                raise ModeResolutionError(f"Mode {mode.value} needs a second session")
            source_b = session_b
        else:
            source_b = session_a

        # theoretical sides first: a session without valid laps reports the
        # missing theoretical best rather than the missing fastest lap
        side_b = self._theoretical(source_b, "B") if spec.side_b is SideKind.THEORETICAL else None
        side_a = self._select(session_a, "A", spec.side_a, request.lap_a)
        if side_b is None:
            side_b = self._select(source_b, "B", spec.side_b, request.lap_b)
        for side in (side_a, side_b):
            if isinstance(side, RealLap) and not side.lap.is_valid:
                _logger.warning("%s is an outlap/inlap; deltas cover a partial lap", side.label)

        track_length_m = session_a.cuts.track_length_m
        series = self.delta.compute_series(side_a, side_b, track_length_m)
        sectors = self.delta.compute_sector_deltas(side_a, side_b)

        gaps = series.time_delta_s
        max_idx = max(range(len(gaps)), key=gaps.__getitem__)
        min_idx = min(range(len(gaps)), key=gaps.__getitem__)

        result = ComparisonResult(
            mode=mode.value,
            track=session_a.cuts.track,
            track_length_m=track_length_m,
            side_a=side_a,
            side_b=side_b,
            total_delta_s=side_b.time_s - side_a.time_s,
            sectors=sectors,
            series=series,
            time_gained_s=sum(s.delta_s for s in sectors if s.delta_s > 0),
            time_lost_s=-sum(s.delta_s for s in sectors if s.delta_s < 0),
            max_gap_s=gaps[max_idx],
            max_gap_distance_m=series.distance_m[max_idx],
            min_gap_s=gaps[min_idx],
            min_gap_distance_m=series.distance_m[min_idx],
        )
        _logger.info(
            "%s: %s (%.3fs) vs %s (%.3fs), delta %+.3fs",
            mode.value,
            side_a.label,
            side_a.time_s,
            side_b.label,
            side_b.time_s,
            result.total_delta_s,
        )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _select(
        self,
        session: SessionAnalysis,
        label: str,
        kind: SideKind,
        selector: Selector,
    ) -> ComparableLap:
        if kind is SideKind.THEORETICAL:
            return self._theoretical(session, label)
        if kind is SideKind.FASTEST or selector == FASTEST:
            return self._real(session, label, self._fastest_index(session, label))
        if selector == THEORETICAL or not isinstance(selector, int):
            raise ModeResolutionError(f"Side {label} needs a lap number, got {selector!r}")
        return self._real(session, label, selector)

    @staticmethod
    def _fastest_index(session: SessionAnalysis, label: str) -> int:
        index = session.summary.fastest_lap_index
        if index is None:
            raise LapNotFoundError(
                f"Session {label} ({session.summary.source or 'unnamed'}) has no valid lap "
                "to pick as fastest"
            )
        return index

    @staticmethod
    def _real(session: SessionAnalysis, label: str, lap_index: int) -> RealLap:
        lap = session.summary.get_lap(lap_index)
        if lap is None:
            raise LapNotFoundError(
                f"Lap {lap_index} not found in session {label} "
                f"(laps 1-{len(session.summary.laps)})"
                if session.summary.laps
                else f"Lap {lap_index} not found in session {label} (no laps)"
            )
        return RealLap(
            session=label,
            lap=lap,
            trace=session.trace(lap_index),
            source=session.summary.source,
        )

    @staticmethod
    def _theoretical(session: SessionAnalysis, label: str) -> TheoreticalLap:
        best = session.summary.theoretical_best
        if best is None:
            raise TheoreticalBestUnavailableError(
                f"Session {label} ({session.summary.source or 'unnamed'}) has no valid lap; "
                "theoretical best unavailable"
            )
        return TheoreticalLap(
            session=label,
            best=best,
            sector_traces=[session.trace(idx) for idx in best.best_sector_laps],
            boundaries=session.cuts.boundaries,
            source=session.summary.source,
        )


def compare_sessions(
    mode: str | ComparisonMode | None,
    file_a: str | Path,
    load_cuts: CutsLoader,
    file_b: str | Path | None = None,
    lap_a: Selector = None,
    lap_b: Selector = None,
) -> ComparisonResult:
    """Parse one or two telemetry files and compare them.

    *mode* may be ``None`` or ``"auto"`` to resolve it from the selectors.
    *load_cuts* gets session A's parsed telemetry; both sessions are
    segmented with the cuts it returns.
    """
    two_sessions = file_b is not None
    request = resolve_request(mode, lap_a, lap_b, two_sessions)
    _logger.info("Mode %s (lap A %s, lap B %s)", request.mode.value, request.lap_a, request.lap_b)

    parser = TelemetryFileParser()
    builder = SessionSummaryBuilder()
    telemetry_a = parser.parse(file_a)
    cuts = load_cuts(telemetry_a)
    session_a = builder.build(telemetry_a, cuts)
    session_b = None
    if request.mode.multi_session and file_b is not None:
        session_b = builder.build(parser.parse(file_b), cuts)

    return ComparisonEngine().compare(request, session_a, session_b)
