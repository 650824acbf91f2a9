"""KpiService: runs the summary and comparison pipelines for the Web API."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from telemetry_kpi.analysis.summary import SessionAnalysis, SessionSummaryBuilder
from telemetry_kpi.comparison.engine import compare_sessions
from telemetry_kpi.comparison.models import ComparisonResult
from telemetry_kpi.errors import PathNotAllowedError
from telemetry_kpi.reporting.artifacts import write_comparison_artifacts
from telemetry_kpi.telemetry.parser import TelemetryFileParser
from telemetry_kpi.track.store import CutsLoader, TrackCutsStore, cuts_loader
from telemetry_kpi.web.schemas import CompareRequest, SummaryRequest, TrackSource

_logger = logging.getLogger(__name__)


class KpiService:
    """Wraps parse → segment → summarize/compare for one request.

    Every call builds fresh parser, builder and engine objects, so one
    service may be shared by concurrent requests.

    Requests name server-side paths. With a *data_root*, every path a request
    reads or writes must resolve inside it; without one the service trusts
    its callers and should only be exposed locally.

    Parameters
    ----------
    cuts_dir:
        Default cuts directory when a request names neither ``cuts_path`` nor
        ``cuts_dir``. ``None`` falls back to ``$TELEMETRY_KPI_CUTS_DIR``.
    data_root:
        Directory that confines request paths. ``None`` falls back to
        ``$TELEMETRY_KPI_DATA_ROOT``; unset means unrestricted.
    """

    def __init__(self, cuts_dir: str | None = None, data_root: str | None = None) -> None:
        self._cuts_dir = cuts_dir
        root = data_root or os.environ.get("TELEMETRY_KPI_DATA_ROOT")
        self._data_root = Path(root).resolve() if root else None

    def store(self, cuts_dir: str | None = None) -> TrackCutsStore:
        """Return the cuts store for *cuts_dir* (or the service default).

        Raises
        ------
        PathNotAllowedError
            If *cuts_dir* is outside the data root.
        """
        return TrackCutsStore.from_env(self._allowed(cuts_dir) or self._cuts_dir)

    def summarize(self, req: SummaryRequest) -> SessionAnalysis:
        """Build the session summary for ``req.telemetry_path``.

        Raises
        ------
        TelemetryKpiError
            Parse, track cuts or segmentation failures, or a path outside the
            data root.
        """
        load_cuts = self._cuts_loader(req)
        telemetry = TelemetryFileParser().parse(self._allowed(req.telemetry_path))
        return SessionSummaryBuilder().build(telemetry, load_cuts(telemetry))

    def compare(self, req: CompareRequest) -> tuple[ComparisonResult, dict[str, str]]:
        """Run the comparison and write artifacts when ``req.output_dir`` is set.

        Returns
        -------
        tuple[ComparisonResult, dict[str, str]]
            ``(result, artifact_name -> path)``
        """
        output_dir = self._allowed(req.output_dir)
        result = compare_sessions(
            req.mode,
            self._allowed(req.file_a),
            self._cuts_loader(req),
            file_b=self._allowed(req.file_b),
            lap_a=req.lap_a,
            lap_b=req.lap_b,
        )

        artifacts: dict[str, str] = {}
        if output_dir:
            written = write_comparison_artifacts(result, output_dir)
            artifacts = {name: str(path) for name, path in written.items()}
        return result, artifacts

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _cuts_loader(self, src: TrackSource) -> CutsLoader:
        return cuts_loader(
            self._allowed(src.cuts_path),
            track=src.track,
            cuts_dir=self._allowed(src.cuts_dir) or self._cuts_dir,
        )

    def _allowed(self, path: str | None) -> str | None:
        if path is None or self._data_root is None:
            return path
        resolved = Path(path).resolve()
        if not resolved.is_relative_to(self._data_root):
            _logger.warning("Rejected path outside data root: %s", path)
            raise PathNotAllowedError(
                f"Path {path!r} is outside the data root {str(self._data_root)!r}"
            )
        return str(resolved)
