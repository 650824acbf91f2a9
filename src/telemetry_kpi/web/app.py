"""FastAPI Web application exposing session summaries and comparisons.

Requests name files on the server. Set ``TELEMETRY_KPI_DATA_ROOT`` to confine
them to one directory; without it the app is for trusted local use only.
"""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from telemetry_kpi import __version__
from telemetry_kpi.errors import (
    LapNotFoundError,
    PathNotAllowedError,
    TelemetryKpiError,
    TheoreticalBestUnavailableError,
    TrackCutsNotFoundError,
)
from telemetry_kpi.web.schemas import (
    CompareRequest,
    CompareResponse,
    ErrorDetail,
    HealthResponse,
    SummaryRequest,
    SummaryResponse,
    TracksResponse,
)
from telemetry_kpi.web.service import KpiService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="Telemetry KPI", version=__version__)


def _status_for(exc: TelemetryKpiError) -> int:
    if isinstance(exc, PathNotAllowedError):
        return 403
    if isinstance(exc, (TrackCutsNotFoundError, LapNotFoundError)):
        return 404
    if isinstance(exc, TheoreticalBestUnavailableError):
        return 409
    return 422


def _http_error(exc: TelemetryKpiError) -> HTTPException:
    detail = ErrorDetail(
        kind=exc.kind,
        message=str(exc),
        available=getattr(exc, "available", []),
    )
    return HTTPException(status_code=_status_for(exc), detail=detail.model_dump())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@app.post("/api/summary", response_model=SummaryResponse)
def summary(req: SummaryRequest) -> SummaryResponse:
    """Segment one telemetry file and return its session summary."""
    try:
        analysis = KpiService().summarize(req)
    except TelemetryKpiError as exc:
        raise _http_error(exc) from exc
    return SummaryResponse(**analysis.summary.to_dict())


@app.post("/api/compare", response_model=CompareResponse)
def compare(req: CompareRequest) -> CompareResponse:
    """Compare two laps and optionally write the comparison artifacts."""
    try:
        result, artifacts = KpiService().compare(req)
    except TelemetryKpiError as exc:
        raise _http_error(exc) from exc
    return CompareResponse(result=result.to_dict(), artifacts=artifacts)


@app.get("/api/tracks", response_model=TracksResponse)
def tracks(cuts_dir: str | None = None) -> TracksResponse:
    """List the track slugs that have a cuts file."""
    try:
        store = KpiService().store(cuts_dir)
    except TelemetryKpiError as exc:
        raise _http_error(exc) from exc
    return TracksResponse(
        cuts_dir=str(store.cuts_dir),
        default_track=store.fallback_slug,
        tracks=store.available(),
    )
