"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel

from telemetry_kpi import __version__


class TrackSource(BaseModel):
    """Where to find the track cuts: an explicit file, or a name looked up in a directory."""

    cuts_path: str | None = None
    track: str | None = None
    cuts_dir: str | None = None


class SummaryRequest(TrackSource):
    telemetry_path: str


class CompareRequest(TrackSource):
    mode: str = "auto"
    file_a: str
    file_b: str | None = None
    lap_a: int | str | None = None
    lap_b: int | str | None = None
    output_dir: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str = __version__


class SummaryResponse(BaseModel):
    session: dict
    theoretical_best: dict | None = None


class CompareResponse(BaseModel):
    result: dict
    artifacts: dict[str, str] = {}


class TracksResponse(BaseModel):
    cuts_dir: str
    default_track: str | None
    tracks: list[str]


class ErrorDetail(BaseModel):
    kind: str
    message: str
    available: list[str] = []
