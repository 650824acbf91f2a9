"""Lap segmentation, theoretical best and session summaries."""

from telemetry_kpi.analysis.models import (
    Lap,
    LapTrace,
    SessionSummary,
    TheoreticalBest,
    TracePoint,
    format_lap_time,
)
from telemetry_kpi.analysis.segmenter import LapSegmenter
from telemetry_kpi.analysis.summary import (
    SessionAnalysis,
    SessionSummaryBuilder,
    build_session_summary,
)
from telemetry_kpi.analysis.theoretical import TheoreticalBestCalculator

__all__ = [
    "Lap",
    "LapSegmenter",
    "LapTrace",
    "SessionAnalysis",
    "SessionSummary",
    "SessionSummaryBuilder",
    "TheoreticalBest",
    "TheoreticalBestCalculator",
    "TracePoint",
    "build_session_summary",
    "format_lap_time",
]
