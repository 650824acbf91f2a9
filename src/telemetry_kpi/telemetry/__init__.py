"""Telemetry file ingestion.

Public API
----------
TelemetrySample     - single row of a session log
ParsedTelemetry     - samples plus skipped-row count and preamble metadata
TelemetryFileParser - plain-text session log → ParsedTelemetry
"""

from telemetry_kpi.telemetry.models import ParsedTelemetry, TelemetrySample
from telemetry_kpi.telemetry.parser import TelemetryFileParser

__all__ = [
    "ParsedTelemetry",
    "TelemetryFileParser",
    "TelemetrySample",
]
