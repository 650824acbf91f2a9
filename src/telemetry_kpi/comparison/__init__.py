"""Lap-vs-lap and lap-vs-theoretical comparisons across one or two sessions."""

from telemetry_kpi.comparison.delta import DeltaCalculator
from telemetry_kpi.comparison.engine import ComparisonEngine, compare_sessions
from telemetry_kpi.comparison.models import (
    ComparableLap,
    ComparisonResult,
    DeltaSeries,
    RealLap,
    SectorDelta,
    TheoreticalLap,
)
from telemetry_kpi.comparison.modes import (
    FASTEST,
    MODE_SPECS,
    THEORETICAL,
    ComparisonMode,
    ModeSpec,
    ResolvedComparison,
    SideKind,
    parse_selector,
    resolve_mode,
    resolve_request,
    validate_request,
)

__all__ = [
    "FASTEST",
    "MODE_SPECS",
    "THEORETICAL",
    "ComparableLap",
    "ComparisonEngine",
    "ComparisonMode",
    "ComparisonResult",
    "DeltaCalculator",
    "DeltaSeries",
    "ModeSpec",
    "RealLap",
    "ResolvedComparison",
    "SectorDelta",
    "SideKind",
    "TheoreticalLap",
    "compare_sessions",
    "parse_selector",
    "resolve_mode",
    "resolve_request",
    "validate_request",
]
