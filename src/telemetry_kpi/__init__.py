"""Lap segmentation, theoretical-best and comparison engine for session telemetry."""

__version__ = "0.1.0"

from telemetry_kpi.pipeline import build_session_summary, compare  # noqa: E402

__all__ = ["__version__", "build_session_summary", "compare"]
