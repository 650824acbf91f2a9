"""Report generation: JSON artifacts and the Markdown comparison report."""

from telemetry_kpi.reporting.artifacts import (
    REPORT_NAME,
    UI_ARTIFACTS_NAME,
    write_comparison_artifacts,
    write_json,
    write_session_summary,
)
from telemetry_kpi.reporting.formatter import MarkdownFormatter

__all__ = [
    "REPORT_NAME",
    "UI_ARTIFACTS_NAME",
    "MarkdownFormatter",
    "write_comparison_artifacts",
    "write_json",
    "write_session_summary",
]
